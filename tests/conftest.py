"""
Pytest fixtures for the POS test suite.

Provides:
- Structured logging setup and a JSON log capture fixture
- Deterministic clock
- A seeded liquor-store catalog and a TerminalStore over it
- Recording notification and document sinks
- A fully wired CheckoutCoordinator / TerminalSession / ReportingService

Everything is in memory; no fixture touches the filesystem except
``tmp_path`` users.
"""

import json
import logging
from datetime import UTC, datetime
from decimal import Decimal
from io import StringIO

import pytest

from pos_kernel.domain.cart import Cart, CartPolicy, add_line, adjust_quantity
from pos_kernel.domain.catalog import Product
from pos_kernel.domain.clock import DeterministicClock
from pos_kernel.domain.inventory import StockAlert
from pos_kernel.domain.pricing import PaymentMethod
from pos_kernel.domain.sale import Sale
from pos_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from pos_kernel.services import (
    CheckoutCoordinator,
    InventoryReconciler,
    SaleIdAllocator,
    TerminalSession,
    TerminalStore,
)
from pos_modules.reporting import ReportingConfig, ReportingService

SHIFT_TIME = datetime(2024, 6, 14, 18, 30, 0, tzinfo=UTC)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture pos_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, coordinator):
            coordinator.submit_cart(...)
            logs = captured_logs()
            assert any(r["message"] == "checkout_committed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("pos_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "concurrency: mark test as exercising the store from several threads"
    )


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(SHIFT_TIME)


# =============================================================================
# Catalog fixtures
# =============================================================================


def make_product(
    product_id: str = "P1",
    *,
    name: str | None = None,
    price: str = "10.00",
    stock: int = 50,
    min_stock: int = 5,
    category: str = "beer",
    **overrides,
) -> Product:
    """Product factory with sensible defaults."""
    return Product(
        product_id=product_id,
        name=name or f"Product {product_id}",
        brand=overrides.pop("brand", "House"),
        category=category,
        capacity=overrides.pop("capacity", "1L"),
        price=Decimal(price),
        cost=Decimal(overrides.pop("cost", "1.00")),
        stock=stock,
        min_stock=min_stock,
        **overrides,
    )


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def seed_products() -> tuple[Product, ...]:
    """
    Six-product liquor-store catalog.

    Products "2" (5 <= 8) and "6" (15 <= 15) start critical.
    """
    return (
        make_product("1", name="Corona Extra", price="25", stock=120, min_stock=24,
                     brand="Modelo", capacity="355ml", cost="18"),
        make_product("2", name="Whisky Black Label", price="850", stock=5, min_stock=8,
                     category="spirits", brand="Johnnie Walker", capacity="750ml",
                     cost="600", is_promo=True),
        make_product("3", name="Reserva Red Wine", price="180", stock=15, min_stock=10,
                     category="wine", brand="Concha y Toro", capacity="750ml", cost="120"),
        make_product("4", name="Aged Rum", price="220", stock=40, min_stock=12,
                     category="spirits", brand="Bacardi", cost="150"),
        make_product("5", name="Cola", price="35", stock=50, min_stock=20,
                     category="soft_drink", brand="Coca Cola", capacity="2L", cost="25"),
        make_product("6", name="Salted Chips", price="45", stock=15, min_stock=15,
                     category="snack", brand="Sabritas", capacity="140g", cost="30"),
    )


@pytest.fixture
def store(seed_products) -> TerminalStore:
    return TerminalStore(seed_products)


def cart_of(store: TerminalStore, *product_ids: str, policy: CartPolicy | None = None) -> Cart:
    """Build a cart by adding each id once, in order."""
    cart = Cart.empty()
    for product_id in product_ids:
        product = store.catalog.require(product_id)
        cart = add_line(cart, product, policy) if policy else add_line(cart, product)
    return cart


@pytest.fixture
def build_cart(store):
    def _build(*product_ids: str) -> Cart:
        return cart_of(store, *product_ids)

    return _build


# =============================================================================
# Sink fixtures
# =============================================================================


class RecordingNotificationSink:
    def __init__(self):
        self.alerts: list[StockAlert] = []

    def notify(self, alert: StockAlert) -> None:
        self.alerts.append(alert)


class FailingNotificationSink:
    def notify(self, alert: StockAlert) -> None:
        raise ConnectionError("notification channel down")


class RecordingDocumentSink:
    def __init__(self):
        self.documents = []

    def publish(self, document) -> None:
        self.documents.append(document)


class FailingDocumentSink:
    def publish(self, document) -> None:
        raise OSError("disk full")


@pytest.fixture
def notification_sink():
    return RecordingNotificationSink()


@pytest.fixture
def document_sink():
    return RecordingDocumentSink()


@pytest.fixture
def failing_notification_sink():
    return FailingNotificationSink()


@pytest.fixture
def failing_document_sink():
    return FailingDocumentSink()


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def reporting_config() -> ReportingConfig:
    return ReportingConfig(
        store_name="Don Bacco",
        currency_symbol="S/",
        receipt_footer="Thanks!",
        tax_rate=Decimal("0.18"),
        tax_label="IGV",
        share_footer="Sent from the till",
    )


@pytest.fixture
def reporting_service(deterministic_clock, reporting_config, document_sink) -> ReportingService:
    return ReportingService(
        clock=deterministic_clock,
        config=reporting_config,
        document_sink=document_sink,
    )


@pytest.fixture
def coordinator(store, deterministic_clock, notification_sink, reporting_service):
    return CheckoutCoordinator(
        store,
        reconciler=InventoryReconciler(sink=notification_sink),
        clock=deterministic_clock,
        id_allocator=SaleIdAllocator(),
        receipt_renderer=reporting_service.render_receipt,
    )


@pytest.fixture
def session(store, coordinator) -> TerminalSession:
    return TerminalSession(store, coordinator)


# =============================================================================
# Sale fixtures
# =============================================================================


def make_sale(
    sale_id: str,
    line_items: list[tuple[Product, int]],
    *,
    timestamp: datetime = SHIFT_TIME,
    payment_method: PaymentMethod = PaymentMethod.CARD,
) -> Sale:
    """Sale factory: card sales need no tender."""
    cart = Cart.empty()
    for product, quantity in line_items:
        cart = add_line(cart, product, CartPolicy(cap_by_stock=False))
        if quantity > 1:
            cart = adjust_quantity(cart, product.product_id, quantity - 1)
    tendered = change = None
    if payment_method is PaymentMethod.CASH:
        tendered, change = cart.total, Decimal("0.00")
    return Sale.from_cart(
        sale_id=sale_id,
        timestamp=timestamp,
        cart=cart,
        payment_method=payment_method,
        tendered=tendered,
        change=change,
    )


@pytest.fixture
def sale_factory():
    return make_sale
