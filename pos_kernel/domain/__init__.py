"""
Pure domain layer.

This module contains immutable value objects and pure functions with NO
dependencies on:
- Persistence or shared state
- Time/clock (except the injectable Clock abstraction)
- I/O

All domain objects are immutable and deterministic.
"""

from pos_kernel.domain.cart import (
    DEFAULT_CART_POLICY,
    Cart,
    CartLine,
    CartPolicy,
    add_line,
    adjust_quantity,
    clear,
    remove_line,
)
from pos_kernel.domain.catalog import CatalogSnapshot, Product, ProductCategory
from pos_kernel.domain.checkout import (
    CHECKOUT_TRANSITIONS,
    CheckoutOutcome,
    CheckoutState,
    EmptyCartNoop,
    IntegrityViolation,
    OutcomeStatus,
    ValidationRejection,
)
from pos_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from pos_kernel.domain.inventory import (
    ReconciliationResult,
    StockAlert,
    get_critical_stock,
    reconcile,
)
from pos_kernel.domain.money import format_amount, round_money, to_decimal, to_money
from pos_kernel.domain.pricing import (
    DEFAULT_TAX_RATE,
    ChangeResult,
    PaymentMethod,
    TaxBreakdown,
    TenderCheck,
    TenderStatus,
    check_tender,
    compute_change,
    subtotal,
    tax_decomposition,
)
from pos_kernel.domain.sale import Sale

__all__ = [
    # Catalog
    "CatalogSnapshot",
    "Product",
    "ProductCategory",
    # Cart builder
    "Cart",
    "CartLine",
    "CartPolicy",
    "DEFAULT_CART_POLICY",
    "add_line",
    "adjust_quantity",
    "clear",
    "remove_line",
    # Pricing & tender
    "ChangeResult",
    "DEFAULT_TAX_RATE",
    "PaymentMethod",
    "TaxBreakdown",
    "TenderCheck",
    "TenderStatus",
    "check_tender",
    "compute_change",
    "subtotal",
    "tax_decomposition",
    # Sale & checkout
    "Sale",
    "CHECKOUT_TRANSITIONS",
    "CheckoutOutcome",
    "CheckoutState",
    "EmptyCartNoop",
    "IntegrityViolation",
    "OutcomeStatus",
    "ValidationRejection",
    # Inventory
    "ReconciliationResult",
    "StockAlert",
    "get_critical_stock",
    "reconcile",
    # Infrastructure
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "format_amount",
    "round_money",
    "to_decimal",
    "to_money",
]
