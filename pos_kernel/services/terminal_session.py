"""
TerminalSession -- the open cart and tender of one till.

Responsibility:
    Holds the mutable session context around the immutable Cart: the
    current cart, the selected payment method, the entered cash tender and
    an optional customer id. Translates operator actions into Cart Builder
    calls against the store's current catalog and hands the finished cart
    to the CheckoutCoordinator.

Architecture position:
    Kernel > Services -- thin session shell around the pure cart builder.
    Exactly one session per process is assumed.

Invariants enforced:
    - The cart is replaced only after COMMITTED (or an explicit cancel);
      a REJECTED attempt keeps cart and tender so the operator can
      correct the tender and retry.
    - ``change_preview`` exposes the insufficient-cash state before a
      commit is attempted.

Failure modes:
    - UnknownProductError from ``add_product`` when the id is not in the
      current catalog.
"""

from __future__ import annotations

from decimal import Decimal

from pos_kernel.domain import cart as cart_builder
from pos_kernel.domain.cart import DEFAULT_CART_POLICY, Cart, CartPolicy
from pos_kernel.domain.checkout import CheckoutOutcome
from pos_kernel.domain.money import to_money
from pos_kernel.domain.pricing import ChangeResult, PaymentMethod, compute_change
from pos_kernel.logging_config import get_logger
from pos_kernel.services.checkout_coordinator import CheckoutCoordinator
from pos_kernel.services.terminal_store import TerminalStore

logger = get_logger("services.terminal_session")


class TerminalSession:
    """Operator-facing session over one store and one coordinator."""

    def __init__(
        self,
        store: TerminalStore,
        coordinator: CheckoutCoordinator,
        policy: CartPolicy = DEFAULT_CART_POLICY,
    ):
        self._store = store
        self._coordinator = coordinator
        self._policy = policy
        self._cart = Cart.empty()
        self._payment_method = PaymentMethod.CASH
        self._tendered: Decimal | None = None
        self._customer_id: str | None = None

    # =========================================================================
    # Session state
    # =========================================================================

    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def payment_method(self) -> PaymentMethod:
        return self._payment_method

    @property
    def tendered(self) -> Decimal | None:
        return self._tendered

    @property
    def customer_id(self) -> str | None:
        return self._customer_id

    # =========================================================================
    # Cart building
    # =========================================================================

    def add_product(self, product_id: str) -> Cart:
        product = self._store.catalog.require(product_id)
        self._cart = cart_builder.add_line(self._cart, product, self._policy)
        return self._cart

    def adjust_quantity(self, product_id: str, delta: int) -> Cart:
        self._cart = cart_builder.adjust_quantity(self._cart, product_id, delta)
        return self._cart

    def remove_line(self, product_id: str) -> Cart:
        self._cart = cart_builder.remove_line(self._cart, product_id)
        return self._cart

    def cancel(self) -> None:
        """Abandon the open cart and any entered tender."""
        logger.info("session_cart_cancelled", extra={"line_count": len(self._cart)})
        self._reset()

    # =========================================================================
    # Payment
    # =========================================================================

    def select_payment_method(self, method: PaymentMethod) -> None:
        self._payment_method = PaymentMethod(method)

    def enter_tender(self, amount: Decimal | str | int | float | None) -> ChangeResult:
        """Record the cash offered; None clears it. Sub-cent amounts raise ValueError."""
        self._tendered = None if amount is None else to_money(amount)
        return self.change_preview()

    def set_customer(self, customer_id: str | None) -> None:
        self._customer_id = customer_id

    def change_preview(self) -> ChangeResult:
        """Change against the current cart total, shown inline before commit."""
        return compute_change(self._tendered, self._cart.total)

    # =========================================================================
    # Checkout
    # =========================================================================

    def checkout(self) -> CheckoutOutcome:
        outcome = self._coordinator.submit_cart(
            self._cart,
            payment_method=self._payment_method,
            tendered=self._tendered,
            customer_id=self._customer_id,
        )
        if outcome.committed:
            self._reset()
        return outcome

    def _reset(self) -> None:
        self._cart = cart_builder.clear()
        self._tendered = None
        self._customer_id = None
        self._payment_method = PaymentMethod.CASH
