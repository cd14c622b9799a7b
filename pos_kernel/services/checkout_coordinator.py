"""
CheckoutCoordinator -- finalizes a cart into an immutable Sale.

Responsibility:
    Drives one checkout attempt through the state machine
    OPEN -> VALIDATING -> REJECTED | COMMITTED. On commit it allocates a
    sale id, stamps the time, snapshots the cart into a Sale, appends the
    sale and the reconciled stock to the TerminalStore as one unit, then
    dispatches stock alerts and renders the receipt.

Architecture position:
    Kernel > Services -- the only multi-step operation in the kernel.
    Collaborators (store, reconciler, clock, id allocator, receipt
    renderer) are injected; the kernel never imports the reporting
    module, it only calls the ``receipt_renderer`` it was given.

Invariants enforced:
    STOCK_LOCKSTEP -- ledger append and stock reconciliation happen inside
        ``TerminalStore.commit_sale``; both are published or neither is.
    NON_NEGATIVE_CHANGE -- a cash checkout with a missing or short tender
        is REJECTED before any id is allocated.
    SALE_IMMUTABLE -- the Sale is built once from the cart snapshot.
    - Checkout-time failures are returned as typed CheckoutOutcome values,
      never raised past this class.

Failure modes:
    - Empty cart -> EMPTY_CART_NOOP outcome, state stays OPEN.
    - Insufficient cash -> REJECTED outcome, state back to OPEN, nothing
      recorded; a retry has no leftover side effects.
    - Unreadable or sub-cent cash tender -> REJECTED outcome with
      INVALID_TENDER, same as an insufficient tender.
    - Unknown payment method -> ValueError before the attempt starts.
    - Any unexpected error (clock, id allocator) -> logged and re-raised;
      the state is returned to OPEN so the terminal can keep selling.
    - UnknownProductError / SaleIdCollisionError -> INTEGRITY_VIOLATION
      outcome, nothing recorded.
    - Receipt renderer or notification sink failure -> logged; the
      committed sale stands.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from typing import Any

from pos_kernel.domain.cart import Cart
from pos_kernel.domain.checkout import (
    CheckoutOutcome,
    CheckoutState,
    IntegrityViolation,
    ValidationRejection,
    can_transition,
)
from pos_kernel.domain.clock import Clock, SystemClock
from pos_kernel.domain.pricing import PaymentMethod, TenderStatus, check_tender
from pos_kernel.domain.sale import Sale
from pos_kernel.exceptions import (
    IntegrityViolationError,
    InvalidCheckoutTransitionError,
)
from pos_kernel.logging_config import LogContext, get_logger
from pos_kernel.services.inventory_reconciler import InventoryReconciler
from pos_kernel.services.sale_ids import SaleIdAllocator
from pos_kernel.services.terminal_store import TerminalStore

logger = get_logger("services.checkout")

ReceiptRenderer = Callable[[Sale], Any]


class CheckoutCoordinator:
    """
    Checkout state machine for one terminal session.

    Contract:
        ``submit_cart`` always resolves synchronously to a CheckoutOutcome.
        The coordinator's ``state`` is OPEN between attempts.

    Guarantees:
        - A REJECTED or INTEGRITY_VIOLATION attempt leaves the store
          exactly as it was.
        - A COMMITTED attempt appends exactly one Sale.

    Non-goals:
        - Does NOT own the cart; the caller clears it after COMMITTED.
        - Does NOT retry failed notifications or receipts.
    """

    def __init__(
        self,
        store: TerminalStore,
        *,
        reconciler: InventoryReconciler | None = None,
        clock: Clock | None = None,
        id_allocator: SaleIdAllocator | None = None,
        receipt_renderer: ReceiptRenderer | None = None,
    ):
        self._store = store
        self._reconciler = reconciler or InventoryReconciler()
        self._clock = clock or SystemClock()
        self._ids = id_allocator or SaleIdAllocator()
        self._receipt_renderer = receipt_renderer
        self._state = CheckoutState.OPEN

    @property
    def state(self) -> CheckoutState:
        return self._state

    def submit_cart(
        self,
        cart: Cart,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        tendered: Decimal | str | int | float | None = None,
        customer_id: str | None = None,
    ) -> CheckoutOutcome:
        """
        Finalize ``cart`` into a Sale, or explain why not.

        Returns:
            CheckoutOutcome with status COMMITTED, REJECTED,
            EMPTY_CART_NOOP or INTEGRITY_VIOLATION.
        """
        if cart.is_empty:
            logger.info("checkout_empty_cart_noop")
            return CheckoutOutcome.empty_cart()

        # Raises ValueError for an unknown method; state is still OPEN here.
        payment_method = PaymentMethod(payment_method)

        self._transition(CheckoutState.VALIDATING)
        try:
            return self._validate_and_commit(cart, payment_method, tendered, customer_id)
        except Exception:
            logger.error("checkout_aborted", exc_info=True)
            raise
        finally:
            # Every attempt ends OPEN, whatever happened inside it.
            self._state = CheckoutState.OPEN

    def _validate_and_commit(
        self,
        cart: Cart,
        payment_method: PaymentMethod,
        tendered: Decimal | str | int | float | None,
        customer_id: str | None,
    ) -> CheckoutOutcome:
        total = cart.total

        try:
            tender = check_tender(payment_method, tendered, total)
        except ValueError:
            return self._reject(
                ValidationRejection(
                    code=TenderStatus.INVALID_TENDER.name,
                    payment_method=payment_method,
                    total=total,
                    tendered=None,
                    tender_status=TenderStatus.INVALID_TENDER,
                    shortfall=total,
                )
            )
        if not tender.allowed:
            change = tender.change
            return self._reject(
                ValidationRejection(
                    code=change.status.name,
                    payment_method=payment_method,
                    total=total,
                    tendered=change.tendered,
                    tender_status=change.status,
                    shortfall=change.shortfall,
                )
            )

        timestamp = self._clock.now()
        sale_id = self._ids.next_id(timestamp)
        change = tender.change
        sale = Sale.from_cart(
            sale_id=sale_id,
            timestamp=timestamp,
            cart=cart,
            payment_method=payment_method,
            customer_id=customer_id,
            tendered=change.tendered if change else None,
            change=change.change if change else None,
        )

        with LogContext.bind(sale_id=sale_id):
            try:
                _, result = self._store.commit_sale(sale, self._reconciler.reconcile)
            except IntegrityViolationError as exc:
                self._transition(CheckoutState.REJECTED)
                self._transition(CheckoutState.OPEN)
                logger.error("checkout_integrity_violation", exc_info=True)
                return CheckoutOutcome.integrity_violation(
                    IntegrityViolation(
                        code=exc.code,
                        message=str(exc),
                        invariant=exc.invariant.value,
                        product_id=getattr(exc, "product_id", None),
                        sale_id=sale_id,
                    )
                )

            self._transition(CheckoutState.COMMITTED)
            logger.info(
                "checkout_committed",
                extra={
                    "total": sale.total,
                    "payment_method": payment_method,
                    "line_count": len(sale.lines),
                    "change": sale.change,
                },
            )

            self._reconciler.dispatch_alerts(result.alerts)
            receipt = self._render_receipt(sale)

        return CheckoutOutcome.committed_with(
            sale,
            stock_alerts=result.alerts,
            receipt=receipt,
        )

    def _reject(self, rejection: ValidationRejection) -> CheckoutOutcome:
        self._transition(CheckoutState.REJECTED)
        self._transition(CheckoutState.OPEN)
        logger.info(
            "checkout_rejected",
            extra={
                "reason": rejection.code,
                "total": rejection.total,
                "tendered": rejection.tendered,
                "shortfall": rejection.shortfall,
            },
        )
        return CheckoutOutcome.rejected(rejection)

    def _render_receipt(self, sale: Sale) -> Any:
        if self._receipt_renderer is None:
            return None
        try:
            return self._receipt_renderer(sale)
        except Exception:
            logger.error("receipt_render_failed", exc_info=True)
            return None

    def _transition(self, to_state: CheckoutState) -> None:
        if not can_transition(self._state, to_state):
            raise InvalidCheckoutTransitionError(self._state.value, to_state.value)
        self._state = to_state
