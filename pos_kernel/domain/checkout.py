"""
Checkout types (``pos_kernel.domain.checkout``).

Responsibility
--------------
Pure value objects for the checkout state machine and the typed outcomes
returned by ``CheckoutCoordinator.submit_cart``.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* ``CHECKOUT_TRANSITIONS`` defines the only valid state transitions.
  COMMITTED has no outgoing edges.
* A CheckoutOutcome carries exactly one payload matching its status:
  ``sale`` for COMMITTED, ``rejection`` for REJECTED, ``violation`` for
  INTEGRITY_VIOLATION, ``noop`` for EMPTY_CART_NOOP.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from pos_kernel.domain.inventory import StockAlert
from pos_kernel.domain.pricing import PaymentMethod, TenderStatus
from pos_kernel.domain.sale import Sale


class CheckoutState(str, Enum):
    """States of one checkout attempt."""

    OPEN = "open"
    VALIDATING = "validating"
    REJECTED = "rejected"
    COMMITTED = "committed"


CHECKOUT_TRANSITIONS: dict[CheckoutState, frozenset[CheckoutState]] = {
    CheckoutState.OPEN: frozenset({CheckoutState.VALIDATING}),
    CheckoutState.VALIDATING: frozenset({
        CheckoutState.REJECTED,
        CheckoutState.COMMITTED,
    }),
    CheckoutState.REJECTED: frozenset({CheckoutState.OPEN}),
    CheckoutState.COMMITTED: frozenset(),
}

TERMINAL_CHECKOUT_STATES: frozenset[CheckoutState] = frozenset({
    CheckoutState.COMMITTED,
})


def can_transition(from_state: CheckoutState, to_state: CheckoutState) -> bool:
    return to_state in CHECKOUT_TRANSITIONS.get(from_state, frozenset())


class OutcomeStatus(str, Enum):
    """What ``submit_cart`` did."""

    COMMITTED = "committed"
    REJECTED = "rejected"
    EMPTY_CART_NOOP = "empty_cart_noop"
    INTEGRITY_VIOLATION = "integrity_violation"


@dataclass(frozen=True)
class ValidationRejection:
    """Cash tender missing, unreadable or below the total. Recoverable by the operator."""

    code: str
    payment_method: PaymentMethod
    total: Decimal
    tendered: Decimal | None
    tender_status: TenderStatus
    shortfall: Decimal

    @property
    def message(self) -> str:
        if self.tender_status is TenderStatus.INVALID_TENDER:
            return f"Cash tender is not a valid amount for total {self.total}"
        if self.tendered is None:
            return f"Cash tender required for total {self.total}"
        return f"Cash tender {self.tendered} is short of total {self.total} by {self.shortfall}"


@dataclass(frozen=True)
class EmptyCartNoop:
    """Checkout requested on an empty cart. Not an error."""

    reason: str = "cart is empty"


@dataclass(frozen=True)
class IntegrityViolation:
    """An integrity error aborted the sale before any ledger append."""

    code: str
    message: str
    invariant: str
    product_id: str | None = None
    sale_id: str | None = None


@dataclass(frozen=True)
class CheckoutOutcome:
    """
    Typed result of ``submit_cart``.

    ``receipt`` holds whatever the receipt renderer returned, or None when
    no renderer is wired or it failed. ``stock_alerts`` lists the alerts
    raised by the committed sale (dispatch is best-effort).
    """

    status: OutcomeStatus
    state: CheckoutState
    sale: Sale | None = None
    rejection: ValidationRejection | None = None
    violation: IntegrityViolation | None = None
    noop: EmptyCartNoop | None = None
    stock_alerts: tuple[StockAlert, ...] = ()
    receipt: Any = None

    @property
    def committed(self) -> bool:
        return self.status is OutcomeStatus.COMMITTED

    @classmethod
    def committed_with(
        cls,
        sale: Sale,
        stock_alerts: tuple[StockAlert, ...] = (),
        receipt: Any = None,
    ) -> CheckoutOutcome:
        return cls(
            status=OutcomeStatus.COMMITTED,
            state=CheckoutState.COMMITTED,
            sale=sale,
            stock_alerts=stock_alerts,
            receipt=receipt,
        )

    @classmethod
    def rejected(cls, rejection: ValidationRejection) -> CheckoutOutcome:
        return cls(
            status=OutcomeStatus.REJECTED,
            state=CheckoutState.OPEN,
            rejection=rejection,
        )

    @classmethod
    def empty_cart(cls) -> CheckoutOutcome:
        return cls(
            status=OutcomeStatus.EMPTY_CART_NOOP,
            state=CheckoutState.OPEN,
            noop=EmptyCartNoop(),
        )

    @classmethod
    def integrity_violation(cls, violation: IntegrityViolation) -> CheckoutOutcome:
        return cls(
            status=OutcomeStatus.INTEGRITY_VIOLATION,
            state=CheckoutState.OPEN,
            violation=violation,
        )
