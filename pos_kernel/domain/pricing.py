"""
Pricing & Tender Calculator.

Responsibility:
    Computes the tax-inclusive subtotal of a cart, decomposes a fixed total
    into base + tax for presentation, classifies cash tender and computes
    change, and decides whether a checkout may commit for a payment method.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Called by TerminalSession (inline change preview), the checkout
    coordinator (commit guard) and the reporting module (tax lines).

Invariants enforced:
    TOTAL_RECONCILES -- ``subtotal`` is the sum of unit_price * quantity,
        rounded once at the final currency precision.
    NON_NEGATIVE_CHANGE -- ``check_tender`` blocks a cash commit while the
        tender is missing or below the total.
    - ``tax_decomposition`` is presentation-only: ``base + tax == total``
      exactly, and it never feeds back into what is owed.

Failure modes:
    - ValueError for a negative tax rate.
    - ValueError for a tender that is not a number or has sub-cent
      precision (``compute_change`` and ``check_tender``).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from pos_kernel.domain.cart import Cart
from pos_kernel.domain.money import ZERO, round_money, to_decimal, to_money

DEFAULT_TAX_RATE = Decimal("0.18")


class PaymentMethod(str, Enum):
    """How the customer pays. Display labels live at the reporting boundary."""

    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"
    MOBILE_WALLET = "mobile_wallet"

    @property
    def requires_tender(self) -> bool:
        """Only cash collects and validates a tendered amount."""
        return self is PaymentMethod.CASH


class TenderStatus(str, Enum):
    """Classification of an entered (or missing) cash tender."""

    NOT_ENTERED = "not_entered"
    SUFFICIENT = "sufficient"
    PAYMENT_INSUFFICIENT = "payment_insufficient"
    INVALID_TENDER = "invalid_tender"


@dataclass(frozen=True)
class ChangeResult:
    """
    Outcome of ``compute_change``.

    ``change`` is None when no tender was entered; that is a distinct state
    from an entered-but-insufficient tender (negative ``change``).
    """

    status: TenderStatus
    tendered: Decimal | None
    total: Decimal
    change: Decimal | None

    @property
    def is_sufficient(self) -> bool:
        return self.status is TenderStatus.SUFFICIENT

    @property
    def shortfall(self) -> Decimal:
        """Amount still owed; zero unless the tender is insufficient."""
        if self.change is None or self.change >= 0:
            return ZERO
        return -self.change


@dataclass(frozen=True)
class TaxBreakdown:
    """Base and tax portions of a tax-inclusive total."""

    total: Decimal
    rate: Decimal
    base: Decimal
    tax: Decimal


@dataclass(frozen=True)
class TenderCheck:
    """
    Commit guard for one payment method.

    ``allowed`` is False only for cash with a missing or short tender.
    For non-cash methods ``change`` is None and ``tendered`` is ignored.
    """

    payment_method: PaymentMethod
    allowed: bool
    change: ChangeResult | None


def subtotal(cart: Cart) -> Decimal:
    """Sum of unit_price * quantity, rounded at currency precision."""
    raw = sum((line.unit_price * line.quantity for line in cart.lines), ZERO)
    return round_money(raw)


def compute_change(tendered: Decimal | str | int | float | None, total: Decimal) -> ChangeResult:
    """Classify a tender against a total and compute the change."""
    total = round_money(to_decimal(total))
    if tendered is None:
        return ChangeResult(
            status=TenderStatus.NOT_ENTERED,
            tendered=None,
            total=total,
            change=None,
        )
    amount = to_money(tendered)
    change = amount - total
    status = (
        TenderStatus.PAYMENT_INSUFFICIENT if change < 0 else TenderStatus.SUFFICIENT
    )
    return ChangeResult(status=status, tendered=amount, total=total, change=change)


def tax_decomposition(total: Decimal, rate: Decimal = DEFAULT_TAX_RATE) -> TaxBreakdown:
    """
    Split a tax-inclusive total into base and tax.

    ``base = total / (1 + rate)`` rounded to currency precision and
    ``tax = total - base``, so the two always add back to ``total``.
    """
    rate = to_decimal(rate)
    if rate < 0:
        raise ValueError(f"Tax rate must be >= 0, got {rate}")
    total = round_money(to_decimal(total))
    base = round_money(total / (Decimal("1") + rate))
    return TaxBreakdown(total=total, rate=rate, base=base, tax=total - base)


def check_tender(
    payment_method: PaymentMethod,
    tendered: Decimal | str | int | float | None,
    total: Decimal,
) -> TenderCheck:
    """
    Decide whether a checkout may commit.

    Cash commits only with a tender covering the total. Every other
    method bypasses tender collection and validation entirely.
    """
    if not payment_method.requires_tender:
        return TenderCheck(payment_method=payment_method, allowed=True, change=None)
    change = compute_change(tendered, total)
    return TenderCheck(
        payment_method=payment_method,
        allowed=change.is_sufficient,
        change=change,
    )
