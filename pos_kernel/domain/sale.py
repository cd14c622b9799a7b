"""
Sale -- immutable record of a committed checkout.

Responsibility:
    Captures the cart lines, total and payment details of one committed
    checkout. A Sale is created exactly once, appended to the ledger and
    never changed afterwards.

Architecture position:
    Kernel > Domain -- pure value object, zero I/O.
    Produced by the checkout coordinator; read by the reporting module.

Invariants enforced:
    SALE_IMMUTABLE -- frozen dataclass; lines are a tuple of frozen
        CartLines.
    TOTAL_RECONCILES -- construction rejects a total that differs from the
        rounded sum of its lines.
    NON_NEGATIVE_CHANGE -- a cash sale must carry tendered >= total.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from pos_kernel.domain.cart import Cart, CartLine
from pos_kernel.domain.money import ZERO, round_money
from pos_kernel.domain.pricing import PaymentMethod


@dataclass(frozen=True)
class Sale:
    """One finalized purchase."""

    sale_id: str
    timestamp: datetime
    lines: tuple[CartLine, ...]
    total: Decimal
    payment_method: PaymentMethod
    customer_id: str | None = None
    tendered: Decimal | None = None
    change: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
        if not self.lines:
            raise ValueError("Sale must have at least one line")
        expected = round_money(sum((line.line_total for line in self.lines), ZERO))
        if expected != self.total:
            raise ValueError(
                f"Sale total {self.total} does not match line sum {expected}"
            )
        if self.payment_method is PaymentMethod.CASH:
            if self.tendered is None or self.change is None or self.change < 0:
                raise ValueError("Cash sale requires tendered >= total")

    @classmethod
    def from_cart(
        cls,
        *,
        sale_id: str,
        timestamp: datetime,
        cart: Cart,
        payment_method: PaymentMethod,
        customer_id: str | None = None,
        tendered: Decimal | None = None,
        change: Decimal | None = None,
    ) -> Sale:
        """Snapshot a cart into a Sale at the instant of finalize."""
        return cls(
            sale_id=sale_id,
            timestamp=timestamp,
            lines=cart.lines,
            total=cart.total,
            payment_method=payment_method,
            customer_id=customer_id,
            tendered=tendered,
            change=change,
        )

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def quantities(self) -> dict[str, int]:
        """Sold quantity per product_id."""
        sold: dict[str, int] = {}
        for line in self.lines:
            sold[line.product_id] = sold.get(line.product_id, 0) + line.quantity
        return sold
