"""
Cart Builder -- incremental construction of pending line items.

Responsibility:
    Builds an immutable Cart from catalog Products. Every operation returns
    a new Cart; the input cart is never modified. Lines carry a snapshot of
    price, name, capacity and stock taken when the product was first added,
    so a catalog edit cannot retroactively change an open cart.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Driven by TerminalSession; consumed by pricing and the checkout
    coordinator.

Invariants enforced:
    NO_EMPTY_LINES -- a line whose quantity would fall to <= 0 is removed.
        ``adjust_quantity`` is the only path that removes a line by
        quantity.
    - At most one line per product_id.
    - quantity never exceeds the line cap derived from CartPolicy.

Failure modes:
    None. All operations are total: an unknown product_id or a request past
    the quantity cap returns an unchanged (or clamped) cart.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace
from decimal import Decimal

from pos_kernel.domain.catalog import Product
from pos_kernel.domain.money import round_money


@dataclass(frozen=True)
class CartPolicy:
    """
    Upper bound for line quantities.

    A line is capped at ``max_line_quantity``; with ``cap_by_stock`` it is
    additionally capped at the product stock recorded when the line was
    created.
    """

    max_line_quantity: int = 99
    cap_by_stock: bool = True

    def __post_init__(self) -> None:
        if self.max_line_quantity < 1:
            raise ValueError("max_line_quantity must be >= 1")

    def cap_for(self, stock: int) -> int:
        if self.cap_by_stock:
            return max(0, min(self.max_line_quantity, stock))
        return self.max_line_quantity


DEFAULT_CART_POLICY = CartPolicy()


@dataclass(frozen=True, slots=True)
class CartLine:
    """A pending line: product reference, quantity and add-time snapshot."""

    product_id: str
    name: str
    capacity: str
    unit_price: Decimal
    quantity: int
    stock_at_add: int
    cap: int

    @classmethod
    def from_product(cls, product: Product, policy: CartPolicy) -> CartLine:
        return cls(
            product_id=product.product_id,
            name=product.name,
            capacity=product.capacity,
            unit_price=product.price,
            quantity=1,
            stock_at_add=product.stock,
            cap=policy.cap_for(product.stock),
        )

    @property
    def line_total(self) -> Decimal:
        """Unrounded unit_price * quantity."""
        return self.unit_price * self.quantity

    @property
    def at_cap(self) -> bool:
        return self.quantity >= self.cap


@dataclass(frozen=True)
class Cart:
    """Ordered sequence of CartLines, at most one per product_id."""

    lines: tuple[CartLine, ...] = ()

    @classmethod
    def empty(cls) -> Cart:
        return cls()

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        """Total units across all lines."""
        return sum(line.quantity for line in self.lines)

    @property
    def total(self) -> Decimal:
        return round_money(sum((line.line_total for line in self.lines), Decimal("0")))

    def line_for(self, product_id: str) -> CartLine | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None


def add_line(cart: Cart, product: Product, policy: CartPolicy = DEFAULT_CART_POLICY) -> Cart:
    """
    Add one unit of ``product``.

    Increments the existing line for the product, or appends a new line
    with quantity 1. A line already at its cap, or a product whose cap is
    zero (no stock under ``cap_by_stock``), leaves the cart unchanged.
    """
    existing = cart.line_for(product.product_id)
    if existing is None:
        line = CartLine.from_product(product, policy)
        if line.cap < 1:
            return cart
        return Cart(cart.lines + (line,))
    return _set_quantity(cart, existing, existing.quantity + 1)


def adjust_quantity(cart: Cart, product_id: str, delta: int) -> Cart:
    """
    Change a line's quantity by ``delta``.

    A resulting quantity <= 0 removes the line. Quantities above the line
    cap are clamped to the cap. Unknown product ids leave the cart as-is.
    """
    existing = cart.line_for(product_id)
    if existing is None:
        return cart
    new_quantity = existing.quantity + delta
    if new_quantity <= 0:
        return remove_line(cart, product_id)
    return _set_quantity(cart, existing, new_quantity)


def remove_line(cart: Cart, product_id: str) -> Cart:
    """Remove a line regardless of its quantity."""
    if cart.line_for(product_id) is None:
        return cart
    return Cart(tuple(line for line in cart.lines if line.product_id != product_id))


def clear() -> Cart:
    """Return the empty cart (after a committed or abandoned checkout)."""
    return Cart.empty()


def _set_quantity(cart: Cart, line: CartLine, quantity: int) -> Cart:
    quantity = min(quantity, line.cap)
    if quantity == line.quantity:
        return cart
    updated = replace(line, quantity=quantity)
    return Cart(
        tuple(updated if l.product_id == line.product_id else l for l in cart.lines)
    )
