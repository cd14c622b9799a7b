"""
Inventory -- pure stock reconciliation and critical-stock detection.

Responsibility:
    Applies the sold quantities of one sale to a product list, producing
    replacement Products, and reports which products newly entered the
    critical band (``stock <= min_stock``).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Called by InventoryReconciler (services), which adds logging and alert
    dispatch.

Invariants enforced:
    STOCK_LOCKSTEP -- all-or-nothing per sale: every line's product is
        resolved before any replacement is produced. One unknown product
        aborts the whole reconciliation with UnknownProductError.
    CRITICAL_STOCK_DERIVED -- the critical set is recomputed from the
        replacement products after every reconciliation.
    - Alerts are edge-triggered: a product that was already critical
      before the deduction yields no alert.

Failure modes:
    - UnknownProductError when a line references a product_id absent from
      the product list.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pos_kernel.domain.cart import CartLine
from pos_kernel.domain.catalog import Product
from pos_kernel.exceptions import UnknownProductError


@dataclass(frozen=True)
class StockAlert:
    """Event sent to the notification sink when a product turns critical."""

    product_id: str
    name: str
    stock: int
    min_stock: int

    @classmethod
    def for_product(cls, product: Product) -> StockAlert:
        return cls(
            product_id=product.product_id,
            name=product.name,
            stock=product.stock,
            min_stock=product.min_stock,
        )

    def as_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "name": self.name,
            "stock": self.stock,
            "minStock": self.min_stock,
        }


@dataclass(frozen=True)
class ReconciliationResult:
    """Replacement product list plus the alerts it triggers."""

    products: tuple[Product, ...]
    changed: tuple[Product, ...]
    alerts: tuple[StockAlert, ...]

    @property
    def oversold(self) -> tuple[Product, ...]:
        """Changed products whose stock went below zero."""
        return tuple(p for p in self.changed if p.stock < 0)


def get_critical_stock(products: Iterable[Product]) -> list[Product]:
    """Products at or below their minimum stock, in catalog order."""
    return [p for p in products if p.is_critical]


def reconcile(products: Sequence[Product], lines: Iterable[CartLine]) -> ReconciliationResult:
    """
    Deduct sold quantities from stock in a single pass.

    Lines for the same product accumulate. The original Products are never
    modified; changed entries are replaced with ``with_stock`` copies and
    every other entry is carried over unchanged, in the original order.
    """
    by_id = {p.product_id: p for p in products}

    sold: dict[str, int] = {}
    for line in lines:
        # INVARIANT: STOCK_LOCKSTEP -- resolve every line before producing anything
        if line.product_id not in by_id:
            raise UnknownProductError(line.product_id)
        sold[line.product_id] = sold.get(line.product_id, 0) + line.quantity

    critical_before = {p.product_id for p in get_critical_stock(products)}

    replaced: list[Product] = []
    changed: list[Product] = []
    for product in products:
        quantity = sold.get(product.product_id)
        if quantity is None:
            replaced.append(product)
            continue
        updated = product.with_stock(product.stock - quantity)
        replaced.append(updated)
        changed.append(updated)

    alerts = tuple(
        StockAlert.for_product(p)
        for p in get_critical_stock(replaced)
        if p.product_id not in critical_before
    )
    return ReconciliationResult(
        products=tuple(replaced),
        changed=tuple(changed),
        alerts=alerts,
    )
