"""
Catalog -- Immutable product records and catalog snapshots.

Responsibility:
    Defines Product (one catalog entry) and CatalogSnapshot (the read-only,
    ordered product list a terminal works against). Stock changes never
    mutate a Product; they produce a replacement via ``with_stock``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Consumed by the cart builder (price/name snapshots), the inventory
    reconciler (stock deduction) and the reporting module.

Invariants enforced:
    CRITICAL_STOCK_DERIVED -- ``Product.is_critical`` is computed from
        ``stock`` and ``min_stock`` on every access and never stored.
    - price >= 0, cost >= 0, min_stock >= 0 at construction.
    - A CatalogSnapshot holds at most one Product per product_id.

Failure modes:
    - InvalidProductError on construction with out-of-bound fields.
    - DuplicateProductError when a snapshot would hold the same id twice.
    - UnknownProductError from ``CatalogSnapshot.require``.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from pos_kernel.domain.money import to_decimal
from pos_kernel.exceptions import (
    DuplicateProductError,
    InvalidProductError,
    UnknownProductError,
)


class ProductCategory(str, Enum):
    """Catalog categories. Display labels live at the reporting boundary."""

    BEER = "beer"
    WINE = "wine"
    SPIRITS = "spirits"
    SOFT_DRINK = "soft_drink"
    SNACK = "snack"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Product:
    """
    One catalog entry.

    Contract:
        Owned and mutated only by the external catalog collaborator.
        The kernel produces replacement Products (``with_stock``), never
        modifies one in place.

    Guarantees:
        - price and cost are non-negative Decimals.
        - min_stock is a non-negative int.
        - stock is an int. It is >= 0 when created by the catalog; a
          reconciliation may take it below zero when shelf stock was not
          recorded (see ``pos_kernel.domain.inventory``).
    """

    product_id: str
    name: str
    brand: str
    category: ProductCategory
    capacity: str
    price: Decimal
    cost: Decimal
    stock: int
    min_stock: int
    image_ref: str | None = None
    is_promo: bool = False

    def __post_init__(self) -> None:
        if not self.product_id:
            raise InvalidProductError(self.product_id, "product_id", "must be non-empty")
        if not isinstance(self.category, ProductCategory):
            try:
                object.__setattr__(self, "category", ProductCategory(self.category))
            except ValueError as e:
                raise InvalidProductError(
                    self.product_id, "category", f"unknown value {self.category!r}"
                ) from e
        for field_name in ("price", "cost"):
            try:
                amount = to_decimal(getattr(self, field_name))
            except ValueError as e:
                raise InvalidProductError(self.product_id, field_name, "is not a number") from e
            if amount < 0:
                raise InvalidProductError(self.product_id, field_name, "must be >= 0")
            object.__setattr__(self, field_name, amount)
        for field_name in ("stock", "min_stock"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidProductError(self.product_id, field_name, "must be an integer")
        if self.min_stock < 0:
            raise InvalidProductError(self.product_id, "min_stock", "must be >= 0")

    @classmethod
    def create(cls, **fields) -> Product:
        """
        Catalog-side factory: like the constructor, but also rejects
        negative stock. Use this for externally-entered products.
        """
        product = cls(**fields)
        if product.stock < 0:
            raise InvalidProductError(product.product_id, "stock", "must be >= 0")
        return product

    @property
    def is_critical(self) -> bool:
        """True when stock is at or below the minimum."""
        return self.stock <= self.min_stock

    @property
    def margin(self) -> Decimal:
        return self.price - self.cost

    def with_stock(self, new_stock: int) -> Product:
        """Return a replacement Product carrying ``new_stock``."""
        return replace(self, stock=new_stock)


@dataclass(frozen=True)
class CatalogSnapshot:
    """
    Ordered, read-only product list.

    Contract:
        Catalog order is preserved by every operation. ``replace`` and
        ``upsert``/``without`` return new snapshots.
    """

    products: tuple[Product, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "products", tuple(self.products))
        seen: set[str] = set()
        for product in self.products:
            if product.product_id in seen:
                raise DuplicateProductError(product.product_id)
            seen.add(product.product_id)

    def __iter__(self) -> Iterator[Product]:
        return iter(self.products)

    def __len__(self) -> int:
        return len(self.products)

    def __contains__(self, product_id: object) -> bool:
        return self.get(product_id) is not None  # type: ignore[arg-type]

    def get(self, product_id: str) -> Product | None:
        for product in self.products:
            if product.product_id == product_id:
                return product
        return None

    def require(self, product_id: str) -> Product:
        """Get a product or raise UnknownProductError."""
        product = self.get(product_id)
        if product is None:
            raise UnknownProductError(product_id)
        return product

    def search(
        self,
        term: str = "",
        category: ProductCategory | None = None,
    ) -> list[Product]:
        """
        Case-insensitive match on name or brand, optionally restricted to
        one category. An empty term matches everything.
        """
        needle = term.strip().lower()
        results = []
        for product in self.products:
            if category is not None and product.category != category:
                continue
            if needle and needle not in product.name.lower() and needle not in product.brand.lower():
                continue
            results.append(product)
        return results

    def upsert(self, product: Product) -> CatalogSnapshot:
        """Replace the product with the same id in place, or append it."""
        if product.product_id not in self:
            return CatalogSnapshot(self.products + (product,))
        return CatalogSnapshot(
            tuple(product if p.product_id == product.product_id else p for p in self.products)
        )

    def without(self, product_id: str) -> CatalogSnapshot:
        """Return a snapshot with ``product_id`` removed."""
        self.require(product_id)
        return CatalogSnapshot(
            tuple(p for p in self.products if p.product_id != product_id)
        )
