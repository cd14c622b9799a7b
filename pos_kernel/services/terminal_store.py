"""
TerminalStore -- caller-owned catalog + ledger with atomic sale commits.

Responsibility:
    Holds the current catalog snapshot and the append-only sales ledger of
    one terminal as a single immutable StoreSnapshot. Readers always get a
    consistent pair; a sale commit replaces the whole snapshot in one
    reference swap. Also serves as the catalog provider: accepts
    externally-validated create/update/delete of products.

Architecture position:
    Kernel > Services -- the explicit, caller-owned store. Nothing in the
    kernel keeps implicit module-level state; the caller constructs a
    TerminalStore and passes it to the coordinator and session.

Invariants enforced:
    STOCK_LOCKSTEP -- ``commit_sale`` publishes the appended ledger and the
        reconciled catalog together under one lock; a reader observes both
        or neither.
    SALE_IMMUTABLE -- the ledger is a tuple; sales are only ever appended.
        A sale id already present raises SaleIdCollisionError before
        anything is published.

Failure modes:
    - SaleIdCollisionError on a duplicate sale id.
    - DuplicateProductError / UnknownProductError from catalog operations.
    - In-memory only; nothing survives the process.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from pos_kernel.domain import inventory
from pos_kernel.domain.cart import CartLine
from pos_kernel.domain.catalog import CatalogSnapshot, Product
from pos_kernel.domain.inventory import ReconciliationResult
from pos_kernel.domain.sale import Sale
from pos_kernel.exceptions import DuplicateProductError, SaleIdCollisionError
from pos_kernel.logging_config import get_logger

logger = get_logger("services.terminal_store")

Reconcile = Callable[[Sequence[Product], Sequence[CartLine]], ReconciliationResult]


@dataclass(frozen=True)
class StoreSnapshot:
    """One consistent view of catalog and ledger."""

    catalog: CatalogSnapshot
    sales: tuple[Sale, ...]
    version: int = 0

    def has_sale(self, sale_id: str) -> bool:
        return any(s.sale_id == sale_id for s in self.sales)


class TerminalStore:
    """
    In-memory store for one terminal.

    Contract:
        All mutations build a new StoreSnapshot and swap it in under the
        store lock. ``snapshot()`` never blocks on a half-applied change.

    Non-goals:
        - Does NOT persist across restarts.
        - Does NOT coordinate several terminals over a shared ledger.
    """

    def __init__(
        self,
        products: Iterable[Product] = (),
        sales: Iterable[Sale] = (),
    ):
        self._lock = threading.Lock()
        self._snapshot = StoreSnapshot(
            catalog=CatalogSnapshot(tuple(products)),
            sales=tuple(sales),
        )

    # =========================================================================
    # Reads
    # =========================================================================

    def snapshot(self) -> StoreSnapshot:
        return self._snapshot

    @property
    def catalog(self) -> CatalogSnapshot:
        return self._snapshot.catalog

    @property
    def products(self) -> tuple[Product, ...]:
        return self._snapshot.catalog.products

    @property
    def sales(self) -> tuple[Sale, ...]:
        return self._snapshot.sales

    # =========================================================================
    # Ledger
    # =========================================================================

    def commit_sale(
        self,
        sale: Sale,
        reconcile: Reconcile = inventory.reconcile,
    ) -> tuple[StoreSnapshot, ReconciliationResult]:
        """
        Append ``sale`` and install its reconciled catalog atomically.

        ``reconcile`` is applied to the catalog held at commit time, under
        the store lock, so no catalog change can slip between the stock
        deduction and the ledger append.

        Raises:
            SaleIdCollisionError: ``sale.sale_id`` is already recorded.
            UnknownProductError: a sale line references a missing product.
            Nothing is published in either case.
        """
        with self._lock:
            current = self._snapshot
            if current.has_sale(sale.sale_id):
                raise SaleIdCollisionError(sale.sale_id)
            result = reconcile(current.catalog.products, sale.lines)
            self._snapshot = StoreSnapshot(
                catalog=CatalogSnapshot(result.products),
                sales=current.sales + (sale,),
                version=current.version + 1,
            )
            published = self._snapshot

        logger.info(
            "sale_appended",
            extra={
                "sale_id": sale.sale_id,
                "total": sale.total,
                "ledger_size": len(published.sales),
                "store_version": published.version,
            },
        )
        return published, result

    # =========================================================================
    # Catalog provider
    # =========================================================================

    def add_product(self, product: Product) -> None:
        with self._lock:
            current = self._snapshot
            if product.product_id in current.catalog:
                raise DuplicateProductError(product.product_id)
            self._swap_catalog(current, current.catalog.upsert(product))
        logger.info("product_added", extra={"product_id": product.product_id})

    def update_product(self, product: Product) -> None:
        with self._lock:
            current = self._snapshot
            current.catalog.require(product.product_id)
            self._swap_catalog(current, current.catalog.upsert(product))
        logger.info("product_updated", extra={"product_id": product.product_id})

    def delete_product(self, product_id: str) -> None:
        with self._lock:
            current = self._snapshot
            self._swap_catalog(current, current.catalog.without(product_id))
        logger.info("product_deleted", extra={"product_id": product_id})

    def _swap_catalog(self, current: StoreSnapshot, catalog: CatalogSnapshot) -> None:
        self._snapshot = StoreSnapshot(
            catalog=catalog,
            sales=current.sales,
            version=current.version + 1,
        )
