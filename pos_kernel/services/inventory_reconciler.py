"""
InventoryReconciler -- stock deduction plus stock-alert dispatch.

Responsibility:
    Wraps the pure ``pos_kernel.domain.inventory.reconcile`` with logging
    and hands every newly-critical product to the notification sink.

Architecture position:
    Kernel > Services. Invoked by the CheckoutCoordinator: ``reconcile``
    runs inside TerminalStore.commit_sale (under the store lock), and
    ``dispatch_alerts`` runs after the commit is published.

Invariants enforced:
    STOCK_LOCKSTEP -- reconciliation is all-or-nothing; an unknown product
        raises UnknownProductError out of ``reconcile`` untouched so the
        commit is abandoned.
    - Alert dispatch is fire-and-forget: a failing sink is logged and
      skipped, it never reaches the caller and never rolls back the sale.

Failure modes:
    - UnknownProductError propagates from ``reconcile``.
    - Sink exceptions are caught in ``dispatch_alerts``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pos_kernel.domain.cart import CartLine
from pos_kernel.domain.catalog import Product
from pos_kernel.domain.inventory import ReconciliationResult, StockAlert, reconcile
from pos_kernel.logging_config import get_logger
from pos_kernel.services.notifications import LoggingNotificationSink, NotificationSink

logger = get_logger("services.inventory_reconciler")


class InventoryReconciler:
    """
    Applies sold quantities to stock and emits edge-triggered alerts.

    Contract:
        ``reconcile`` is pure apart from logging. ``dispatch_alerts``
        returns the alerts that reached the sink.
    """

    def __init__(self, sink: NotificationSink | None = None):
        self._sink = sink or LoggingNotificationSink()

    def reconcile(
        self,
        products: Sequence[Product],
        lines: Sequence[CartLine],
    ) -> ReconciliationResult:
        result = reconcile(products, lines)
        logger.info(
            "stock_reconciled",
            extra={
                "line_count": len(lines),
                "changed_products": [p.product_id for p in result.changed],
                "new_alerts": len(result.alerts),
            },
        )
        for product in result.oversold:
            logger.warning(
                "stock_below_zero",
                extra={"product_id": product.product_id, "stock": product.stock},
            )
        return result

    def dispatch_alerts(self, alerts: Iterable[StockAlert]) -> tuple[StockAlert, ...]:
        delivered: list[StockAlert] = []
        for alert in alerts:
            try:
                self._sink.notify(alert)
            except Exception:
                logger.error(
                    "stock_alert_dispatch_failed",
                    extra={"product_id": alert.product_id},
                    exc_info=True,
                )
                continue
            delivered.append(alert)
            logger.info(
                "stock_alert_dispatched",
                extra={
                    "product_id": alert.product_id,
                    "stock": alert.stock,
                    "min_stock": alert.min_stock,
                },
            )
        return tuple(delivered)
