"""
Notification sink protocol and the default logging sink.

Stock alerts leave the kernel through a ``NotificationSink``. Delivery is
best-effort: the InventoryReconciler catches and logs sink failures, so
a sink may raise freely.

Usage:
    from pos_kernel.services.notifications import LoggingNotificationSink

    reconciler = InventoryReconciler(sink=LoggingNotificationSink())
"""

from __future__ import annotations

from typing import Protocol

from pos_kernel.domain.inventory import StockAlert
from pos_kernel.logging_config import get_logger

logger = get_logger("services.notifications")

# Standard event name for filtering in log pipelines
EVENT_STOCK_ALERT = "stock_alert"


class NotificationSink(Protocol):
    """External collaborator that receives stock alerts."""

    def notify(self, alert: StockAlert) -> None:
        ...


class LoggingNotificationSink:
    """Writes each alert as a WARNING-level structured log event."""

    def notify(self, alert: StockAlert) -> None:
        logger.warning(
            EVENT_STOCK_ALERT,
            extra={
                "observability_event": EVENT_STOCK_ALERT,
                "product_id": alert.product_id,
                "product_name": alert.name,
                "stock": alert.stock,
                "min_stock": alert.min_stock,
            },
        )
