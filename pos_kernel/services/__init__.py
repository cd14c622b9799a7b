"""
Kernel services -- the stateful shell around the pure domain.

Every service receives its collaborators (store, clock, sinks) through its
constructor; nothing here keeps module-level mutable state.
"""

from pos_kernel.services.checkout_coordinator import CheckoutCoordinator
from pos_kernel.services.inventory_reconciler import InventoryReconciler
from pos_kernel.services.notifications import LoggingNotificationSink, NotificationSink
from pos_kernel.services.sale_ids import SaleIdAllocator
from pos_kernel.services.terminal_session import TerminalSession
from pos_kernel.services.terminal_store import StoreSnapshot, TerminalStore

__all__ = [
    "CheckoutCoordinator",
    "InventoryReconciler",
    "LoggingNotificationSink",
    "NotificationSink",
    "SaleIdAllocator",
    "StoreSnapshot",
    "TerminalSession",
    "TerminalStore",
]
