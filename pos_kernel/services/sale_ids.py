"""
SaleIdAllocator -- monotonic sale id allocation.

Responsibility:
    Provides sale ids that are unique for the lifetime of the process.
    Ids are ``<prefix>-<YYYYMMDD>-<sequence>`` where the sequence is a
    strictly increasing counter shared by every allocation from the same
    allocator.

Architecture position:
    Kernel > Services -- called by the CheckoutCoordinator once per
    commit, after validation succeeded.

Invariants enforced:
    SALE_IMMUTABLE -- the counter never repeats a value; the store still
        rejects a colliding id (SaleIdCollisionError) so that ids seeded
        from an earlier ledger cannot overwrite a recorded sale.

Failure modes:
    - ValueError for an empty prefix or a negative starting sequence.
"""

from __future__ import annotations

import itertools
import threading
from datetime import datetime

from pos_kernel.logging_config import get_logger

logger = get_logger("services.sale_ids")


class SaleIdAllocator:
    """
    Thread-safe allocator for process-unique sale ids.

    Usage:
        allocator = SaleIdAllocator(prefix="SALE")
        sale_id = allocator.next_id(clock.now())
    """

    def __init__(self, prefix: str = "SALE", start: int = 1):
        if not prefix:
            raise ValueError("Sale id prefix must be non-empty")
        if start < 0:
            raise ValueError("Sale id sequence must start at >= 0")
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    @property
    def prefix(self) -> str:
        return self._prefix

    def next_id(self, timestamp: datetime) -> str:
        """Allocate the next id, stamped with the sale date."""
        with self._lock:
            sequence = next(self._counter)
        sale_id = f"{self._prefix}-{timestamp:%Y%m%d}-{sequence:06d}"
        logger.debug("sale_id_allocated", extra={"sale_id": sale_id, "sequence": sequence})
        return sale_id
