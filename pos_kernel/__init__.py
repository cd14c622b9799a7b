"""
POS Kernel - transaction core for a single retail terminal.

An in-memory, snapshot-based point-of-sale core with:
- Immutable carts built from a catalog snapshot
- Tax-inclusive totals and cash tender validation
- Atomic sale append + stock reconciliation
- Edge-triggered critical stock alerts
"""

__version__ = "0.1.0"
