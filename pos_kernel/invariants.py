"""
Kernel Invariants Contract.

These invariants are structural law for the transaction core. They are
hardcoded in the cart builder, the pricing calculator, the inventory
reconciler and the checkout coordinator. No configuration value may
override them.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across ``pos_kernel.domain`` and
``pos_kernel.services``.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel.

    Each value names one structural guarantee that the kernel provides
    unconditionally. Configuration may influence *how* a sale is priced or
    presented, but never *whether* these rules apply.
    """

    TOTAL_RECONCILES = "total_reconciles"
    """Cart total equals the sum of unit_price * quantity over its lines.
    Enforced by ``pos_kernel.domain.pricing.subtotal``."""

    SALE_IMMUTABLE = "sale_immutable"
    """A Sale is created once per committed checkout and never mutated or
    deleted. Enforced by frozen dataclasses and the append-only ledger in
    TerminalStore."""

    NO_EMPTY_LINES = "no_empty_lines"
    """A cart never holds a line with quantity <= 0. Enforced by
    ``pos_kernel.domain.cart``."""

    STOCK_LOCKSTEP = "stock_lockstep"
    """Ledger append and stock reconciliation for one sale are observed
    together or not at all. Enforced by TerminalStore.commit_sale."""

    NON_NEGATIVE_CHANGE = "non_negative_change"
    """A cash sale never commits with negative change. Enforced by
    ``pos_kernel.domain.pricing.check_tender``."""

    CRITICAL_STOCK_DERIVED = "critical_stock_derived"
    """The low-stock flag is always ``stock <= min_stock`` computed on
    demand, never cached. Enforced by ``Product.is_critical``."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "pos_config",
    "pos_modules",
)
