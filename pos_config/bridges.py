"""
Config -> Kernel Bridges.

Functions that convert PosConfig into kernel-compatible inputs. These live
in pos_config (the producer) because the kernel must NEVER import
pos_config.

Usage:
    from pos_config import get_active_config
    from pos_config.bridges import build_cart_policy, build_sale_id_allocator

    config = get_active_config()
    policy = build_cart_policy(config)
"""

from __future__ import annotations

from decimal import Decimal

from pos_config.schema import PosConfig
from pos_kernel.domain.cart import CartPolicy
from pos_kernel.services.sale_ids import SaleIdAllocator


def build_cart_policy(config: PosConfig) -> CartPolicy:
    """Build the cart quantity cap from ``cart`` settings."""
    return CartPolicy(
        max_line_quantity=config.cart.max_line_quantity,
        cap_by_stock=config.cart.cap_by_stock,
    )


def build_sale_id_allocator(config: PosConfig, start: int = 1) -> SaleIdAllocator:
    return SaleIdAllocator(prefix=config.sales.id_prefix, start=start)


def tax_rate(config: PosConfig) -> Decimal:
    return config.tax.rate
