"""
PosConfig schema.

Defines the human-authored, reviewable configuration of one terminal.
YAML files are parsed into these frozen types by the loader; bridges turn
them into kernel inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StoreProfile:
    """Identity of the shop as printed on receipts and reports."""

    name: str
    currency_code: str
    currency_symbol: str
    receipt_footer: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("store.name must be non-empty")
        if len(self.currency_code) != 3:
            raise ValueError("store.currency_code must be a 3-letter ISO 4217 code")


# ---------------------------------------------------------------------------
# Pricing & cart
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TaxConfig:
    """Tax rate embedded in every (tax-inclusive) price."""

    rate: Decimal
    label: str = "Tax"

    def __post_init__(self) -> None:
        if self.rate < 0 or self.rate >= 1:
            raise ValueError(f"tax.rate must be in [0, 1), got {self.rate}")


@dataclass(frozen=True)
class CartConfig:
    max_line_quantity: int = 99
    cap_by_stock: bool = True

    def __post_init__(self) -> None:
        if self.max_line_quantity < 1:
            raise ValueError("cart.max_line_quantity must be >= 1")


@dataclass(frozen=True)
class SaleConfig:
    id_prefix: str = "SALE"

    def __post_init__(self) -> None:
        if not self.id_prefix:
            raise ValueError("sales.id_prefix must be non-empty")


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReportConfig:
    top_n: int = 5
    daily_window_days: int = 7
    share_footer: str = ""

    def __post_init__(self) -> None:
        if self.top_n < 1:
            raise ValueError("report.top_n must be >= 1")
        if self.daily_window_days < 1:
            raise ValueError("report.daily_window_days must be >= 1")


@dataclass(frozen=True)
class LabelConfig:
    """Display labels keyed by enum value (payment methods, categories)."""

    payment_methods: tuple[tuple[str, str], ...] = ()
    categories: tuple[tuple[str, str], ...] = ()


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PosConfig:
    """Complete, validated terminal configuration."""

    store: StoreProfile
    tax: TaxConfig
    cart: CartConfig = field(default_factory=CartConfig)
    sales: SaleConfig = field(default_factory=SaleConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    labels: LabelConfig = field(default_factory=LabelConfig)
    checksum: str = ""

    def reporting_settings(self) -> dict[str, Any]:
        """Flat settings dict consumed by ``ReportingConfig.from_dict``."""
        return {
            "store_name": self.store.name,
            "currency_symbol": self.store.currency_symbol,
            "receipt_footer": self.store.receipt_footer,
            "tax_rate": self.tax.rate,
            "tax_label": self.tax.label,
            "top_n": self.report.top_n,
            "daily_window_days": self.report.daily_window_days,
            "share_footer": self.report.share_footer,
            "payment_method_labels": dict(self.labels.payment_methods),
            "category_labels": dict(self.labels.categories),
        }
