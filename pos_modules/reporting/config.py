"""
Reporting Configuration Schema.

Defines receipt/report formatting options and the presentation lookup
tables for payment methods and product categories. Labels are resolved
here, at the reporting boundary; the kernel only knows enum values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Self

from pos_kernel.domain.catalog import ProductCategory
from pos_kernel.domain.pricing import DEFAULT_TAX_RATE, PaymentMethod
from pos_kernel.logging_config import get_logger

logger = get_logger("modules.reporting.config")

DEFAULT_PAYMENT_METHOD_LABELS: dict[str, str] = {
    PaymentMethod.CASH.value: "Cash",
    PaymentMethod.CARD.value: "Card",
    PaymentMethod.TRANSFER.value: "Transfer",
    PaymentMethod.MOBILE_WALLET.value: "Mobile Wallet",
}

DEFAULT_CATEGORY_LABELS: dict[str, str] = {
    ProductCategory.BEER.value: "Beer",
    ProductCategory.WINE.value: "Wine",
    ProductCategory.SPIRITS.value: "Spirits",
    ProductCategory.SOFT_DRINK.value: "Soft Drink",
    ProductCategory.SNACK.value: "Snack",
    ProductCategory.OTHER.value: "Other",
}


@dataclass
class ReportingConfig:
    """
    Configuration schema for the reporting module.

    Controls store identity on documents, tax presentation, top-N size and
    the label lookup tables.
    """

    store_name: str = "Store"
    currency_symbol: str = ""
    receipt_footer: str = ""

    # Presentation-only tax decomposition
    tax_rate: Decimal = DEFAULT_TAX_RATE
    tax_label: str = "Tax"

    # Period report
    top_n: int = 5
    daily_window_days: int = 7
    share_footer: str = ""

    payment_method_labels: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_PAYMENT_METHOD_LABELS),
    )
    category_labels: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_LABELS),
    )

    def __post_init__(self):
        self.tax_rate = Decimal(str(self.tax_rate))
        if self.tax_rate < 0:
            raise ValueError("tax_rate cannot be negative")
        if self.top_n < 1:
            raise ValueError("top_n must be >= 1")
        if self.daily_window_days < 1:
            raise ValueError("daily_window_days must be >= 1")
        self.payment_method_labels = {
            **DEFAULT_PAYMENT_METHOD_LABELS, **self.payment_method_labels,
        }
        self.category_labels = {**DEFAULT_CATEGORY_LABELS, **self.category_labels}

    def payment_label(self, method: PaymentMethod) -> str:
        return _lookup(self.payment_method_labels, method)

    def category_label(self, category: ProductCategory) -> str:
        return _lookup(self.category_labels, category)

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary (see ``PosConfig.reporting_settings``)."""
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)


def _lookup(table: dict[str, str], member: Enum) -> str:
    label = table.get(member.value)
    if label is None:
        return member.value.replace("_", " ").title()
    return label
