"""
Reporting Domain Models (``pos_modules.reporting.models``).

Responsibility
--------------
Frozen dataclass value objects for everything the formatter produces:
single-sale receipts, period reports, dashboard figures, rendered document
artifacts and the bundles returned to callers.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Built by the
pure functions in ``statements.py`` and returned by ``ReportingService``.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* A bundle with ``degraded`` set carries no document.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class DocumentKind(str, Enum):
    """Types of rendered documents."""

    RECEIPT = "receipt"
    PERIOD_REPORT = "period_report"
    CATALOG = "catalog"


XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# =========================================================================
# Receipt
# =========================================================================


@dataclass(frozen=True)
class ReceiptLineItem:
    """One itemized line on a receipt."""

    quantity: int
    name: str
    capacity: str
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class Receipt:
    """Fiscal rendering of one Sale."""

    sale_id: str
    store_name: str
    issued_at: str  # ISO timestamp of the sale
    lines: tuple[ReceiptLineItem, ...]
    total: Decimal
    tax_base: Decimal
    tax_amount: Decimal
    tax_rate: Decimal
    tax_label: str
    payment_label: str
    is_cash: bool
    tendered: Decimal | None = None
    change: Decimal | None = None
    customer_id: str | None = None
    footer: str = ""


# =========================================================================
# Period report
# =========================================================================


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every period report."""

    store_name: str
    period_label: str
    generated_at: str  # ISO format timestamp from injected clock
    currency_symbol: str = ""


@dataclass(frozen=True)
class TopProduct:
    """A best-seller row: units sold over the period."""

    product_id: str
    name: str
    quantity: int


@dataclass(frozen=True)
class CriticalStockRow:
    product_id: str
    name: str
    stock: int
    min_stock: int


@dataclass(frozen=True)
class PeriodReport:
    """Revenue summary over the sales matching a period predicate."""

    metadata: ReportMetadata
    revenue: Decimal
    transaction_count: int
    average_ticket: Decimal
    top_products: tuple[TopProduct, ...]
    critical_stock: tuple[CriticalStockRow, ...]

    @property
    def best_seller(self) -> TopProduct | None:
        return self.top_products[0] if self.top_products else None


# =========================================================================
# Dashboard
# =========================================================================


@dataclass(frozen=True)
class DailyRevenue:
    day: date
    total: Decimal


@dataclass(frozen=True)
class DashboardSnapshot:
    """Headline figures for the current day plus a trailing daily series."""

    today: date
    sales_today: int
    revenue_today: Decimal
    critical_count: int
    daily: tuple[DailyRevenue, ...]


# =========================================================================
# Artifacts and bundles
# =========================================================================


@dataclass(frozen=True)
class RenderedDocument:
    """A structured document ready for the document/export sink."""

    kind: DocumentKind
    filename: str
    media_type: str
    content: bytes


@dataclass(frozen=True)
class FormattingDegraded:
    """Document rendering or publishing failed; text output still produced."""

    document_kind: DocumentKind
    code: str
    reason: str


@dataclass(frozen=True)
class ReceiptBundle:
    receipt: Receipt
    text: str
    document: RenderedDocument | None = None
    degraded: FormattingDegraded | None = None

    @property
    def is_degraded(self) -> bool:
        return self.degraded is not None


@dataclass(frozen=True)
class ReportBundle:
    report: PeriodReport
    summary_text: str
    document: RenderedDocument | None = None
    degraded: FormattingDegraded | None = None

    @property
    def is_degraded(self) -> bool:
        return self.degraded is not None
