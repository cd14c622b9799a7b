"""
Receipt/Report Formatter (``pos_modules.reporting``).

Renders Sales into fiscal receipts and periods of Sales into summary
reports, as XLSX documents plus plain text for sharing.
"""

from pos_modules.reporting.config import ReportingConfig
from pos_modules.reporting.models import (
    CriticalStockRow,
    DailyRevenue,
    DashboardSnapshot,
    DocumentKind,
    FormattingDegraded,
    PeriodReport,
    Receipt,
    ReceiptBundle,
    ReceiptLineItem,
    RenderedDocument,
    ReportBundle,
    ReportMetadata,
    TopProduct,
)
from pos_modules.reporting.service import ReportingService
from pos_modules.reporting.sinks import DirectoryDocumentSink, DocumentSink
from pos_modules.reporting.statements import (
    SalePeriod,
    all_time,
    between,
    last_n_days,
    on_day,
)

__all__ = [
    # Service
    "ReportingService",
    "ReportingConfig",
    # Sinks
    "DirectoryDocumentSink",
    "DocumentSink",
    # Periods
    "SalePeriod",
    "all_time",
    "between",
    "last_n_days",
    "on_day",
    # Models
    "CriticalStockRow",
    "DailyRevenue",
    "DashboardSnapshot",
    "DocumentKind",
    "FormattingDegraded",
    "PeriodReport",
    "Receipt",
    "ReceiptBundle",
    "ReceiptLineItem",
    "RenderedDocument",
    "ReportBundle",
    "ReportMetadata",
    "TopProduct",
]
