"""
Reporting Module Service (``pos_modules.reporting.service``).

Responsibility
--------------
The Receipt/Report Formatter.  Renders a single Sale into a receipt and a
period of Sales into a summary report, producing both a structured
document (XLSX) and a plain-text rendering, and hands documents to the
document sink.  This is a **read-only** service: it never touches the
ledger or the catalog.

Architecture position
---------------------
**Modules layer** -- thin glue between the pure functions in
``statements.py`` / ``documents.py`` and the external document sink.
``ReportingService.render_receipt`` is what the CheckoutCoordinator is
given as its ``receipt_renderer``.  Constructor: ``clock`` + ``config`` +
optional ``document_sink``.

Invariants enforced
-------------------
* Read-only -- no mutations to the store.
* All monetary amounts use ``Decimal`` -- NEVER ``float``.
* Formatting failures never propagate: a failure to build or publish the
  structured document degrades the result to plain text and records a
  ``FormattingDegraded`` notice.

Failure modes
-------------
* Document build or sink failure  -> bundle with ``document=None`` and
  ``degraded`` set; logged at WARNING.
* Invalid period bounds  -> ``ValueError`` from the period factories,
  raised before anything is rendered.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from pos_kernel.domain.catalog import Product
from pos_kernel.domain.clock import Clock, SystemClock
from pos_kernel.domain.sale import Sale
from pos_kernel.exceptions import DocumentRenderError
from pos_kernel.logging_config import get_logger
from pos_modules.reporting.config import ReportingConfig
from pos_modules.reporting.documents import (
    render_catalog_workbook,
    render_receipt_workbook,
    render_report_workbook,
)
from pos_modules.reporting.models import (
    DashboardSnapshot,
    DocumentKind,
    FormattingDegraded,
    ReceiptBundle,
    RenderedDocument,
    ReportBundle,
)
from pos_modules.reporting.sinks import DocumentSink
from pos_modules.reporting.statements import (
    PeriodPredicate,
    all_time,
    build_dashboard,
    build_period_report,
    build_receipt,
    render_receipt_text,
    render_summary_text,
    share_url,
)

logger = get_logger("modules.reporting.service")


class ReportingService:
    """
    Receipt and period report generation service.

    Contract
    --------
    * Every public method returns a typed bundle or DTO.
    * No public method raises because of a document failure.

    Guarantees
    ----------
    * Report content is built by pure functions in ``statements.py``; no
      business arithmetic lives in this class.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT retry a failed sink.
    * Does NOT display documents.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
        document_sink: DocumentSink | None = None,
    ):
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()
        self._sink = document_sink

        logger.info(
            "reporting_service_initialized",
            extra={
                "store_name": self._config.store_name,
                "has_document_sink": document_sink is not None,
            },
        )

    @property
    def config(self) -> ReportingConfig:
        return self._config

    # =========================================================================
    # Receipt
    # =========================================================================

    def render_receipt(self, sale: Sale) -> ReceiptBundle:
        """Fiscal receipt for one sale: text always, XLSX when possible."""
        receipt = build_receipt(sale, self._config)
        text = render_receipt_text(receipt, self._config)
        document, degraded = self._render_document(
            DocumentKind.RECEIPT,
            lambda: render_receipt_workbook(receipt, self._config),
        )
        logger.info(
            "receipt_rendered",
            extra={"sale_id": sale.sale_id, "degraded": degraded is not None},
        )
        return ReceiptBundle(receipt=receipt, text=text, document=document, degraded=degraded)

    # =========================================================================
    # Period report
    # =========================================================================

    def summarize(
        self,
        sales: Iterable[Sale],
        products: Iterable[Product],
        period: PeriodPredicate | None = None,
    ) -> ReportBundle:
        """
        Summarize the sales matching ``period`` (default: all sales).

        Returns:
            ReportBundle with the structured report, the condensed share
            text and, unless rendering failed, the XLSX document.
        """
        period = period or all_time()
        report = build_period_report(
            sales,
            products,
            period,
            self._config,
            generated_at=self._clock.now(),
        )
        summary = render_summary_text(report, self._config)
        document, degraded = self._render_document(
            DocumentKind.PERIOD_REPORT,
            lambda: render_report_workbook(report, self._config),
        )
        logger.info(
            "period_report_generated",
            extra={
                "period": report.metadata.period_label,
                "revenue": report.revenue,
                "transaction_count": report.transaction_count,
                "critical_count": len(report.critical_stock),
                "degraded": degraded is not None,
            },
        )
        return ReportBundle(
            report=report,
            summary_text=summary,
            document=document,
            degraded=degraded,
        )

    def share_link(self, bundle: ReportBundle) -> str:
        return share_url(bundle.summary_text)

    # =========================================================================
    # Dashboard & catalog export
    # =========================================================================

    def dashboard(self, sales: Sequence[Sale], products: Iterable[Product]) -> DashboardSnapshot:
        return build_dashboard(
            sales,
            products,
            today=self._clock.today(),
            days=self._config.daily_window_days,
        )

    def export_catalog(self, products: Iterable[Product]) -> RenderedDocument | None:
        """Catalog workbook, or None when it could not be produced."""
        products = tuple(products)
        document, degraded = self._render_document(
            DocumentKind.CATALOG,
            lambda: render_catalog_workbook(products, self._config),
        )
        logger.info(
            "catalog_exported",
            extra={"product_count": len(products), "degraded": degraded is not None},
        )
        return document

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _render_document(
        self,
        kind: DocumentKind,
        render: Callable[[], RenderedDocument],
    ) -> tuple[RenderedDocument | None, FormattingDegraded | None]:
        try:
            document = render()
            if self._sink is not None:
                self._sink.publish(document)
        except DocumentRenderError as e:
            return None, self._degraded(kind, e.code, e.reason)
        except Exception as e:
            return None, self._degraded(kind, "DOCUMENT_PUBLISH_FAILED", str(e) or type(e).__name__)
        return document, None

    def _degraded(self, kind: DocumentKind, code: str, reason: str) -> FormattingDegraded:
        logger.warning(
            "document_degraded_to_text",
            extra={"document_kind": kind, "code": code, "reason": reason},
        )
        return FormattingDegraded(document_kind=kind, code=code, reason=reason)
