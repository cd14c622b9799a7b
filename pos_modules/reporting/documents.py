"""
XLSX document rendering for receipts, period reports and catalog exports.

Builds openpyxl workbooks in memory and returns them as RenderedDocument
artifacts. Any failure while building or serializing a workbook is
re-raised as DocumentRenderError so the reporting service can degrade to
plain text.

Layout:
  - receipt: one "Receipt" sheet (header block, item table, totals)
  - period report: "Summary", "Top Products", "Critical Stock" sheets
  - catalog: one "Catalog" sheet, one row per product
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from pos_kernel.domain.catalog import Product
from pos_kernel.exceptions import DocumentRenderError
from pos_modules.reporting.config import ReportingConfig
from pos_modules.reporting.models import (
    XLSX_MEDIA_TYPE,
    DocumentKind,
    PeriodReport,
    Receipt,
    RenderedDocument,
)

MONEY_FORMAT = "#,##0.00"
_BOLD = Font(bold=True)
_HEADER_FILL = PatternFill(start_color="DDDDDD", end_color="DDDDDD", fill_type="solid")
_ALERT_FILL = PatternFill(start_color="DC3545", end_color="DC3545", fill_type="solid")


def _header_row(ws: Worksheet, values: list[str], fill: PatternFill = _HEADER_FILL) -> None:
    ws.append(values)
    for cell in ws[ws.max_row]:
        cell.font = _BOLD
        cell.fill = fill


def _money_cells(ws: Worksheet, *columns: str) -> None:
    """Apply the money number format to the given columns of the last row."""
    row = ws.max_row
    for column in columns:
        ws[f"{column}{row}"].number_format = MONEY_FORMAT


def _save(
    kind: DocumentKind,
    filename: str,
    build: Callable[[Workbook], None],
) -> RenderedDocument:
    try:
        wb = Workbook()
        build(wb)
        buffer = BytesIO()
        wb.save(buffer)
    except Exception as e:
        raise DocumentRenderError(kind.value, str(e) or type(e).__name__) from e
    return RenderedDocument(
        kind=kind,
        filename=filename,
        media_type=XLSX_MEDIA_TYPE,
        content=buffer.getvalue(),
    )


# =========================================================================
# Receipt
# =========================================================================


def render_receipt_workbook(receipt: Receipt, config: ReportingConfig) -> RenderedDocument:
    def build(wb: Workbook) -> None:
        ws = wb.active
        ws.title = "Receipt"
        ws.append([receipt.store_name])
        ws["A1"].font = Font(bold=True, size=14)
        ws.append(["Ticket", receipt.sale_id])
        ws.append(["Date", receipt.issued_at])
        ws.append(["Payment", receipt.payment_label])
        if receipt.customer_id:
            ws.append(["Customer", receipt.customer_id])
        ws.append([])

        _header_row(ws, ["Qty", "Product", "Unit price", "Subtotal"])
        for item in receipt.lines:
            name = f"{item.name} {item.capacity}".strip()
            ws.append([item.quantity, name, item.unit_price, item.line_total])
            _money_cells(ws, "C", "D")
        ws.append([])

        totals = [
            ("Base", receipt.tax_base),
            (receipt.tax_label, receipt.tax_amount),
            ("Total", receipt.total),
        ]
        if receipt.is_cash:
            totals += [("Tendered", receipt.tendered), ("Change", receipt.change)]
        for label, amount in totals:
            ws.append([None, None, label, amount])
            _money_cells(ws, "D")
            if label == "Total":
                ws[f"C{ws.max_row}"].font = _BOLD
                ws[f"D{ws.max_row}"].font = _BOLD

        ws.column_dimensions["B"].width = 36
        ws.column_dimensions["C"].width = 14
        ws.column_dimensions["D"].width = 14

    return _save(DocumentKind.RECEIPT, f"Ticket_{receipt.sale_id}.xlsx", build)


# =========================================================================
# Period report
# =========================================================================


def render_report_workbook(report: PeriodReport, config: ReportingConfig) -> RenderedDocument:
    def build(wb: Workbook) -> None:
        summary = wb.active
        summary.title = "Summary"
        summary.append([f"Report - {report.metadata.store_name}"])
        summary["A1"].font = Font(bold=True, size=14)
        summary.append(["Period", report.metadata.period_label])
        summary.append(["Generated", report.metadata.generated_at])
        summary.append([])
        summary.append(["Total revenue", report.revenue])
        _money_cells(summary, "B")
        summary.append(["Transactions", report.transaction_count])
        summary.append(["Average ticket", report.average_ticket])
        _money_cells(summary, "B")
        summary.column_dimensions["A"].width = 18
        summary.column_dimensions["B"].width = 28

        top = wb.create_sheet("Top Products")
        _header_row(top, ["Rank", "Product", "Units sold"])
        for rank, product in enumerate(report.top_products, start=1):
            top.append([rank, product.name, product.quantity])
        top.column_dimensions["B"].width = 36

        critical = wb.create_sheet("Critical Stock")
        _header_row(critical, ["Product", "Current stock", "Minimum"], fill=_ALERT_FILL)
        for row in report.critical_stock:
            critical.append([row.name, row.stock, row.min_stock])
        critical.column_dimensions["A"].width = 36

    stamp = report.metadata.generated_at[:10]
    return _save(DocumentKind.PERIOD_REPORT, f"Report_{stamp}.xlsx", build)


# =========================================================================
# Catalog export
# =========================================================================


CATALOG_COLUMNS = [
    "Id", "Name", "Brand", "Category", "Capacity",
    "Price", "Cost", "Stock", "Min stock", "Promo",
]


def render_catalog_workbook(products: Iterable[Product], config: ReportingConfig) -> RenderedDocument:
    def build(wb: Workbook) -> None:
        ws = wb.active
        ws.title = "Catalog"
        _header_row(ws, CATALOG_COLUMNS)
        for p in products:
            ws.append([
                p.product_id,
                p.name,
                p.brand,
                config.category_label(p.category),
                p.capacity,
                p.price,
                p.cost,
                p.stock,
                p.min_stock,
                "yes" if p.is_promo else "no",
            ])
            _money_cells(ws, "F", "G")
        ws.column_dimensions["B"].width = 32

    return _save(DocumentKind.CATALOG, "Catalog.xlsx", build)
