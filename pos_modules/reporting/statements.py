"""
Pure receipt and report transformation functions.

These functions transform Sales and Products into receipts, period reports,
dashboard figures and their plain-text renderings. ZERO I/O. ZERO side
effects.

All monetary values are Decimal. All inputs/outputs are frozen dataclasses.

Functions in this module follow the pos_kernel/domain/ purity convention:
- No store access
- No clock access (timestamps are passed in)
- No file I/O
- Deterministic: same inputs always produce same outputs
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Sequence
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from urllib.parse import quote

from pos_kernel.domain.catalog import Product
from pos_kernel.domain.inventory import get_critical_stock
from pos_kernel.domain.money import ZERO, format_amount, round_money
from pos_kernel.domain.pricing import PaymentMethod, tax_decomposition
from pos_kernel.domain.sale import Sale
from pos_modules.reporting.config import ReportingConfig
from pos_modules.reporting.models import (
    CriticalStockRow,
    DailyRevenue,
    DashboardSnapshot,
    PeriodReport,
    Receipt,
    ReceiptLineItem,
    ReportMetadata,
    TopProduct,
)

SHARE_URL_BASE = "https://wa.me/?text="


# =========================================================================
# Period predicates
# =========================================================================


@dataclasses.dataclass(frozen=True)
class SalePeriod:
    """
    A named predicate over sales.

    ``start`` is inclusive, ``end`` exclusive; either may be open. Dates
    compare against the calendar date of ``Sale.timestamp``.
    """

    label: str
    start: date | None = None
    end: date | None = None

    def __call__(self, sale: Sale) -> bool:
        day = sale.timestamp.date()
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day >= self.end:
            return False
        return True


PeriodPredicate = Callable[[Sale], bool]


def all_time() -> SalePeriod:
    return SalePeriod(label="All time")


def on_day(day: date) -> SalePeriod:
    return SalePeriod(label=day.isoformat(), start=day, end=day + timedelta(days=1))


def between(start: date, end: date) -> SalePeriod:
    """Sales from ``start`` through ``end``, both days included."""
    if end < start:
        raise ValueError(f"Period end {end} is before start {start}")
    return SalePeriod(
        label=f"{start.isoformat()} to {end.isoformat()}",
        start=start,
        end=end + timedelta(days=1),
    )


def last_n_days(n: int, today: date) -> SalePeriod:
    """The ``n`` calendar days ending with ``today``."""
    if n < 1:
        raise ValueError("n must be >= 1")
    period = between(today - timedelta(days=n - 1), today)
    return dataclasses.replace(period, label=f"Last {n} days")


def period_label(predicate: PeriodPredicate) -> str:
    return getattr(predicate, "label", "Custom period")


# =========================================================================
# 1. RECEIPT
# =========================================================================


def build_receipt(sale: Sale, config: ReportingConfig) -> Receipt:
    """Itemize a sale with its tax decomposition and payment details."""
    breakdown = tax_decomposition(sale.total, config.tax_rate)
    is_cash = sale.payment_method is PaymentMethod.CASH
    lines = tuple(
        ReceiptLineItem(
            quantity=line.quantity,
            name=line.name,
            capacity=line.capacity,
            unit_price=round_money(line.unit_price),
            line_total=round_money(line.line_total),
        )
        for line in sale.lines
    )
    return Receipt(
        sale_id=sale.sale_id,
        store_name=config.store_name,
        issued_at=sale.timestamp.isoformat(),
        lines=lines,
        total=sale.total,
        tax_base=breakdown.base,
        tax_amount=breakdown.tax,
        tax_rate=breakdown.rate,
        tax_label=config.tax_label,
        payment_label=config.payment_label(sale.payment_method),
        is_cash=is_cash,
        tendered=sale.tendered if is_cash else None,
        change=sale.change if is_cash else None,
        customer_id=sale.customer_id,
        footer=config.receipt_footer,
    )


# =========================================================================
# 2. PERIOD REPORT
# =========================================================================


def average_ticket(revenue: Decimal, count: int) -> Decimal:
    """revenue / count, or zero when there are no transactions."""
    if count == 0:
        return round_money(ZERO)
    return round_money(revenue / count)


def rank_top_products(sales: Iterable[Sale], n: int) -> tuple[TopProduct, ...]:
    """
    Best sellers by summed quantity, descending.

    Ties keep first-encountered order (a stable sort over insertion order),
    so the ranking is deterministic for a given sale sequence.
    """
    names: dict[str, str] = {}
    totals: dict[str, int] = {}
    for sale in sales:
        for line in sale.lines:
            if line.product_id not in totals:
                names[line.product_id] = line.name
                totals[line.product_id] = 0
            totals[line.product_id] += line.quantity
    ranked = sorted(totals.items(), key=lambda item: -item[1])
    return tuple(
        TopProduct(product_id=pid, name=names[pid], quantity=qty)
        for pid, qty in ranked[:n]
    )


def critical_stock_rows(products: Iterable[Product]) -> tuple[CriticalStockRow, ...]:
    return tuple(
        CriticalStockRow(
            product_id=p.product_id,
            name=p.name,
            stock=p.stock,
            min_stock=p.min_stock,
        )
        for p in get_critical_stock(products)
    )


def build_period_report(
    sales: Iterable[Sale],
    products: Iterable[Product],
    predicate: PeriodPredicate,
    config: ReportingConfig,
    generated_at: datetime,
) -> PeriodReport:
    """Summarize the sales selected by ``predicate``."""
    selected = [s for s in sales if predicate(s)]
    revenue = round_money(sum((s.total for s in selected), ZERO))
    count = len(selected)
    return PeriodReport(
        metadata=ReportMetadata(
            store_name=config.store_name,
            period_label=period_label(predicate),
            generated_at=generated_at.isoformat(),
            currency_symbol=config.currency_symbol,
        ),
        revenue=revenue,
        transaction_count=count,
        average_ticket=average_ticket(revenue, count),
        top_products=rank_top_products(selected, config.top_n),
        critical_stock=critical_stock_rows(products),
    )


# =========================================================================
# 3. DASHBOARD
# =========================================================================


def revenue_on(sales: Iterable[Sale], day: date) -> Decimal:
    return round_money(sum((s.total for s in sales if s.timestamp.date() == day), ZERO))


def daily_revenue(sales: Sequence[Sale], today: date, days: int) -> tuple[DailyRevenue, ...]:
    """Revenue per day for the ``days`` days ending with ``today``, oldest first."""
    return tuple(
        DailyRevenue(day=day, total=revenue_on(sales, day))
        for day in (today - timedelta(days=offset) for offset in range(days - 1, -1, -1))
    )


def build_dashboard(
    sales: Sequence[Sale],
    products: Iterable[Product],
    today: date,
    days: int,
) -> DashboardSnapshot:
    todays = [s for s in sales if s.timestamp.date() == today]
    return DashboardSnapshot(
        today=today,
        sales_today=len(todays),
        revenue_today=revenue_on(todays, today),
        critical_count=len(get_critical_stock(products)),
        daily=daily_revenue(sales, today, days),
    )


# =========================================================================
# 4. PLAIN-TEXT RENDERING
# =========================================================================

_RECEIPT_WIDTH = 40


def render_receipt_text(receipt: Receipt, config: ReportingConfig) -> str:
    """Fixed-width ticket text."""
    sym = config.currency_symbol
    w = _RECEIPT_WIDTH
    out = [
        receipt.store_name.center(w),
        "=" * w,
        f"Ticket: {receipt.sale_id}",
        f"Date:   {receipt.issued_at}",
        f"Pay:    {receipt.payment_label}",
    ]
    if receipt.customer_id:
        out.append(f"Customer: {receipt.customer_id}")
    out.append("-" * w)
    for item in receipt.lines:
        label = f"{item.quantity} x {item.name}"
        if item.capacity:
            label += f" {item.capacity}"
        out.append(label[:w])
        amounts = f"@ {format_amount(item.unit_price, sym)}"
        out.append(f"  {amounts:<{w - 16}}{format_amount(item.line_total, sym):>14}")
    out.append("-" * w)
    rate_pct = f"{(receipt.tax_rate * 100).normalize():f}%"
    out.append(_text_row("Base", format_amount(receipt.tax_base, sym), w))
    out.append(_text_row(f"{receipt.tax_label} {rate_pct}", format_amount(receipt.tax_amount, sym), w))
    out.append(_text_row("TOTAL", format_amount(receipt.total, sym), w))
    if receipt.is_cash:
        out.append(_text_row("Tendered", format_amount(receipt.tendered, sym), w))
        out.append(_text_row("Change", format_amount(receipt.change, sym), w))
    if receipt.footer:
        out.append("=" * w)
        out.append(receipt.footer.center(w))
    return "\n".join(out)


def render_summary_text(report: PeriodReport, config: ReportingConfig) -> str:
    """Condensed message for sharing (chat-app markdown)."""
    sym = config.currency_symbol
    best = report.best_seller
    out = [
        f"*Report {report.metadata.store_name}*",
        f"_{report.metadata.period_label}_",
        "",
        f"*Total sales:* {format_amount(report.revenue, sym)}",
        f"*Transactions:* {report.transaction_count}",
        f"*Average ticket:* {format_amount(report.average_ticket, sym)}",
        "",
        f"*Critical stock:* {len(report.critical_stock)} products",
        f"*Best seller:* {best.name if best else 'N/A'}",
    ]
    if config.share_footer:
        out.extend(["", f"_{config.share_footer}_"])
    return "\n".join(out)


def share_url(text: str) -> str:
    """Chat-app share link carrying ``text``."""
    return SHARE_URL_BASE + quote(text, safe="")


def _text_row(label: str, value: str, width: int) -> str:
    return f"{label:<{width - len(value)}}{value}"


# =========================================================================
# 5. SERIALIZATION
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to a plain dict for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - date/datetime -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
