#!/usr/bin/env python3
"""
Demo: one shift at the till.

Seeds a small liquor-store catalog, rings up a handful of sales through
TerminalSession (including a rejected short cash tender), then prints the
last receipt, the period summary and the share link to stdout.

Nothing is persisted unless --out is given, in which case the receipt and
report workbooks are written to that directory.

Usage:
    python3 scripts/demo_terminal.py
    python3 scripts/demo_terminal.py --out /tmp/pos-docs
    python3 scripts/demo_terminal.py --config my_store.yaml --log
"""

import argparse
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from pos_config import get_active_config  # noqa: E402
from pos_config.bridges import build_cart_policy, build_sale_id_allocator  # noqa: E402
from pos_kernel.domain.catalog import Product  # noqa: E402
from pos_kernel.domain.clock import DeterministicClock  # noqa: E402
from pos_kernel.domain.pricing import PaymentMethod  # noqa: E402
from pos_kernel.logging_config import LogContext, configure_logging  # noqa: E402
from pos_kernel.services import (  # noqa: E402
    CheckoutCoordinator,
    InventoryReconciler,
    TerminalSession,
    TerminalStore,
)
from pos_modules.reporting import (  # noqa: E402
    DirectoryDocumentSink,
    ReportingConfig,
    ReportingService,
    on_day,
)

SHIFT_START = datetime(2024, 6, 14, 18, 0, 0, tzinfo=UTC)

SEED_PRODUCTS = (
    dict(product_id="1", name="Corona Extra", brand="Modelo", category="beer",
         capacity="355ml", price="25", cost="18", stock=120, min_stock=24),
    dict(product_id="2", name="Whisky Black Label", brand="Johnnie Walker",
         category="spirits", capacity="750ml", price="850", cost="600",
         stock=9, min_stock=8, is_promo=True),
    dict(product_id="3", name="Reserva Red Wine", brand="Concha y Toro",
         category="wine", capacity="750ml", price="180", cost="120",
         stock=15, min_stock=10),
    dict(product_id="4", name="Aged Rum", brand="Bacardi", category="spirits",
         capacity="1L", price="220", cost="150", stock=40, min_stock=12),
    dict(product_id="5", name="Cola", brand="Coca Cola", category="soft_drink",
         capacity="2L", price="35", cost="25", stock=50, min_stock=20),
    dict(product_id="6", name="Salted Chips", brand="Sabritas", category="snack",
         capacity="140g", price="45", cost="30", stock=15, min_stock=15),
)

# (product ids, payment method, tender)
SHIFT = (
    (("1", "1", "5"), PaymentMethod.CASH, "100"),
    (("2",), PaymentMethod.CARD, None),
    (("3", "6"), PaymentMethod.CASH, "250"),
    (("4", "4"), PaymentMethod.MOBILE_WALLET, None),
)


def build_terminal(config_path: str | None, out_dir: Path | None):
    config = get_active_config(config_path)
    clock = DeterministicClock(SHIFT_START)
    store = TerminalStore(Product.create(**fields) for fields in SEED_PRODUCTS)
    reporting = ReportingService(
        clock=clock,
        config=ReportingConfig.from_dict(config.reporting_settings()),
        document_sink=DirectoryDocumentSink(out_dir) if out_dir else None,
    )
    coordinator = CheckoutCoordinator(
        store,
        reconciler=InventoryReconciler(),
        clock=clock,
        id_allocator=build_sale_id_allocator(config),
        receipt_renderer=reporting.render_receipt,
    )
    session = TerminalSession(store, coordinator, build_cart_policy(config))
    return clock, store, session, reporting


def run_shift(clock, session) -> list:
    outcomes = []
    for product_ids, method, tender in SHIFT:
        clock.advance(15 * 60)
        for product_id in product_ids:
            session.add_product(product_id)
        session.select_payment_method(method)
        if method is PaymentMethod.CASH:
            # Short tender first; the operator corrects it and retries.
            short = session.enter_tender("10")
            print(f"  tender 10.00 -> {short.status.name}, short by {short.shortfall}")
            rejected = session.checkout()
            print(f"  checkout -> {rejected.status.name}: {rejected.rejection.message}")
            session.enter_tender(tender)
        outcome = session.checkout()
        print(f"  checkout -> {outcome.status.name} {outcome.sale.sale_id} total {outcome.sale.total}")
        for alert in outcome.stock_alerts:
            print(f"    ! critical stock: {alert.name} ({alert.stock}/{alert.min_stock})")
        outcomes.append(outcome)
    return outcomes


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ring up a demo shift at the till.")
    parser.add_argument("--config", help="YAML file merged over the packaged defaults")
    parser.add_argument("--out", type=Path, help="Directory for receipt/report workbooks")
    parser.add_argument("--log", action="store_true", help="Emit JSON logs on stderr")
    args = parser.parse_args(argv)

    if args.log:
        configure_logging(level=logging.INFO)

    clock, store, session, reporting = build_terminal(args.config, args.out)

    print("=" * 40)
    print("SHIFT".center(40))
    print("=" * 40)
    with LogContext.bind(terminal_id="demo-01", session_id="shift-1"):
        outcomes = run_shift(clock, session)

    print()
    print(outcomes[-1].receipt.text if outcomes[-1].receipt else "(no receipt)")

    bundle = reporting.summarize(store.sales, store.products, on_day(clock.today()))
    print()
    print(bundle.summary_text)
    print()
    print(reporting.share_link(bundle))
    if bundle.is_degraded:
        print(f"[degraded] {bundle.degraded.reason}")

    dashboard = reporting.dashboard(store.sales, store.products)
    print()
    print(f"Sales today: {dashboard.sales_today}  Revenue: {dashboard.revenue_today}"
          f"  Critical: {dashboard.critical_count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
