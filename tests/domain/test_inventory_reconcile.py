"""
Tests for pure stock reconciliation (``pos_kernel.domain.inventory``).

Invariants tested:
- STOCK_LOCKSTEP: an unknown product aborts the whole reconciliation.
- Only products on the sale change; each by exactly its sold quantity.
- Alerts are edge-triggered on entering the critical band.
"""

import pytest

from pos_kernel.domain.cart import Cart, CartPolicy, add_line, adjust_quantity
from pos_kernel.domain.inventory import StockAlert, get_critical_stock, reconcile
from pos_kernel.exceptions import UnknownProductError


def _lines(*pairs):
    cart = Cart.empty()
    for product, quantity in pairs:
        cart = add_line(cart, product, CartPolicy(cap_by_stock=False))
        cart = adjust_quantity(cart, product.product_id, quantity - 1)
    return cart.lines


class TestReconcile:

    def test_deducts_exact_quantity_and_nothing_else(self, seed_products):
        p1 = seed_products[0]
        result = reconcile(seed_products, _lines((p1, 3)))

        by_id = {p.product_id: p for p in result.products}
        assert by_id["1"].stock == p1.stock - 3
        for original in seed_products[1:]:
            assert by_id[original.product_id] == original
        assert [p.product_id for p in result.changed] == ["1"]

    def test_preserves_catalog_order(self, seed_products):
        result = reconcile(seed_products, _lines((seed_products[4], 1), (seed_products[0], 1)))
        assert [p.product_id for p in result.products] == ["1", "2", "3", "4", "5", "6"]

    def test_originals_not_mutated(self, seed_products):
        before = [p.stock for p in seed_products]
        reconcile(seed_products, _lines((seed_products[0], 5)))
        assert [p.stock for p in seed_products] == before

    def test_unknown_product_aborts_everything(self, seed_products, product_factory):
        ghost = product_factory("ghost")
        with pytest.raises(UnknownProductError) as exc_info:
            reconcile(seed_products, _lines((seed_products[0], 1), (ghost, 1)))
        assert exc_info.value.product_id == "ghost"

    def test_entering_critical_band_emits_one_alert(self, product_factory):
        product = product_factory("A", stock=11, min_stock=10)
        result = reconcile((product,), _lines((product, 2)))

        assert result.alerts == (StockAlert("A", product.name, 9, 10),)

    def test_already_critical_emits_nothing(self, product_factory):
        product = product_factory("A", stock=5, min_stock=10)
        result = reconcile((product,), _lines((product, 2)))

        assert result.products[0].stock == 3
        assert result.alerts == ()

    def test_landing_exactly_on_minimum_alerts(self, product_factory):
        product = product_factory("A", stock=12, min_stock=10)
        result = reconcile((product,), _lines((product, 2)))
        assert len(result.alerts) == 1

    def test_oversell_goes_negative_and_is_reported(self, product_factory):
        product = product_factory("A", stock=1, min_stock=0)
        result = reconcile((product,), _lines((product, 3)))
        assert result.products[0].stock == -2
        assert result.oversold == (result.products[0],)

    def test_alert_as_dict(self, product_factory):
        product = product_factory("A", stock=11, min_stock=10)
        alert = reconcile((product,), _lines((product, 1))).alerts[0]
        assert alert.as_dict() == {
            "productId": "A",
            "name": product.name,
            "stock": 10,
            "minStock": 10,
        }


class TestGetCriticalStock:

    def test_seed_catalog(self, seed_products):
        assert [p.product_id for p in get_critical_stock(seed_products)] == ["2", "6"]

    def test_empty(self):
        assert get_critical_stock([]) == []
