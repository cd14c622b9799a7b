"""
Tests for pos_config: YAML loading, schema validation, checksum and the
config -> kernel bridges.
"""

from decimal import Decimal

import pytest
import yaml

from pos_config import DEFAULT_CONFIG_PATH, get_active_config
from pos_config.bridges import build_cart_policy, build_sale_id_allocator, tax_rate
from pos_config.loader import compute_checksum, load_yaml_file, merge_dicts, parse_config
from pos_kernel.domain.pricing import PaymentMethod
from pos_modules.reporting import ReportingConfig


@pytest.fixture
def write_yaml(tmp_path):
    def _write(data, name="override.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write


# =========================================================================
# Default set
# =========================================================================


class TestDefaultConfig:

    def test_loads_packaged_defaults(self):
        config = get_active_config()
        assert config.store.name == "Don Bacco Liquor Store"
        assert config.store.currency_code == "PEN"
        assert config.tax.rate == Decimal("0.18")
        assert config.tax.label == "IGV"
        assert config.cart.max_line_quantity == 99
        assert config.cart.cap_by_stock is True
        assert config.report.top_n == 5
        assert config.report.daily_window_days == 7

    def test_checksum_is_deterministic(self):
        assert get_active_config().checksum == get_active_config().checksum
        assert len(get_active_config().checksum) == 64

    def test_load_is_logged(self, captured_logs):
        config = get_active_config()
        record = next(r for r in captured_logs() if r["message"] == "pos_config_loaded")
        assert record["checksum"] == config.checksum
        assert record["sources"] == [str(DEFAULT_CONFIG_PATH)]


# =========================================================================
# Overrides
# =========================================================================


class TestOverrides:

    def test_override_merges_key_by_key(self, write_yaml):
        path = write_yaml({"store": {"name": "Corner Shop"}, "report": {"top_n": 3}})
        config = get_active_config(path)

        assert config.store.name == "Corner Shop"
        assert config.store.currency_code == "PEN"
        assert config.report.top_n == 3
        assert config.report.daily_window_days == 7

    def test_override_changes_checksum(self, write_yaml):
        path = write_yaml({"tax": {"rate": "0.10"}})
        assert get_active_config(path).checksum != get_active_config().checksum

    def test_missing_override_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "nope.yaml")

    @pytest.mark.parametrize(
        "override",
        [
            {"tax": {"rate": "1.5"}},
            {"tax": {"rate": "-0.01"}},
            {"tax": {"rate": "eighteen"}},
            {"store": {"currency_code": "SOLES"}},
            {"cart": {"max_line_quantity": 0}},
            {"report": {"top_n": 0}},
            {"sales": {"id_prefix": ""}},
            {"labels": {"categories": ["beer"]}},
        ],
    )
    def test_invalid_values_rejected(self, write_yaml, override):
        with pytest.raises(ValueError):
            get_active_config(write_yaml(override))

    def test_non_mapping_document_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_yaml_file(path)


# =========================================================================
# Loader helpers
# =========================================================================


class TestLoaderHelpers:

    def test_merge_dicts_is_recursive_and_pure(self):
        base = {"a": {"x": 1, "y": 2}, "b": 1}
        merged = merge_dicts(base, {"a": {"y": 3}, "c": 4})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
        assert base == {"a": {"x": 1, "y": 2}, "b": 1}

    def test_checksum_ignores_key_order(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_missing_required_section(self):
        with pytest.raises(KeyError):
            parse_config({"store": {"name": "X", "currency_code": "USD"}})


# =========================================================================
# Bridges
# =========================================================================


class TestBridges:

    def test_cart_policy(self, write_yaml):
        config = get_active_config(write_yaml({"cart": {"max_line_quantity": 12, "cap_by_stock": False}}))
        policy = build_cart_policy(config)
        assert policy.max_line_quantity == 12
        assert policy.cap_by_stock is False

    def test_sale_id_allocator(self, write_yaml, deterministic_clock):
        config = get_active_config(write_yaml({"sales": {"id_prefix": "T2"}}))
        allocator = build_sale_id_allocator(config, start=5)
        assert allocator.next_id(deterministic_clock.now()) == "T2-20240614-000005"

    def test_tax_rate(self):
        assert tax_rate(get_active_config()) == Decimal("0.18")

    def test_reporting_settings_feed_reporting_config(self, write_yaml):
        path = write_yaml({"labels": {"payment_methods": {"cash": "Efectivo"}}})
        reporting = ReportingConfig.from_dict(get_active_config(path).reporting_settings())

        assert reporting.store_name == "Don Bacco Liquor Store"
        assert reporting.tax_label == "IGV"
        assert reporting.payment_label(PaymentMethod.CASH) == "Efectivo"
        assert reporting.payment_label(PaymentMethod.CARD) == "Card"
