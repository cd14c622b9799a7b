"""
Configuration Loader (``pos_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into typed ``pos_config.schema``
dataclass instances.  The single public entry point for runtime config is
``pos_config.get_active_config()``.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  effective (merged) configuration.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Out-of-range values  -> ``ValueError`` from the schema.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from pos_config.schema import (
    CartConfig,
    LabelConfig,
    PosConfig,
    ReportConfig,
    SaleConfig,
    StoreProfile,
    TaxConfig,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level YAML value must be a mapping")
    return data


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a config mapping."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _parse_decimal(value: Any, key: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"{key}: invalid decimal {value!r}") from e


def _parse_labels(data: dict[str, Any], key: str) -> tuple[tuple[str, str], ...]:
    raw = data.get(key) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"labels.{key} must be a mapping")
    return tuple((str(k), str(v)) for k, v in raw.items())


def parse_config(data: dict[str, Any]) -> PosConfig:
    """Parse a merged config mapping into a PosConfig."""
    store = data["store"]
    tax = data["tax"]
    cart = data.get("cart") or {}
    sales = data.get("sales") or {}
    report = data.get("report") or {}
    labels = data.get("labels") or {}

    return PosConfig(
        store=StoreProfile(
            name=store["name"],
            currency_code=str(store["currency_code"]).upper(),
            currency_symbol=store.get("currency_symbol", ""),
            receipt_footer=store.get("receipt_footer", ""),
        ),
        tax=TaxConfig(
            rate=_parse_decimal(tax["rate"], "tax.rate"),
            label=tax.get("label", "Tax"),
        ),
        cart=CartConfig(
            max_line_quantity=int(cart.get("max_line_quantity", 99)),
            cap_by_stock=bool(cart.get("cap_by_stock", True)),
        ),
        sales=SaleConfig(id_prefix=str(sales.get("id_prefix", "SALE"))),
        report=ReportConfig(
            top_n=int(report.get("top_n", 5)),
            daily_window_days=int(report.get("daily_window_days", 7)),
            share_footer=report.get("share_footer", ""),
        ),
        labels=LabelConfig(
            payment_methods=_parse_labels(labels, "payment_methods"),
            categories=_parse_labels(labels, "categories"),
        ),
        checksum=compute_checksum(data),
    )
