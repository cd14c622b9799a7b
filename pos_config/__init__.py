"""
pos_config -- single public entrypoint for terminal configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``PosConfig``.

Architecture position:
    Configuration -- YAML-driven.  This package sits above ``pos_kernel``
    and below ``pos_modules``.  The kernel MUST NEVER import from
    ``pos_config``; ``pos_config.bridges`` translates config into
    kernel-compatible inputs.

Failure modes:
    - ``FileNotFoundError`` -- override file does not exist.
    - ``ValueError`` / ``KeyError`` -- schema validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``pos_config_loaded`` log entry carrying the config checksum and the
    files it was assembled from.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pos_config.loader import load_yaml_file, merge_dicts, parse_config
from pos_config.schema import PosConfig

_logger = logging.getLogger("pos_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | str | None = None) -> PosConfig:
    """The ONLY public configuration entrypoint.

    Loads the packaged defaults and, when ``config_path`` is given, merges
    that file over them key by key.

    Args:
        config_path: Optional YAML override file.

    Returns:
        PosConfig -- validated, frozen configuration.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        ValueError: If validation fails.
        KeyError: If a required key is missing.
    """
    sources = [DEFAULT_CONFIG_PATH]
    data = load_yaml_file(DEFAULT_CONFIG_PATH)
    if config_path is not None:
        override_path = Path(config_path)
        data = merge_dicts(data, load_yaml_file(override_path))
        sources.append(override_path)

    config = parse_config(data)

    _logger.info(
        "pos_config_loaded",
        extra={
            "checksum": config.checksum,
            "sources": [str(p) for p in sources],
            "store_name": config.store.name,
            "tax_rate": str(config.tax.rate),
        },
    )
    return config


__all__ = ["DEFAULT_CONFIG_PATH", "PosConfig", "get_active_config"]
