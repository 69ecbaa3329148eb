"""Screening configuration loading.

Reads YAML or JSON screening configuration and converts it into the
typed ``SimpleModeConfig | ExpertModeConfig`` union.
"""
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from screenflow.core.exceptions import ConfigValidationError
from screenflow.core.models import ExpertModeConfig, ScreeningConfig, SimpleModeConfig

logger = structlog.get_logger(__name__)


def _screening_block(raw: Mapping[str, Any]) -> Mapping[str, Any] | None:
    """Locate the screening section.

    Accepted layouts: the document root itself, a top-level ``screening``
    key, or ``data.screening``.
    """
    if "screening" in raw:
        return raw["screening"]
    data = raw.get("data")
    if isinstance(data, Mapping) and "screening" in data:
        return data["screening"]
    return raw


def parse_screening_config(raw: Mapping[str, Any] | None) -> ScreeningConfig | None:
    """Convert a raw configuration mapping into a typed configuration.

    Args:
        raw: Parsed YAML/JSON document or screening section.

    Returns:
        ``ExpertModeConfig`` when ``screening_rules`` is present,
        ``SimpleModeConfig`` otherwise, or None when there is nothing to
        compile.

    Raises:
        ConfigValidationError: If the structure does not match the schema.
    """
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise ConfigValidationError(
            "Screening configuration must be a mapping",
            field="screening",
            value=type(raw).__name__,
        )
    block = _screening_block(raw)
    if block is None or (isinstance(block, Mapping) and not block):
        return None
    if not isinstance(block, Mapping):
        raise ConfigValidationError(
            "screening section must be a mapping", field="screening", value=block
        )

    try:
        if block.get("screening_rules") is not None:
            return ExpertModeConfig.model_validate(
                {"screening_rules": block["screening_rules"]}
            )
        return SimpleModeConfig.model_validate(dict(block))
    except ValidationError as exc:
        first = exc.errors()[0]
        path = ".".join(str(part) for part in first["loc"])
        raise ConfigValidationError(
            f"Invalid screening configuration at {path}: {first['msg']}",
            field=path,
            value=first.get("input"),
        ) from exc


def load_screening_config(path: Path) -> ScreeningConfig | None:
    """Load screening configuration from a YAML or JSON file.

    In expert mode ``screening_rules`` may name a CSV rule table, resolved
    relative to the configuration file.

    Args:
        path: Path to the configuration file.

    Returns:
        Typed configuration, or None for an empty document.

    Raises:
        FileNotFoundError: If the file (or a referenced rule table) does
            not exist.
        ConfigValidationError: If the file cannot be parsed or is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Cannot parse {path}: {exc}", field=str(path)) from exc
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise ConfigValidationError(
            f"{path} must contain a mapping", field=str(path), value=type(raw).__name__
        )

    block = _screening_block(raw)
    if isinstance(block, Mapping) and isinstance(block.get("screening_rules"), str):
        table_path = path.parent / block["screening_rules"]
        block = {**block, "screening_rules": _read_rule_table(table_path)}

    config = parse_screening_config({"screening": block})
    logger.info(
        "load_screening_config",
        path=str(path),
        mode=config.mode if config is not None else "none",
    )
    return config


def _read_rule_table(path: Path) -> Any:
    import pandas as pd  # noqa: PLC0415

    if not path.exists():
        raise FileNotFoundError(f"Rule table not found: {path}")
    return pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])
