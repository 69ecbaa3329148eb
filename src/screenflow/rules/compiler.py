"""Rule compiler entry point: dispatches to simple or expert mode."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pandas as pd
import structlog

from screenflow.config import parse_screening_config
from screenflow.core.models import ExpertModeConfig, ScreeningConfig
from screenflow.rules.expert_mode import compile_expert
from screenflow.rules.simple_mode import compile_simple
from screenflow.rules.table import RuleTable

logger = structlog.get_logger(__name__)


def compile_rules(
    config: ScreeningConfig | Mapping[str, Any] | None,
    dataset: pd.DataFrame,
) -> RuleTable:
    """Compile screening configuration into an ordered rule table.

    A configuration holding ``screening_rules`` compiles in expert mode;
    anything else compiles in simple mode. ``None`` or an empty
    configuration yields an empty table.

    Args:
        config: Parsed configuration, a raw mapping, or None.
        dataset: Dataset the rules will run against.

    Returns:
        Immutable rule table, identical for identical input.

    Raises:
        ConfigValidationError: If the configuration is invalid.
        InvalidPredicateError: If a predicate fails the denylist or grammar.
    """
    if isinstance(config, Mapping):
        config = parse_screening_config(config)
    if config is None:
        logger.info("rules_compiled", mode="none", n_rules=0)
        return RuleTable()

    if isinstance(config, ExpertModeConfig):
        mode = "expert"
        rules = compile_expert(config)
    else:
        mode = "simple"
        rules = [] if config.is_empty() else compile_simple(config, dataset)

    table = RuleTable(rules)
    logger.info("rules_compiled", mode=mode, n_rules=len(table), rule_ids=table.rule_ids)
    return table
