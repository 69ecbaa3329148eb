"""Shared pytest fixtures for ScreenFlow tests."""
from __future__ import annotations

import os

# Prevent Rich/Typer from emitting ANSI escape codes in CLI output.
os.environ["NO_COLOR"] = "1"

from typing import Any

import numpy as np
import pandas as pd
import pytest

from screenflow.rules import RuleTable, compile_rules
from screenflow.screening import apply_screening

ATTN_VALUES = [3, 3, 2, 3, 1, 3, 3, 2, 3, 3]


@pytest.fixture
def survey_df() -> pd.DataFrame:
    """Ten survey responses.

    Rows 1-3 were collected 2024-01-02..2024-01-15; ``age`` is missing on
    rows 2, 4, 7; ``consent`` is missing on row 6; ``attn_check`` fails
    (is not 3) on rows 3, 5, 8.
    """
    return pd.DataFrame({
        "resp_id": [f"R{i:02d}" for i in range(1, 11)],
        "start_time": [
            "2024-01-02 09:00:00",
            "2024-01-10 14:30:00",
            "2024-01-15 23:00:00",
            "2024-01-16 08:00:00",
            "2024-01-20 10:00:00",
            "2024-02-01 12:00:00",
            "2024-02-03 09:15:00",
            "2024-02-10 16:45:00",
            "2024-02-11 11:00:00",
            "2024-02-20 13:00:00",
        ],
        "age": [25, np.nan, 30, np.nan, 45, 19, np.nan, 33, 52, 28],
        "consent": ["yes", "yes", "yes", "yes", "yes", None, "yes", "yes", "yes", "yes"],
        "attn_check": ATTN_VALUES,
    })


@pytest.fixture
def simple_config() -> dict[str, Any]:
    """Simple-mode configuration covering all three sections."""
    return {
        "partitioning": {
            "pretest": {
                "by": "date_range",
                "date_var": "start_time",
                "start": "2024-01-01",
                "end": "2024-01-15",
            },
        },
        "eligibility": {"required_nonmissing": ["age", "consent"], "action": "exclude"},
        "quality_flags": {
            "attention_checks": [
                {"var": "attn_check", "pass_values": [3], "description": "Attention check 1"},
            ],
        },
    }


@pytest.fixture
def expert_rules() -> list[dict[str, Any]]:
    """Expert-mode rule rows."""
    return [
        {
            "rule_id": "adult_consented",
            "category": "eligibility",
            "description": "Adult with consent recorded",
            "predicate": "age >= 18 AND consent IS NOT MISSING",
            "action": "exclude",
        },
        {
            "rule_id": "attention",
            "category": "quality",
            "description": "Attention item answered 3",
            "predicate": "attn_check IN (3)",
            "action": "flag",
        },
    ]


@pytest.fixture
def simple_rules(survey_df: pd.DataFrame, simple_config: dict[str, Any]) -> RuleTable:
    """Rules compiled from ``simple_config``."""
    return compile_rules(simple_config, survey_df)


@pytest.fixture
def screened(survey_df: pd.DataFrame, simple_rules: RuleTable) -> pd.DataFrame:
    """``survey_df`` screened with ``simple_rules``.

    Pretest: rows 1-3. Excluded: rows 2, 4, 6, 7. Flagged: rows 3, 5, 8.
    Pool: rows 5, 8, 9, 10.
    """
    return apply_screening(survey_df, simple_rules)
