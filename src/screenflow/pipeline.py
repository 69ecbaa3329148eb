"""End-to-end screening run: compile, apply, audit."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import pandas as pd
import structlog

from screenflow.audit.report import build_audit_report
from screenflow.core.models import AuditReport, ScreeningConfig
from screenflow.rules import RuleTable, compile_rules
from screenflow.screening import apply_screening, drop_excluded_rows

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ScreeningResult:
    """Outputs of one screening run.

    Attributes:
        screened: Annotated dataset (excluded rows removed if requested).
        rules: Compiled rule table.
        report: Audit tables, computed before any row removal.
        n_dropped: Rows physically removed.
    """

    screened: pd.DataFrame
    rules: RuleTable
    report: AuditReport
    n_dropped: int = 0


def run_screening(
    dataset: pd.DataFrame,
    config: ScreeningConfig | Mapping[str, Any] | None,
    drop_excluded: bool = False,
) -> ScreeningResult:
    """Compile ``config``, screen ``dataset`` and build the audit report.

    Args:
        dataset: Rows to screen.
        config: Screening configuration (typed, raw mapping, or None).
        drop_excluded: Remove excluded rows from the returned data. The
            audit report always describes the full dataset.

    Returns:
        Screening result.
    """
    rules = compile_rules(config, dataset)
    screened = apply_screening(dataset, rules)
    report = build_audit_report(screened, rules)

    n_dropped = 0
    if drop_excluded:
        kept = drop_excluded_rows(screened)
        n_dropped = len(screened) - len(kept)
        screened = kept

    logger.info(
        "run_screening",
        n_rows=len(dataset),
        n_rules=len(rules),
        n_dropped=n_dropped,
    )
    return ScreeningResult(screened=screened, rules=rules, report=report, n_dropped=n_dropped)
