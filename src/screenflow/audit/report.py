"""Assemble all audit tables for one screening run."""
from __future__ import annotations

import pandas as pd
import structlog
from pydantic import BaseModel

from screenflow.audit import artifacts
from screenflow.audit.consort import (
    build_by_reason,
    build_flow,
    build_overlap,
    build_screening_log,
)
from screenflow.audit.summary import build_decision_registry, build_summary, build_warnings
from screenflow.core.models import (
    AuditReport,
    DecisionEntry,
    FlowStep,
    OverlapCount,
    ReasonCount,
    ScreeningLogEntry,
    ScreeningWarning,
    SummaryLine,
)
from screenflow.rules.table import RuleTable

logger = structlog.get_logger(__name__)

# Count columns that are empty on note rows.
NULLABLE_COUNT_COLUMNS = ("n_affected", "n_remaining", "n")

# artifact file name -> (report attribute, row model)
REPORT_TABLES: dict[str, tuple[str, type[BaseModel]]] = {
    artifacts.SCREENING_LOG: ("screening_log", ScreeningLogEntry),
    artifacts.SCREENING_OVERLAP: ("overlap", OverlapCount),
    artifacts.CONSORT_FLOW: ("flow", FlowStep),
    artifacts.CONSORT_BY_REASON: ("by_reason", ReasonCount),
    artifacts.SCREENING_SUMMARY: ("summary", SummaryLine),
    artifacts.WARNINGS: ("warnings", ScreeningWarning),
    artifacts.DECISION_REGISTRY: ("decisions", DecisionEntry),
}


def build_audit_report(screened: pd.DataFrame, rules: RuleTable) -> AuditReport:
    """Derive every audit table from screened data and its rule table.

    Args:
        screened: Output of ``apply_screening``, before any row removal.
        rules: Rule table the data was screened with.

    Returns:
        Report holding all tables.

    Raises:
        AnnotationMissingError: If ``screened`` was not produced by
            screening with ``rules``.
    """
    report = AuditReport(
        screening_log=build_screening_log(screened, rules),
        flow=build_flow(screened, rules),
        by_reason=build_by_reason(screened, rules),
        overlap=build_overlap(screened, rules),
        summary=build_summary(screened, rules),
        warnings=build_warnings(screened, rules),
        decisions=build_decision_registry(screened, rules),
    )
    logger.info(
        "audit_report_built",
        n_flow_steps=len(report.flow),
        n_warnings=len(report.warnings),
    )
    return report


def rows_to_frame(rows: list[BaseModel], model: type[BaseModel]) -> pd.DataFrame:
    """Rows as a DataFrame whose columns follow the model's fields, even when empty."""
    frame = pd.DataFrame(
        [row.model_dump(mode="json") for row in rows],
        columns=list(model.model_fields),
    )
    nullable = [c for c in NULLABLE_COUNT_COLUMNS if c in frame.columns]
    return frame.astype({c: "Int64" for c in nullable})


def report_tables(report: AuditReport) -> dict[str, pd.DataFrame]:
    """One DataFrame per audit artifact, keyed by file name."""
    return {
        name: rows_to_frame(getattr(report, attr), model)
        for name, (attr, model) in REPORT_TABLES.items()
    }
