"""Audit tables derived from screened data."""
from __future__ import annotations

from screenflow.audit.codebook import build_raw_codebook
from screenflow.audit.consort import (
    build_by_reason,
    build_flow,
    build_overlap,
    build_screening_log,
)
from screenflow.audit.report import build_audit_report, report_tables
from screenflow.audit.summary import build_decision_registry, build_summary, build_warnings

__all__ = [
    "build_audit_report",
    "build_by_reason",
    "build_decision_registry",
    "build_flow",
    "build_overlap",
    "build_raw_codebook",
    "build_screening_log",
    "build_summary",
    "build_warnings",
    "report_tables",
]
