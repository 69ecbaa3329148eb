"""Screening engine."""
from __future__ import annotations

from screenflow.screening.engine import (
    ANNOTATION_COLUMNS,
    NO_RULES_NOTE,
    annotation_columns,
    apply_screening,
    drop_excluded_rows,
)

__all__ = [
    "ANNOTATION_COLUMNS",
    "NO_RULES_NOTE",
    "annotation_columns",
    "apply_screening",
    "drop_excluded_rows",
]
