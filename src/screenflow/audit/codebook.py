"""Raw codebook: a descriptive inventory of variable metadata.

Reports labels, storage types, missingness and value-label previews for
each column as read. Screening annotation columns are skipped.
"""
from __future__ import annotations

import pandas as pd
import structlog
from pandas.api.types import (
    is_bool_dtype,
    is_datetime64_any_dtype,
    is_numeric_dtype,
    is_object_dtype,
    is_string_dtype,
)

from screenflow.core.enums import ScaleType
from screenflow.core.models import CodebookEntry, DatasetLabels
from screenflow.rules.table import RuleTable
from screenflow.screening.engine import annotation_columns

logger = structlog.get_logger(__name__)

PREVIEW_LIMIT = 5


def _sort_codes(codes: list[str]) -> list[str]:
    try:
        return sorted(codes, key=float)
    except ValueError:
        return sorted(codes)


def _scale_type(series: pd.Series, has_labels: bool) -> ScaleType:
    if has_labels:
        return ScaleType.LABELLED_OPTIONS
    if is_bool_dtype(series):
        return ScaleType.LOGICAL
    if is_datetime64_any_dtype(series):
        return ScaleType.DATETIME_UNLABELLED
    if is_numeric_dtype(series):
        return ScaleType.NUMERIC_UNLABELLED
    if is_string_dtype(series) or is_object_dtype(series):
        return ScaleType.FREE_TEXT
    return ScaleType.UNKNOWN


def build_raw_codebook(
    dataset: pd.DataFrame,
    labels: DatasetLabels | None = None,
    source_file: str | None = None,
    rules: RuleTable | None = None,
) -> list[CodebookEntry]:
    """Inventory every raw variable, sorted by name.

    Args:
        dataset: Dataset as read, with or without screening annotations.
        labels: Optional variable and value labels.
        source_file: File the dataset came from, recorded per row.
        rules: Rules the dataset was screened with. Their flag columns are
            skipped along with the fixed annotation columns; any other
            ``flag_*`` column is reported as a raw variable.

    Returns:
        One entry per variable.
    """
    labels = labels or DatasetLabels()
    skip = set(annotation_columns(dataset, rules))
    n_rows = len(dataset)

    entries = []
    for column in sorted((c for c in dataset.columns if c not in skip), key=str):
        name = str(column)
        series = dataset[column]
        value_labels = labels.value_labels.get(name, {})
        codes = _sort_codes(list(value_labels))
        pairs = [f"{code}={value_labels[code]}" for code in codes]
        preview = "; ".join(pairs[:PREVIEW_LIMIT])
        if len(pairs) > PREVIEW_LIMIT:
            preview += "; ..."

        n_missing = int(series.isna().sum())
        entries.append(CodebookEntry(
            var_name=name,
            var_label=labels.variable_labels.get(name),
            storage_class=str(series.dtype),
            response_scale_type=_scale_type(series, bool(value_labels)),
            n_options=len(value_labels),
            min_label=pairs[0] if pairs else None,
            max_label=pairs[-1] if pairs else None,
            value_labels_preview=preview or None,
            n_non_missing=n_rows - n_missing,
            n_missing=n_missing,
            pct_missing=round(100 * n_missing / n_rows, 2) if n_rows else 0.0,
            distinct_values=int(series.nunique(dropna=True)),
            source_file=source_file,
        ))

    logger.info("raw_codebook_built", n_variables=len(entries), source_file=source_file)
    return entries
