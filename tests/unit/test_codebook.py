"""Tests for the raw codebook."""
from __future__ import annotations

import pandas as pd
import pytest

from screenflow.audit import build_raw_codebook
from screenflow.core.enums import ScaleType
from screenflow.core.models import DatasetLabels
from screenflow.rules.table import RuleTable


@pytest.fixture
def labels() -> DatasetLabels:
    return DatasetLabels(
        variable_labels={"attn_check": "Select 'agree' for this item"},
        value_labels={"attn_check": {1: "Disagree", 2: "Neutral", 3: "Agree"}},
    )


def test_one_entry_per_variable_sorted(survey_df: pd.DataFrame) -> None:
    entries = build_raw_codebook(survey_df)
    assert [e.var_name for e in entries] == [
        "age", "attn_check", "consent", "resp_id", "start_time",
    ]


def test_annotation_columns_skipped(screened: pd.DataFrame, simple_rules: RuleTable) -> None:
    names = [e.var_name for e in build_raw_codebook(screened, rules=simple_rules)]
    assert "pool_main" not in names
    assert not [n for n in names if n.startswith("flag_")]
    assert len(names) == 5


def test_raw_flag_column_is_a_variable() -> None:
    dataset = pd.DataFrame({"age": [20, 30], "flag_reviewed": [1, 0]})
    names = [e.var_name for e in build_raw_codebook(dataset)]
    assert names == ["age", "flag_reviewed"]


def test_missingness(survey_df: pd.DataFrame) -> None:
    entries = {e.var_name: e for e in build_raw_codebook(survey_df)}
    age = entries["age"]
    assert (age.n_missing, age.n_non_missing, age.pct_missing) == (3, 7, 30.0)
    assert age.distinct_values == 7
    assert age.response_scale_type == ScaleType.NUMERIC_UNLABELLED
    assert entries["consent"].response_scale_type == ScaleType.FREE_TEXT
    assert entries["consent"].pct_missing == 10.0


def test_value_labels(survey_df: pd.DataFrame, labels: DatasetLabels) -> None:
    entries = {e.var_name: e for e in build_raw_codebook(survey_df, labels, "survey.csv")}
    attn = entries["attn_check"]
    assert attn.var_label == "Select 'agree' for this item"
    assert attn.response_scale_type == ScaleType.LABELLED_OPTIONS
    assert attn.n_options == 3
    assert attn.min_label == "1=Disagree"
    assert attn.max_label == "3=Agree"
    assert attn.value_labels_preview == "1=Disagree; 2=Neutral; 3=Agree"
    assert attn.source_file == "survey.csv"
    assert entries["age"].value_labels_preview is None


def test_preview_truncated() -> None:
    dataset = pd.DataFrame({"q1": [1, 2, 10]})
    labels = DatasetLabels(value_labels={"q1": {str(i): f"L{i}" for i in range(1, 11)}})
    (entry,) = build_raw_codebook(dataset, labels)
    assert entry.value_labels_preview == "1=L1; 2=L2; 3=L3; 4=L4; 5=L5; ..."
    assert entry.max_label == "10=L10"


def test_logical_and_datetime_columns() -> None:
    dataset = pd.DataFrame({
        "finished": [True, False],
        "ended": pd.to_datetime(["2024-01-01", "2024-01-02"]),
    })
    entries = {e.var_name: e for e in build_raw_codebook(dataset)}
    assert entries["finished"].response_scale_type == ScaleType.LOGICAL
    assert entries["ended"].response_scale_type == ScaleType.DATETIME_UNLABELLED
