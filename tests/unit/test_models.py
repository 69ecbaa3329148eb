"""Tests for ScreenFlow Pydantic models."""
from __future__ import annotations

from datetime import date, datetime

import pandas as pd
import pytest
from pydantic import ValidationError

from screenflow.core.enums import Action, Category, Partition, Phase
from screenflow.core.models import (
    DatasetLabels,
    ExpertModeConfig,
    PartitionBlock,
    QualityFlags,
    Rule,
    SimpleModeConfig,
)


def _rule(**overrides: object) -> Rule:
    fields: dict[str, object] = {
        "rule_id": "r1",
        "category": Category.QUALITY,
        "description": "Attention check",
        "predicate": "attn IN (3)",
        "action": Action.FLAG,
        "order": 1,
    }
    fields.update(overrides)
    return Rule(**fields)


class TestRule:
    def test_phase_from_action(self) -> None:
        assert _rule().phase == Phase.FILTER
        partition = _rule(
            action=Action.PARTITION, category=Category.PARTITION, assign_value=Partition.PRETEST
        )
        assert partition.phase == Phase.PARTITION

    def test_flag_column(self) -> None:
        assert _rule(rule_id="quality_attentioncheck_attn_01").flag_column == (
            "flag_quality_attentioncheck_attn_01"
        )

    def test_frozen(self) -> None:
        rule = _rule()
        with pytest.raises(ValidationError):
            rule.order = 5  # type: ignore[misc]

    def test_rejects_empty_rule_id(self) -> None:
        with pytest.raises(ValidationError):
            _rule(rule_id="")

    def test_rejects_unknown_action(self) -> None:
        with pytest.raises(ValidationError):
            _rule(action="drop")

    @pytest.mark.parametrize("assign_value", [None, Partition.UNASSIGNED])
    def test_partition_rule_needs_assign_value(self, assign_value: Partition | None) -> None:
        with pytest.raises(ValidationError, match="needs assign_value"):
            _rule(
                action=Action.PARTITION, category=Category.PARTITION, assign_value=assign_value
            )

    @pytest.mark.parametrize("action", [Action.EXCLUDE, Action.FLAG])
    def test_filter_rule_rejects_assign_value(self, action: Action) -> None:
        with pytest.raises(ValidationError, match="cannot set assign_value"):
            _rule(action=action, assign_value=Partition.PILOT)


class TestPartitionBlock:
    def test_yaml_dates_become_literals(self) -> None:
        block = PartitionBlock(
            by="date_range",
            date_var="t",
            start=date(2024, 1, 1),
            end=datetime(2024, 1, 15, 18, 30, 0),
        )
        assert block.start == "2024-01-01"
        assert block.end == "2024-01-15 18:30:00"

    def test_scalar_id_becomes_list(self) -> None:
        assert PartitionBlock(by="ids", ids=4).ids == [4]


def test_quality_flags_accept_null_checks() -> None:
    assert QualityFlags(attention_checks=None).attention_checks == []


def test_simple_config_is_empty() -> None:
    assert SimpleModeConfig().is_empty()
    assert not SimpleModeConfig(eligibility={"required_nonmissing": ["a"]}).is_empty()


class TestExpertModeConfig:
    def test_columns_from_rows(self) -> None:
        config = ExpertModeConfig(screening_rules=[
            {"rule_id": "a", "predicate": "x > 1"},
            {"rule_id": "b", "action": "flag"},
        ])
        assert config.columns == ["rule_id", "predicate", "action"]

    def test_from_dataframe(self) -> None:
        frame = pd.DataFrame({
            "rule_id": ["a"],
            "category": ["quality"],
            "description": ["d"],
            "predicate": ["x > 1"],
            "action": ["flag"],
            "order": [float("nan")],
        })
        config = ExpertModeConfig(screening_rules=frame)
        assert config.columns == list(frame.columns)
        assert config.screening_rules[0]["order"] is None

    def test_empty_dataframe_keeps_columns(self) -> None:
        frame = pd.DataFrame(columns=["rule_id", "action"])
        config = ExpertModeConfig(screening_rules=frame)
        assert config.screening_rules == []
        assert config.columns == ["rule_id", "action"]


def test_dataset_labels_stringify_codes() -> None:
    labels = DatasetLabels(value_labels={"attn": {1: "Disagree", 3.0: "Agree"}})
    assert labels.value_labels == {"attn": {"1": "Disagree", "3": "Agree"}}
