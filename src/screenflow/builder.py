"""Fluent builder for declarative screening configuration.

Example::

    config = (
        ScreeningSpecBuilder()
        .pretest_dates("start_time", "2024-01-01", "2024-01-15")
        .require_nonmissing(["age", "consent"])
        .attention_check("attn_1", [3], "Attention check 1 answered 'agree'")
        .build()
    )
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from screenflow.core.enums import Action, Partition
from screenflow.core.models import (
    AttentionCheck,
    Eligibility,
    PartitionBlock,
    Partitioning,
    QualityFlags,
    SimpleModeConfig,
)

logger = structlog.get_logger(__name__)


class ScreeningSpecBuilder:
    """Accumulates simple-mode sections and emits a typed configuration.

    Values are recorded as given; validation against a dataset happens
    when the configuration is compiled.
    """

    def __init__(self) -> None:
        self._partitions: dict[Partition, PartitionBlock] = {}
        self._eligibility: Eligibility | None = None
        self._checks: list[AttentionCheck] = []
        self._default_action: str | None = None

    def pretest_dates(self, date_var: str, start: str, end: str) -> ScreeningSpecBuilder:
        return self._dates(Partition.PRETEST, date_var, start, end)

    def pilot_dates(self, date_var: str, start: str, end: str) -> ScreeningSpecBuilder:
        return self._dates(Partition.PILOT, date_var, start, end)

    def pretest_ids(self, ids: list[int]) -> ScreeningSpecBuilder:
        self._partitions[Partition.PRETEST] = PartitionBlock(by="ids", ids=list(ids))
        return self

    def pilot_ids(self, ids: list[int]) -> ScreeningSpecBuilder:
        self._partitions[Partition.PILOT] = PartitionBlock(by="ids", ids=list(ids))
        return self

    def _dates(
        self, name: Partition, date_var: str, start: str, end: str
    ) -> ScreeningSpecBuilder:
        self._partitions[name] = PartitionBlock(
            by="date_range", date_var=date_var, start=start, end=end
        )
        return self

    def require_nonmissing(
        self, variables: list[str], action: Action | str = Action.EXCLUDE
    ) -> ScreeningSpecBuilder:
        """Declare variables that must be present."""
        self._eligibility = Eligibility(
            required_nonmissing=list(variables), action=str(action)
        )
        return self

    def attention_check(
        self,
        var: str,
        pass_values: list[int | float | str],
        description: str,
        action: Action | str | None = None,
    ) -> ScreeningSpecBuilder:
        """Add one attention check; responses outside ``pass_values`` fail it."""
        self._checks.append(AttentionCheck(
            var=var,
            pass_values=list(pass_values),
            description=description,
            action=str(action) if action is not None else None,
        ))
        return self

    def quality_default_action(self, action: Action | str) -> ScreeningSpecBuilder:
        self._default_action = str(action)
        return self

    def build(self) -> SimpleModeConfig:
        partitioning = None
        if self._partitions:
            partitioning = Partitioning(
                pretest=self._partitions.get(Partition.PRETEST),
                pilot=self._partitions.get(Partition.PILOT),
            )
        quality = None
        if self._checks or self._default_action is not None:
            quality = QualityFlags(
                attention_checks=list(self._checks), default_action=self._default_action
            )
        return SimpleModeConfig(
            partitioning=partitioning, eligibility=self._eligibility, quality_flags=quality
        )

    def to_dict(self) -> dict[str, Any]:
        """Configuration as a plain mapping under a ``screening`` key."""
        data = self.build().model_dump(mode="json", exclude_none=True, exclude={"mode"})
        return {"screening": data}

    def save(self, path: Path, overwrite: bool = False) -> Path:
        """Write the configuration as YAML, readable by ``load_screening_config``.

        Args:
            path: Target file path.
            overwrite: Replace an existing file instead of raising.

        Returns:
            The written path.

        Raises:
            FileExistsError: If ``path`` exists and ``overwrite`` is False.
        """
        path = Path(path)
        if path.exists() and not overwrite:
            raise FileExistsError(f"{path} already exists; pass overwrite=True to replace it")
        path.write_text(
            yaml.dump(self.to_dict(), allow_unicode=True, sort_keys=False), encoding="utf-8"
        )
        logger.info("screening_spec_saved", path=str(path))
        return path
