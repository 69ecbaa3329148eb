"""Custom exception hierarchy for ScreenFlow.

Never use bare except clauses. Always catch specific exceptions.
"""
from __future__ import annotations

from typing import Any


class ScreenFlowError(Exception):
    """Base exception for all ScreenFlow errors."""


# Configuration exceptions
class ConfigValidationError(ScreenFlowError):
    """Screening configuration is invalid.

    Always carries the offending field path and value.
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class MissingFieldError(ConfigValidationError):
    """A required configuration field is absent or null."""


class InvalidOptionError(ConfigValidationError):
    """A configuration field holds a value outside its allowed set."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        allowed: list[str] | None = None,
    ) -> None:
        super().__init__(message, field=field, value=value)
        self.allowed = allowed or []


class InvalidDateFormatError(ConfigValidationError):
    """A date literal is not ``YYYY-MM-DD`` or ``YYYY-MM-DD HH:MM:SS``."""


class UnknownColumnError(ConfigValidationError):
    """Configuration references columns that are not in the dataset."""

    def __init__(self, message: str, columns: list[str], field: str | None = None) -> None:
        super().__init__(message, field=field, value=columns)
        self.columns = columns


class EmptyFieldError(ConfigValidationError):
    """An expert-mode rule row has an empty required text field."""


class MissingColumnsError(ConfigValidationError):
    """An expert-mode rule table lacks required schema columns."""

    def __init__(self, columns: list[str]) -> None:
        super().__init__(
            f"screening_rules missing required columns: {', '.join(columns)}",
            field="screening_rules",
            value=columns,
        )
        self.columns = columns


class DuplicateRuleIdError(ConfigValidationError):
    """Two rules in one table share a ``rule_id``."""


# Predicate exceptions
class PredicateError(ScreenFlowError):
    """Base for predicate validation and evaluation failures."""

    def __init__(self, message: str, predicate: str) -> None:
        super().__init__(message)
        self.predicate = predicate


class InvalidPredicateError(PredicateError):
    """Predicate contains a disallowed pattern."""

    def __init__(self, pattern: str, predicate: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Predicate contains disallowed pattern '{pattern}': {predicate}",
            predicate,
        )
        self.pattern = pattern


class PredicateSyntaxError(InvalidPredicateError):
    """Predicate text falls outside the screening grammar."""

    def __init__(self, message: str, predicate: str, position: int) -> None:
        super().__init__(
            pattern=predicate[position:position + 1],
            predicate=predicate,
            message=f"{message} at position {position}: {predicate}",
        )
        self.position = position


class PredicateEvaluationError(PredicateError):
    """In-grammar predicate failed against the data (unknown column, type mismatch)."""


# Engine exceptions
class EmptyDatasetError(ScreenFlowError):
    """Screening was requested on a dataset with zero rows."""


class UnknownActionError(ScreenFlowError):
    """A rule with an unsupported action reached the screening engine."""

    def __init__(self, action: str, rule_id: str) -> None:
        super().__init__(f"Unknown action '{action}' for rule {rule_id}")
        self.action = action
        self.rule_id = rule_id


class AnnotationMissingError(ScreenFlowError):
    """Audit input lacks the annotation columns produced by screening."""

    def __init__(self, columns: list[str]) -> None:
        super().__init__(
            "Dataset is missing screening annotations: " + ", ".join(columns)
        )
        self.columns = columns


# I/O exceptions
class IOError(ScreenFlowError):  # noqa: A001
    """Base for file I/O failures."""


class UnsupportedFormatError(IOError):
    """Unsupported file format."""

    def __init__(self, format: str, supported: list[str] | None = None) -> None:  # noqa: A002
        supported_str = ", ".join(supported) if supported else "unknown"
        super().__init__(f"Unsupported format '{format}'. Supported: {supported_str}")
        self.format = format
        self.supported = supported or []
