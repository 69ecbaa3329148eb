"""Core enumerations for ScreenFlow."""
from enum import IntEnum, StrEnum


class Action(StrEnum):
    """Execution semantics of a screening rule."""

    PARTITION = "partition"
    EXCLUDE = "exclude"
    FLAG = "flag"


class Category(StrEnum):
    """Reporting classification of a screening rule (not used for execution)."""

    PARTITION = "partition"
    ELIGIBILITY = "eligibility"
    QUALITY = "quality"


class Partition(StrEnum):
    """Data-collection phase a row is assigned to."""

    UNASSIGNED = "unassigned"
    PRETEST = "pretest"
    PILOT = "pilot"
    MAIN = "main"


class Phase(IntEnum):
    """Engine execution phase.

    Lower value runs first, regardless of the numeric ``order`` of rules.
    """

    PARTITION = 0  # partition rules claim rows before any filter runs
    FILTER = 1     # exclusion and flag rules


class Severity(StrEnum):
    """Severity of an audit warning."""

    WARN = "WARN"
    INFO = "INFO"


class DecisionSource(StrEnum):
    """Where a decision-registry value comes from."""

    SPEC = "spec"
    NOT_DECLARED = "not_declared"
    OBSERVED = "observed"


class StepType(StrEnum):
    """Kind of step in the CONSORT-style flow table."""

    COUNT = "count"
    EXCLUSION = "exclusion"
    FLAG = "flag"
    NOTE = "note"


class ScaleType(StrEnum):
    """Response-scale classification used by the raw codebook."""

    LABELLED_OPTIONS = "labelled_options"
    FREE_TEXT = "free_text"
    NUMERIC_UNLABELLED = "numeric_unlabelled"
    DATETIME_UNLABELLED = "datetime_unlabelled"
    LOGICAL = "logical"
    UNKNOWN = "unknown"
