"""Enumerations shared by conditions, validators and value hosts."""

from enum import Enum, IntEnum


class ConditionEvaluateResult(IntEnum):
    """Tri-state outcome of evaluating a condition.

    ``UNDETERMINED`` means the condition could not be evaluated (missing
    value, type mismatch, failed conversion). It is never turned into
    ``MATCH`` or ``NO_MATCH`` except through an explicit
    ``treat_undetermined_as`` override.
    """

    NO_MATCH = 0
    MATCH = 1
    UNDETERMINED = 2


class ConditionCategory(str, Enum):
    """Broad purpose of a condition, used for defaults and option filtering."""

    UNDETERMINED = "undetermined"
    REQUIRED = "required"
    COMPARISON = "comparison"
    DATA_TYPE_CHECK = "data_type_check"
    CONTENTS = "contents"
    CHILDREN = "children"


class ValidationResult(IntEnum):
    """Validation status of an input value host."""

    NOT_ATTEMPTED = 0
    VALUE_CHANGED_BUT_UNVALIDATED = 1
    UNDETERMINED = 2
    VALID = 3
    INVALID = 4
    ASYNC_PROCESSING = 5


class ValidationSeverity(IntEnum):
    """Severity of an issue. Ordered so that ``severity > WARNING`` works."""

    WARNING = 0
    ERROR = 1
    SEVERE = 2


class ComparersResult(IntEnum):
    """Outcome of comparing two values through the comparer service."""

    EQUALS = 0
    LESS_THAN = 1
    GREATER_THAN = 2
    NOT_EQUALS = 3
    UNDETERMINED = 4
