"""Validation rules and the factory that builds them from config."""

from .base import (
    Condition,
    EvaluateResult,
    StringCondition,
    ValueHostResolver,
    coerce_evaluate_result,
    config_fault,
    ensure_primary_value_host,
    log_type_mismatch,
)
from .comparison import (
    CompareCondition,
    EqualToCondition,
    GreaterThanCondition,
    GreaterThanOrEqualCondition,
    LessThanCondition,
    LessThanOrEqualCondition,
    NotEqualToCondition,
    RangeCondition,
)
from .compound import (
    AllMatchCondition,
    AnyMatchCondition,
    ChildResultsCondition,
    CountMatchesCondition,
    NotCondition,
    WhenCondition,
)
from .factory import ConditionFactory, ConditionType
from .numeric import IntegerCondition, MaxDecimalsCondition, NumberCondition, PositiveCondition
from .required import DataTypeCheckCondition, NotNullCondition, RequireTextCondition
from .text import RegExpCondition, StringLengthCondition

__all__ = [
    "Condition",
    "EvaluateResult",
    "StringCondition",
    "ValueHostResolver",
    "coerce_evaluate_result",
    "config_fault",
    "ensure_primary_value_host",
    "log_type_mismatch",
    "RequireTextCondition",
    "NotNullCondition",
    "DataTypeCheckCondition",
    "RegExpCondition",
    "StringLengthCondition",
    "RangeCondition",
    "CompareCondition",
    "EqualToCondition",
    "NotEqualToCondition",
    "GreaterThanCondition",
    "GreaterThanOrEqualCondition",
    "LessThanCondition",
    "LessThanOrEqualCondition",
    "NumberCondition",
    "PositiveCondition",
    "IntegerCondition",
    "MaxDecimalsCondition",
    "ChildResultsCondition",
    "AllMatchCondition",
    "AnyMatchCondition",
    "CountMatchesCondition",
    "NotCondition",
    "WhenCondition",
    "ConditionFactory",
    "ConditionType",
]
