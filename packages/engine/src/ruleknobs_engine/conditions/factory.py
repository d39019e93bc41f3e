"""Builds conditions from configuration."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ruleknobs_common import Registry
from ruleknobs_config import FactoryBase

from ..exceptions import UnknownConditionTypeError
from .base import Condition, config_fault
from .comparison import (
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
    CountMatchesCondition,
    NotCondition,
    WhenCondition,
)
from .numeric import IntegerCondition, MaxDecimalsCondition, PositiveCondition
from .required import DataTypeCheckCondition, NotNullCondition, RequireTextCondition
from .text import RegExpCondition, StringLengthCondition

logger = logging.getLogger(__name__)


class ConditionType:
    """Names of the built-in condition types."""

    REQUIRE_TEXT = "RequireText"
    NOT_NULL = "NotNull"
    DATA_TYPE_CHECK = "DataTypeCheck"
    REG_EXP = "RegExp"
    STRING_LENGTH = "StringLength"
    RANGE = "Range"
    EQUAL_TO = "EqualTo"
    NOT_EQUAL_TO = "NotEqualTo"
    GREATER_THAN = "GreaterThan"
    GREATER_THAN_OR_EQUAL = "GreaterThanOrEqual"
    LESS_THAN = "LessThan"
    LESS_THAN_OR_EQUAL = "LessThanOrEqual"
    POSITIVE = "Positive"
    INTEGER = "Integer"
    MAX_DECIMALS = "MaxDecimals"
    ALL_MATCH = "AllMatch"
    ANY_MATCH = "AnyMatch"
    COUNT_MATCHES = "CountMatches"
    NOT = "Not"
    WHEN = "When"


_DEFAULT_CONDITIONS: dict[str, type[Condition]] = {
    ConditionType.REQUIRE_TEXT: RequireTextCondition,
    ConditionType.NOT_NULL: NotNullCondition,
    ConditionType.DATA_TYPE_CHECK: DataTypeCheckCondition,
    ConditionType.REG_EXP: RegExpCondition,
    ConditionType.STRING_LENGTH: StringLengthCondition,
    ConditionType.RANGE: RangeCondition,
    ConditionType.EQUAL_TO: EqualToCondition,
    ConditionType.NOT_EQUAL_TO: NotEqualToCondition,
    ConditionType.GREATER_THAN: GreaterThanCondition,
    ConditionType.GREATER_THAN_OR_EQUAL: GreaterThanOrEqualCondition,
    ConditionType.LESS_THAN: LessThanCondition,
    ConditionType.LESS_THAN_OR_EQUAL: LessThanOrEqualCondition,
    ConditionType.POSITIVE: PositiveCondition,
    ConditionType.INTEGER: IntegerCondition,
    ConditionType.MAX_DECIMALS: MaxDecimalsCondition,
    ConditionType.ALL_MATCH: AllMatchCondition,
    ConditionType.ANY_MATCH: AnyMatchCondition,
    ConditionType.COUNT_MATCHES: CountMatchesCondition,
    ConditionType.NOT: NotCondition,
    ConditionType.WHEN: WhenCondition,
    # aliases
    "All": AllMatchCondition,
    "And": AllMatchCondition,
    "Any": AnyMatchCondition,
    "Or": AnyMatchCondition,
    "EqualToValue": EqualToCondition,
    "NotEqualToValue": NotEqualToCondition,
    "GreaterThanValue": GreaterThanCondition,
    "GreaterThanOrEqualValue": GreaterThanOrEqualCondition,
    "LessThanValue": LessThanCondition,
    "LessThanOrEqualValue": LessThanOrEqualCondition,
}


class ConditionFactory(FactoryBase):
    """Creates conditions by ``condition_type``.

    Custom rules are added with ``register``:

        ```python
        factory = ConditionFactory()
        factory.register("Even", EvenCondition)
        condition = factory.create(condition_type="Even", value_host_name="count")
        ```

    Compound conditions build their children through the same factory, so
    registered types can be nested anywhere in a tree.
    """

    def __init__(self, register_defaults: bool = True):
        self._registry: Registry[type[Condition]] = Registry("conditions")
        if register_defaults:
            for condition_type, condition_class in _DEFAULT_CONDITIONS.items():
                self._registry.register(condition_type, condition_class)
        logger.info(f"ConditionFactory created with {self._registry.count()} condition types")

    def create(self, **config: Any) -> Condition:
        """Create a condition from keyword configuration."""
        return self.create_condition(config)

    def create_condition(self, config: Mapping[str, Any]) -> Condition:
        """Create a condition from a config mapping.

        Raises:
            ConditionConfigError: If ``condition_type`` is missing
            UnknownConditionTypeError: If ``condition_type`` is not registered
        """
        condition_type = config.get("condition_type")
        if not condition_type:
            raise config_fault(
                "condition_type is required",
                None,
                value_host_name=config.get("value_host_name"),
                property_name="condition_type",
            )
        condition_class = self._registry.get_optional(condition_type)
        if condition_class is None:
            available = self._registry.list_keys()
            logger.error(f"Unknown condition type {condition_type}. Available: {available}")
            raise UnknownConditionTypeError(condition_type, available)
        return condition_class.from_config(config, self)

    def register(
        self, condition_type: str, condition_class: type[Condition], allow_overwrite: bool = False
    ) -> None:
        self._registry.register(condition_type, condition_class, allow_overwrite=allow_overwrite)

    def is_registered(self, condition_type: str) -> bool:
        return self._registry.has(condition_type)

    def condition_types(self) -> list[str]:
        return self._registry.list_keys()
