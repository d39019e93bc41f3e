"""Rules that compare the value against bounds or a second operand.

All comparisons go through the comparer service so that data types with
custom ordering (case-insensitive text, dates held as strings, money) work
the same way as plain numbers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar, Mapping

from ..enums import ComparersResult, ConditionCategory, ConditionEvaluateResult
from ..types import TokenLabelAndValue
from ..undefined import is_missing
from .base import (
    Condition,
    EvaluateResult,
    ValueHostResolver,
    config_fault,
    ensure_primary_value_host,
    log_type_mismatch,
)

if TYPE_CHECKING:
    from ..value_hosts.base import ValueHost

logger = logging.getLogger(__name__)


class RangeCondition(Condition):
    """The value must lie within ``minimum``..``maximum``, both inclusive.

    A bound that is None leaves that side open. ``conversion_lookup_key``
    (or the host's data type) is applied to the value only, not the bounds.
    When a bound cannot be compared with the value the result is
    Undetermined and a warning is logged.

    Tokens: ``{Minimum}``, ``{Maximum}``
    """

    default_condition_type = "Range"
    default_category = ConditionCategory.COMPARISON

    def __init__(self, config: Mapping[str, Any] | None = None):
        super().__init__(config)
        self.minimum = self.config.get("minimum")
        self.maximum = self.config.get("maximum")

    def evaluate(self, value_host: ValueHost | None, resolver: ValueHostResolver) -> EvaluateResult:
        value_host = ensure_primary_value_host(self, value_host, resolver)
        value = value_host.get_value()
        if is_missing(value):
            return ConditionEvaluateResult.UNDETERMINED
        comparer = resolver.services.comparer_service
        lookup_key = self.config.get("conversion_lookup_key") or value_host.data_type

        lower = ComparersResult.EQUALS
        if self.minimum is not None:
            lower = comparer.compare(self.minimum, value, None, lookup_key)
            if lower == ComparersResult.UNDETERMINED:
                log_type_mismatch(self, value_host, "Value", "Minimum", value, self.minimum)
                return ConditionEvaluateResult.UNDETERMINED

        upper = ComparersResult.EQUALS
        if self.maximum is not None:
            upper = comparer.compare(self.maximum, value, None, lookup_key)
            if upper == ComparersResult.UNDETERMINED:
                log_type_mismatch(self, value_host, "Value", "Maximum", value, self.maximum)
                return ConditionEvaluateResult.UNDETERMINED

        if lower in (ComparersResult.EQUALS, ComparersResult.LESS_THAN) and upper in (
            ComparersResult.EQUALS,
            ComparersResult.GREATER_THAN,
        ):
            return ConditionEvaluateResult.MATCH
        return ConditionEvaluateResult.NO_MATCH

    def get_values_for_tokens(
        self, value_host: ValueHost, resolver: ValueHostResolver
    ) -> list[TokenLabelAndValue]:
        return [
            TokenLabelAndValue("Minimum", self.minimum, "parameter"),
            TokenLabelAndValue("Maximum", self.maximum, "parameter"),
        ]


class CompareCondition(Condition):
    """Compares the value with a second operand.

    The second operand is the value of ``second_value_host_name`` when that
    host resolves, otherwise the literal ``second_value``. Having neither
    configured is a configuration fault, raised at construction. A second
    host name that does not resolve, with no literal to fall back on, is
    raised at evaluation.

    Each side has its own lookup key: ``conversion_lookup_key`` for the
    value and ``second_conversion_lookup_key`` for the second operand, each
    defaulting to the data type of its host.

    Subclasses only declare which comparer results count as a match.
    Ordered comparisons (less/greater) treat NOT_EQUALS as Undetermined
    because the types could not be ordered.

    Tokens: ``{CompareTo}``
    """

    default_category = ConditionCategory.COMPARISON
    match_on: ClassVar[frozenset[ComparersResult]] = frozenset()
    ordered: ClassVar[bool] = True

    def __init__(self, config: Mapping[str, Any] | None = None):
        super().__init__(config)
        self.second_value_host_name: str | None = self.config.get("second_value_host_name")
        self.second_value = self.config.get("second_value")
        if not self.second_value_host_name and self.second_value is None:
            raise config_fault(
                "Requires second_value_host_name or second_value",
                self.condition_type,
                value_host_name=self.value_host_name,
                property_name="second_value",
            )

    def evaluate(self, value_host: ValueHost | None, resolver: ValueHostResolver) -> EvaluateResult:
        value_host = ensure_primary_value_host(self, value_host, resolver)
        value = value_host.get_value()
        if is_missing(value):
            return ConditionEvaluateResult.UNDETERMINED
        second_value, second_lookup_key = self._second_operand(value_host, resolver)
        if is_missing(second_value):
            return ConditionEvaluateResult.UNDETERMINED

        comparison = resolver.services.comparer_service.compare(
            value,
            second_value,
            self.config.get("conversion_lookup_key") or value_host.data_type,
            second_lookup_key,
        )
        if comparison == ComparersResult.UNDETERMINED:
            log_type_mismatch(self, value_host, "Value", "SecondValue", value, second_value)
            return ConditionEvaluateResult.UNDETERMINED
        return self.compare_two_values(comparison)

    def compare_two_values(self, comparison: ComparersResult) -> ConditionEvaluateResult:
        if comparison in self.match_on:
            return ConditionEvaluateResult.MATCH
        if self.ordered and comparison == ComparersResult.NOT_EQUALS:
            return ConditionEvaluateResult.UNDETERMINED
        return ConditionEvaluateResult.NO_MATCH

    def _second_operand(self, value_host: ValueHost, resolver: ValueHostResolver) -> tuple[Any, str | None]:
        second_key = self.config.get("second_conversion_lookup_key")
        if self.second_value_host_name:
            second_host = resolver.get_value_host(self.second_value_host_name)
            if second_host is not None:
                return second_host.get_value(), second_key or second_host.data_type
            if self.second_value is None:
                raise config_fault(
                    f"second_value_host_name {self.second_value_host_name} is unknown",
                    self.condition_type,
                    value_host_name=value_host.name,
                    property_name="second_value_host_name",
                )
            logger.warning(
                f"{self.condition_type} for {value_host.name}: second_value_host_name "
                f"{self.second_value_host_name} is unknown, using second_value"
            )
        return self.second_value, second_key

    def gather_value_host_names(self, names: set[str]) -> None:
        super().gather_value_host_names(names)
        if self.second_value_host_name:
            names.add(self.second_value_host_name)

    def get_values_for_tokens(
        self, value_host: ValueHost, resolver: ValueHostResolver
    ) -> list[TokenLabelAndValue]:
        second_value = self.second_value
        if self.second_value_host_name:
            second_host = resolver.get_value_host(self.second_value_host_name)
            if second_host is not None:
                second_value = second_host.get_value()
        return [TokenLabelAndValue("CompareTo", second_value, "value")]


class EqualToCondition(CompareCondition):
    default_condition_type = "EqualTo"
    match_on = frozenset({ComparersResult.EQUALS})
    ordered = False


class NotEqualToCondition(CompareCondition):
    default_condition_type = "NotEqualTo"
    match_on = frozenset(
        {ComparersResult.NOT_EQUALS, ComparersResult.LESS_THAN, ComparersResult.GREATER_THAN}
    )
    ordered = False


class GreaterThanCondition(CompareCondition):
    default_condition_type = "GreaterThan"
    match_on = frozenset({ComparersResult.GREATER_THAN})


class GreaterThanOrEqualCondition(CompareCondition):
    default_condition_type = "GreaterThanOrEqual"
    match_on = frozenset({ComparersResult.GREATER_THAN, ComparersResult.EQUALS})


class LessThanCondition(CompareCondition):
    default_condition_type = "LessThan"
    match_on = frozenset({ComparersResult.LESS_THAN})


class LessThanOrEqualCondition(CompareCondition):
    default_condition_type = "LessThanOrEqual"
    match_on = frozenset({ComparersResult.LESS_THAN, ComparersResult.EQUALS})
