"""Numeric rules."""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Mapping

from ..enums import ConditionCategory, ConditionEvaluateResult
from ..services import LookupKey
from ..types import TokenLabelAndValue
from ..undefined import is_missing
from .base import Condition, EvaluateResult, ValueHostResolver, config_fault, ensure_primary_value_host

if TYPE_CHECKING:
    from ..value_hosts.base import ValueHost

Number = int | float | Decimal


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


class NumberCondition(Condition):
    """Base for rules over numbers.

    A value that is not already a number is converted with the ``Number``
    lookup key. When that fails the result is Undetermined.
    """

    default_category = ConditionCategory.DATA_TYPE_CHECK

    def evaluate(self, value_host: ValueHost | None, resolver: ValueHostResolver) -> EvaluateResult:
        value_host = ensure_primary_value_host(self, value_host, resolver)
        value = value_host.get_value()
        if is_missing(value):
            return ConditionEvaluateResult.UNDETERMINED
        if not _is_number(value):
            value = resolver.services.converter_service.convert_to_primitive(value, LookupKey.NUMBER)
            if not _is_number(value):
                return ConditionEvaluateResult.UNDETERMINED
        if value != value:  # NaN
            return ConditionEvaluateResult.UNDETERMINED
        return ConditionEvaluateResult.MATCH if self.evaluate_number(value) else ConditionEvaluateResult.NO_MATCH

    @abstractmethod
    def evaluate_number(self, value: Number) -> bool:
        """True when the number passes the rule."""


class PositiveCondition(NumberCondition):
    """Zero or greater."""

    default_condition_type = "Positive"

    def evaluate_number(self, value: Number) -> bool:
        return value >= 0


class IntegerCondition(NumberCondition):
    """No fractional part. ``3.0`` passes."""

    default_condition_type = "Integer"

    def evaluate_number(self, value: Number) -> bool:
        try:
            return value == int(value)
        except (OverflowError, ValueError):
            return False


class MaxDecimalsCondition(NumberCondition):
    """At most ``max_decimals`` digits after the decimal point.

    Tokens: ``{MaxDecimals}``
    """

    default_condition_type = "MaxDecimals"

    def __init__(self, config: Mapping[str, Any] | None = None):
        super().__init__(config)
        max_decimals = self.config.get("max_decimals")
        if not isinstance(max_decimals, int) or isinstance(max_decimals, bool) or max_decimals < 1:
            raise config_fault(
                "max_decimals must be an integer of 1 or more",
                self.condition_type,
                value_host_name=self.value_host_name,
                property_name="max_decimals",
            )
        self.max_decimals: int = max_decimals

    def evaluate_number(self, value: Number) -> bool:
        try:
            exponent = Decimal(str(value)).normalize().as_tuple().exponent
        except InvalidOperation:
            return False
        if not isinstance(exponent, int):  # infinity
            return False
        return exponent >= -self.max_decimals

    def get_values_for_tokens(
        self, value_host: ValueHost, resolver: ValueHostResolver
    ) -> list[TokenLabelAndValue]:
        return [TokenLabelAndValue("MaxDecimals", self.max_decimals, "parameter")]
