"""Conditions that check a value is present or was converted successfully."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

from ..enums import ConditionCategory, ConditionEvaluateResult
from ..types import TokenLabelAndValue
from ..undefined import UNDEFINED
from .base import (
    Condition,
    EvaluateResult,
    StringCondition,
    ValueHostResolver,
    coerce_evaluate_result,
    config_fault,
    ensure_primary_value_host,
)

if TYPE_CHECKING:
    from ..validation_services import ValidationServices
    from ..value_hosts.base import ValueHost


class RequireTextCondition(StringCondition):
    """Requires a non-empty string.

    ``evaluate`` checks the native value: UNDEFINED is Undetermined, None
    gives ``null_value_result`` (NoMatch unless configured), a non-string is
    Undetermined and the empty string is NoMatch.

    ``evaluate_during_edits`` checks the input text. It trims when ``trim``
    is set and treats ``empty_value`` (a placeholder such as "-- select --")
    like the empty string.
    """

    default_condition_type = "RequireText"
    default_category = ConditionCategory.REQUIRED

    def __init__(self, config: Mapping[str, Any] | None = None):
        super().__init__(config)
        self.null_value_result = coerce_evaluate_result(self.config.get("null_value_result"))
        self.empty_value: str | None = self.config.get("empty_value")

    def evaluate(self, value_host: ValueHost | None, resolver: ValueHostResolver) -> EvaluateResult:
        value_host = ensure_primary_value_host(self, value_host, resolver)
        value = value_host.get_value()
        if value is UNDEFINED:
            return ConditionEvaluateResult.UNDETERMINED
        if value is None:
            if self.null_value_result is None:
                return ConditionEvaluateResult.NO_MATCH
            return self.null_value_result
        if not isinstance(value, str):
            return ConditionEvaluateResult.UNDETERMINED
        return self.evaluate_string(value, value_host, resolver.services)

    def evaluate_string(
        self, text: str, value_host: ValueHost, services: ValidationServices
    ) -> ConditionEvaluateResult:
        if text == "":
            return ConditionEvaluateResult.NO_MATCH
        return ConditionEvaluateResult.MATCH

    def evaluate_during_edits(
        self, text: str, value_host: ValueHost, services: ValidationServices
    ) -> ConditionEvaluateResult:
        if not self.supports_during_edit:
            return ConditionEvaluateResult.UNDETERMINED
        empty_value = self.empty_value
        if self.trim:
            text = text.strip()
            if empty_value is not None:
                empty_value = empty_value.strip()
        if text == "" or (empty_value is not None and text == empty_value):
            return ConditionEvaluateResult.NO_MATCH
        return ConditionEvaluateResult.MATCH


class NotNullCondition(Condition):
    """NoMatch when the native value is None.

    See RequireTextCondition to also reject empty strings.
    """

    default_condition_type = "NotNull"
    default_category = ConditionCategory.REQUIRED

    def evaluate(self, value_host: ValueHost | None, resolver: ValueHostResolver) -> EvaluateResult:
        value_host = ensure_primary_value_host(self, value_host, resolver)
        value = value_host.get_value()
        if value is UNDEFINED:
            return ConditionEvaluateResult.UNDETERMINED
        if value is None:
            return ConditionEvaluateResult.NO_MATCH
        return ConditionEvaluateResult.MATCH


class DataTypeCheckCondition(Condition):
    """Reports whether the input value could be converted to the native value.

    The conversion itself happens outside of the engine. When there is an
    input value but the native value is UNDEFINED, the converter failed.
    Only meaningful on input value hosts.

    Tokens: ``{ConversionError}``
    """

    default_condition_type = "DataTypeCheck"
    default_category = ConditionCategory.DATA_TYPE_CHECK

    def evaluate(self, value_host: ValueHost | None, resolver: ValueHostResolver) -> EvaluateResult:
        value_host = ensure_primary_value_host(self, value_host, resolver)
        if not value_host.is_input_value_host:
            raise config_fault(
                "Invalid ValueHost used. Must be an InputValueHost",
                self.condition_type,
                value_host_name=value_host.name,
            )
        if value_host.get_input_value() is UNDEFINED:
            return ConditionEvaluateResult.UNDETERMINED
        if value_host.get_value() is UNDEFINED:
            return ConditionEvaluateResult.NO_MATCH
        return ConditionEvaluateResult.MATCH

    def get_values_for_tokens(
        self, value_host: ValueHost, resolver: ValueHostResolver
    ) -> list[TokenLabelAndValue]:
        if not value_host.is_input_value_host:
            return []
        return [
            TokenLabelAndValue(
                "ConversionError", value_host.get_conversion_error_message(), "message"
            )
        ]
