"""String rules: regular expressions and string length."""

from __future__ import annotations

import re
from re import Pattern as RegexPattern
from typing import TYPE_CHECKING, Any, Mapping

from ..enums import ConditionCategory, ConditionEvaluateResult
from ..types import TokenLabelAndValue
from .base import StringCondition, ValueHostResolver, config_fault

if TYPE_CHECKING:
    from ..validation_services import ValidationServices
    from ..value_hosts.base import ValueHost


class RegExpCondition(StringCondition):
    """Tests the string against a regular expression.

    Config keys:
        expression: A compiled pattern. Takes precedence when both are given.
        expression_as_string: Pattern source, combined with the flags below
        ignore_case: Case insensitive matching
        multiline: ``^`` and ``$`` match at line breaks

    The pattern is searched anywhere in the text; anchor it to match the
    whole string. A missing or malformed pattern is a configuration fault
    raised at construction.
    """

    default_condition_type = "RegExp"
    default_category = ConditionCategory.DATA_TYPE_CHECK

    def __init__(self, config: Mapping[str, Any] | None = None):
        super().__init__(config)
        self.pattern = self._compile()

    def _compile(self) -> RegexPattern:
        expression = self.config.get("expression")
        if isinstance(expression, RegexPattern):
            return expression
        source = self.config.get("expression_as_string")
        if isinstance(expression, str) and not source:
            source = expression
        if not source:
            raise config_fault(
                "RegExp condition requires expression or expression_as_string",
                self.condition_type,
                property_name="expression_as_string",
            )
        flags = 0
        if self.config.get("ignore_case"):
            flags |= re.IGNORECASE
        if self.config.get("multiline"):
            flags |= re.MULTILINE
        try:
            return re.compile(source, flags)
        except re.error as e:
            raise config_fault(
                f"Invalid regular expression {source!r}: {e}",
                self.condition_type,
                property_name="expression_as_string",
            ) from e

    def evaluate_string(
        self, text: str, value_host: ValueHost, services: ValidationServices
    ) -> ConditionEvaluateResult:
        if self.pattern.search(text):
            return ConditionEvaluateResult.MATCH
        return ConditionEvaluateResult.NO_MATCH


class StringLengthCondition(StringCondition):
    """Length of the string must be within ``minimum``..``maximum`` (inclusive).

    Either bound may be None for an open range. The measured length is kept
    in the host's items as ``Len`` for the ``{Length}`` token.

    Tokens: ``{Length}``, ``{Minimum}``, ``{Maximum}``
    """

    default_condition_type = "StringLength"
    default_category = ConditionCategory.COMPARISON

    def __init__(self, config: Mapping[str, Any] | None = None):
        super().__init__(config)
        self.minimum: int | None = self.config.get("minimum")
        self.maximum: int | None = self.config.get("maximum")

    def evaluate_string(
        self, text: str, value_host: ValueHost, services: ValidationServices
    ) -> ConditionEvaluateResult:
        length = len(text)
        value_host.save_into_items("Len", length)
        if self.minimum is not None and length < self.minimum:
            return ConditionEvaluateResult.NO_MATCH
        if self.maximum is not None and length > self.maximum:
            return ConditionEvaluateResult.NO_MATCH
        return ConditionEvaluateResult.MATCH

    def get_values_for_tokens(
        self, value_host: ValueHost, resolver: ValueHostResolver
    ) -> list[TokenLabelAndValue]:
        return [
            TokenLabelAndValue("Length", value_host.get_from_items("Len") or 0, "parameter"),
            TokenLabelAndValue("Minimum", self.minimum, "parameter"),
            TokenLabelAndValue("Maximum", self.maximum, "parameter"),
        ]
