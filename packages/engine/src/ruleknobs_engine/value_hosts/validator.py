"""Runs one validation rule for an input value host and builds its issue."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any, Callable, Mapping

from ..conditions.base import Condition, config_fault
from ..descriptors import InputValidatorDescriptor
from ..enums import ConditionCategory, ConditionEvaluateResult, ValidationSeverity
from ..types import InputValidateResult, IssueFound, TokenLabelAndValue, ValidateOptions

if TYPE_CHECKING:
    from .input import InputValueHost

logger = logging.getLogger(__name__)

_SEVERE_CATEGORIES = (ConditionCategory.REQUIRED, ConditionCategory.DATA_TYPE_CHECK)

_SKIPPED = InputValidateResult(ConditionEvaluateResult.UNDETERMINED, skipped=True)


def default_severity(category: ConditionCategory) -> ValidationSeverity:
    """Required and data type rules are severe: later rules make no sense when they fail."""
    if category in _SEVERE_CATEGORIES:
        return ValidationSeverity.SEVERE
    return ValidationSeverity.ERROR


class InputValidator:
    """One rule of an input value host.

    The condition and the optional enabler are built on first use, from a
    config through the condition factory or from a creator function.
    """

    def __init__(self, value_host: InputValueHost, descriptor: InputValidatorDescriptor):
        self._value_host = value_host
        self._descriptor = descriptor
        self._condition: Condition | None = None
        self._enabler: Condition | None = None
        self._enabler_built = False

    @property
    def descriptor(self) -> InputValidatorDescriptor:
        return self._descriptor

    @property
    def value_host(self) -> InputValueHost:
        return self._value_host

    @property
    def condition(self) -> Condition:
        if self._condition is None:
            self._condition = self._build(
                self._descriptor.condition_config, self._descriptor.condition_creator, "condition"
            )
            if self._condition is None:
                raise config_fault(
                    "condition_config or condition_creator is required",
                    None,
                    value_host_name=self._value_host.name,
                    property_name="condition_config",
                )
        return self._condition

    @property
    def enabler(self) -> Condition | None:
        if not self._enabler_built:
            self._enabler = self._build(
                self._descriptor.enabler_config, self._descriptor.enabler_creator, "enabler"
            )
            self._enabler_built = True
        return self._enabler

    def _build(
        self,
        config: Mapping[str, Any] | None,
        creator: Callable[[InputValidatorDescriptor], Condition] | None,
        role: str,
    ) -> Condition | None:
        if config is not None and creator is not None:
            raise config_fault(
                f"Supply {role}_config or {role}_creator, not both",
                config.get("condition_type"),
                value_host_name=self._value_host.name,
                property_name=f"{role}_creator",
            )
        if creator is not None:
            return creator(self._descriptor)
        if config is not None:
            return self._value_host.services.condition_factory.create_condition(config)
        return None

    @property
    def condition_type(self) -> str:
        return self.condition.condition_type

    @property
    def category(self) -> ConditionCategory:
        return self.condition.category

    @property
    def enabled(self) -> bool:
        enabled = self._descriptor.enabled
        if callable(enabled):
            return bool(enabled(self))
        return enabled is not False

    @property
    def severity(self) -> ValidationSeverity:
        severity = self._descriptor.severity
        if callable(severity):
            severity = severity(self)
        if severity is None:
            return default_severity(self.category)
        return ValidationSeverity(severity)

    def gather_value_host_names(self, names: set[str]) -> None:
        self.condition.gather_value_host_names(names)
        if self.enabler is not None:
            self.enabler.gather_value_host_names(names)

    def validate(self, options: ValidateOptions) -> InputValidateResult | Future:
        """Evaluate the rule.

        Returns:
            The result, or a Future of one when the condition is async
        """
        try:
            return self._validate(options)
        except Exception:
            logger.exception(f"Validator {self._describe()} failed")
            raise

    def _validate(self, options: ValidateOptions) -> InputValidateResult | Future:
        host = self._value_host
        condition = self.condition
        if options.preliminary and condition.category == ConditionCategory.REQUIRED:
            return self._skip("preliminary validation skips required rules")
        if options.during_edit and not condition.supports_during_edit:
            return self._skip("rule does not support during edit")
        if not self.enabled:
            return self._skip("disabled")
        enabler = self.enabler
        if enabler is not None:
            enabled = enabler.evaluate(host, host.manager)
            if enabled != ConditionEvaluateResult.MATCH:
                return self._skip("enabler did not match")

        if options.during_edit:
            text = host.get_input_value()
            if not isinstance(text, str):
                return self._skip("input value is not a string")
            result = condition.evaluate_during_edits(text, host, host.services)
        else:
            result = condition.evaluate(host, host.manager)

        if isinstance(result, Future):
            return self._chain(result)
        return self._result(ConditionEvaluateResult(result))

    def _skip(self, reason: str) -> InputValidateResult:
        logger.debug(f"Validator {self._describe()} skipped: {reason}")
        return _SKIPPED

    def _chain(self, pending: Future) -> Future:
        chained: Future = Future()
        chained.set_running_or_notify_cancel()

        def done(completed: Future) -> None:
            try:
                chained.set_result(self._result(ConditionEvaluateResult(completed.result())))
            except Exception as e:
                chained.set_exception(e)

        pending.add_done_callback(done)
        return chained

    def _result(self, result: ConditionEvaluateResult) -> InputValidateResult:
        if result != ConditionEvaluateResult.NO_MATCH:
            return InputValidateResult(result)
        return InputValidateResult(result, issue_found=self.create_issue_found())

    def create_issue_found(self) -> IssueFound:
        error_message = self.get_error_message()
        summary_message = self.get_summary_message()
        return IssueFound(
            value_host_name=self._value_host.name,
            condition_type=self.condition_type,
            severity=self.severity,
            error_message=error_message,
            summary_message=summary_message,
        )

    def get_values_for_tokens(self) -> list[TokenLabelAndValue]:
        host = self._value_host
        tokens = [
            TokenLabelAndValue("Label", host.label, "label"),
            TokenLabelAndValue("Value", host.get_value(), "value"),
        ]
        tokens.extend(self.condition.get_values_for_tokens(host, host.manager))
        return tokens

    def get_error_message(self) -> str:
        template = self._template(self._descriptor.error_message, self._descriptor.error_message_l10n)
        if not template:
            logger.warning(f"Validator {self._describe()} has no error message")
            template = f"{self.condition_type} failed"
        return self._resolve(template)

    def get_summary_message(self) -> str | None:
        template = self._template(self._descriptor.summary_message, self._descriptor.summary_message_l10n)
        if not template:
            return None
        return self._resolve(template)

    def _template(self, message: Any, l10n_key: str | None) -> str | None:
        if callable(message):
            message = message(self)
        return self._value_host.services.localization.localize(l10n_key, message)

    def _resolve(self, template: str) -> str:
        resolver = self._value_host.services.message_token_resolver
        return resolver.resolve_tokens(template, self.get_values_for_tokens())

    def _describe(self) -> str:
        condition_type = self._condition.condition_type if self._condition else "?"
        return f"{condition_type} on {self._value_host.name}"
