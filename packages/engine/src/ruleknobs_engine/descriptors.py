"""Descriptors: the immutable configuration of value hosts and validators.

Descriptors are what an application writes (in code or in a YAML form
definition). The manager creates value hosts from them and never changes
them; replacing a descriptor replaces the value host built from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Mapping, Sequence

from ruleknobs_common import ValidationError

from .enums import ValidationSeverity
from .undefined import UNDEFINED

if TYPE_CHECKING:
    from .conditions.base import Condition
    from .value_hosts.validator import InputValidator


class ValueHostType:
    """Names of the built-in value host types."""

    NON_INPUT = "NonInput"
    INPUT = "Input"
    BUSINESS_LOGIC = "BusinessLogic"


def coerce_severity(value: Any) -> ValidationSeverity | None:
    """Read a severity from config: enum, int or name such as ``"Severe"``."""
    if value is None or isinstance(value, ValidationSeverity):
        return value
    if isinstance(value, str):
        try:
            return ValidationSeverity[value.upper()]
        except KeyError:
            raise ValueError(f"Not a validation severity: {value}") from None
    return ValidationSeverity(value)


@dataclass(frozen=True)
class InputValidatorDescriptor:
    """One validation rule attached to an input value host.

    Supply exactly one of ``condition_config`` and ``condition_creator``.
    The enabler is optional and follows the same rule.

    Attributes:
        condition_config: Condition config handed to the condition factory
        condition_creator: ``(descriptor) -> Condition`` for rules built in code
        enabler_config: Condition that must Match for this rule to run
        enabler_creator: ``(descriptor) -> Condition`` alternative to enabler_config
        enabled: False, or ``(validator) -> bool``, turns the rule off
        severity: Severity, or ``(validator) -> severity``. None uses the
            default for the condition's category.
        error_message: Template shown next to the input. May be
            ``(validator) -> str``.
        error_message_l10n: Localization key for error_message
        summary_message: Template for a form summary. None reuses error_message.
        summary_message_l10n: Localization key for summary_message
    """

    condition_config: Mapping[str, Any] | None = None
    condition_creator: Callable[[InputValidatorDescriptor], Condition] | None = None
    enabler_config: Mapping[str, Any] | None = None
    enabler_creator: Callable[[InputValidatorDescriptor], Condition] | None = None
    enabled: bool | Callable[[InputValidator], bool] = True
    severity: ValidationSeverity | Callable[[InputValidator], ValidationSeverity] | None = None
    error_message: str | Callable[[InputValidator], str] | None = None
    error_message_l10n: str | None = None
    summary_message: str | Callable[[InputValidator], str] | None = None
    summary_message_l10n: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> InputValidatorDescriptor:
        return cls(
            condition_config=data.get("condition_config"),
            enabler_config=data.get("enabler_config"),
            enabled=data.get("enabled", True),
            severity=coerce_severity(data.get("severity")),
            error_message=data.get("error_message"),
            error_message_l10n=data.get("error_message_l10n"),
            summary_message=data.get("summary_message"),
            summary_message_l10n=data.get("summary_message_l10n"),
        )


@dataclass(frozen=True)
class ValueHostDescriptor:
    """A value without validation, such as a value computed by the application.

    Attributes:
        name: Unique name within a validation manager
        label: Display label, used by the ``{Label}`` token
        label_l10n: Localization key for label
        data_type: Lookup key of the value's data type, e.g. ``"Integer"``
        initial_value: Value before anything is assigned
        value_host_type: Type name used by the value host factory
    """

    name: str
    label: str = ""
    label_l10n: str | None = None
    data_type: str | None = None
    initial_value: Any = UNDEFINED
    value_host_type: str = ValueHostType.NON_INPUT

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ValueHostDescriptor:
        return cls(
            name=data["name"],
            label=data.get("label", ""),
            label_l10n=data.get("label_l10n"),
            data_type=data.get("data_type"),
            initial_value=data.get("initial_value", UNDEFINED),
            value_host_type=data.get("value_host_type", ValueHostType.NON_INPUT),
        )


@dataclass(frozen=True)
class InputValueHostDescriptor(ValueHostDescriptor):
    """A value edited by the user, with validation rules.

    Attributes:
        validator_descriptors: Rules, run in this order
        group: Group name or names. Validation and summaries can be
            restricted to a group. None belongs to every group.
    """

    value_host_type: str = ValueHostType.INPUT
    validator_descriptors: Sequence[InputValidatorDescriptor] = field(default_factory=tuple)
    group: str | Sequence[str] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> InputValueHostDescriptor:
        return cls(
            name=data["name"],
            label=data.get("label", ""),
            label_l10n=data.get("label_l10n"),
            data_type=data.get("data_type"),
            initial_value=data.get("initial_value", UNDEFINED),
            value_host_type=data.get("value_host_type", ValueHostType.INPUT),
            validator_descriptors=tuple(
                InputValidatorDescriptor.from_dict(v) for v in data.get("validator_descriptors") or []
            ),
            group=data.get("group"),
        )


def descriptor_from_dict(data: Mapping[str, Any]) -> ValueHostDescriptor:
    """Build the right descriptor class for a value host config.

    Hosts with validators, or with ``value_host_type: Input``, become input
    value hosts.

    Raises:
        ValidationError: If the config has no usable ``name``
    """
    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ValidationError("Value host config requires a name", context={"config": dict(data)})
    value_host_type = data.get("value_host_type")
    if value_host_type is None:
        value_host_type = ValueHostType.INPUT if "validator_descriptors" in data else ValueHostType.NON_INPUT
    if str(value_host_type).lower() == ValueHostType.NON_INPUT.lower():
        return ValueHostDescriptor.from_dict(data)
    return InputValueHostDescriptor.from_dict({**data, "value_host_type": value_host_type})
