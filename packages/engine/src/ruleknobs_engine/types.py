"""Records exchanged between conditions, validators, value hosts and callers.

All records are frozen dataclasses. The ones stored inside value host state
(``IssueFound`` and ``BusinessLogicError``) serialize to plain dicts.
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any

from .enums import ConditionEvaluateResult, ValidationResult, ValidationSeverity


@dataclass(frozen=True)
class IssueFound:
    """A failed validation rule on one value host.

    Attributes:
        value_host_name: Host whose rule failed
        condition_type: Type of the failing condition, identifies the rule
        severity: Severity assigned by the validator
        error_message: Message for display next to the input
        summary_message: Message for a form-level summary, None to reuse error_message
    """

    value_host_name: str
    condition_type: str
    severity: ValidationSeverity = ValidationSeverity.ERROR
    error_message: str = ""
    summary_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "value_host_name": self.value_host_name,
            "condition_type": self.condition_type,
            "severity": int(self.severity),
            "error_message": self.error_message,
            "summary_message": self.summary_message,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IssueFound:
        return cls(
            value_host_name=data["value_host_name"],
            condition_type=data["condition_type"],
            severity=ValidationSeverity(data.get("severity", ValidationSeverity.ERROR)),
            error_message=data.get("error_message", ""),
            summary_message=data.get("summary_message"),
        )


@dataclass(frozen=True)
class BusinessLogicError:
    """An error reported by business logic outside of the condition rules.

    Typically produced by the server after a save attempt. Errors without an
    ``associated_value_host_name`` apply to the whole form.
    """

    error_message: str
    associated_value_host_name: str | None = None
    severity: ValidationSeverity = ValidationSeverity.ERROR
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_message": self.error_message,
            "associated_value_host_name": self.associated_value_host_name,
            "severity": int(self.severity),
            "error_code": self.error_code,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BusinessLogicError:
        return cls(
            error_message=data["error_message"],
            associated_value_host_name=data.get("associated_value_host_name"),
            severity=ValidationSeverity(data.get("severity", ValidationSeverity.ERROR)),
            error_code=data.get("error_code"),
        )


@dataclass(frozen=True)
class IssueSnapshot:
    """What a UI needs to show one issue."""

    name: str
    severity: ValidationSeverity
    error_message: str


@dataclass(frozen=True)
class ValidateOptions:
    """Options for a validate call.

    Attributes:
        group: Only validate hosts whose group matches. None validates all.
        preliminary: Skip Required-category conditions, used before the user
            has had a chance to fill in the form.
        during_edit: Only run conditions that support evaluating the raw
            input string while it is being edited.
        omit_callback: Do not fire the validated callbacks.
    """

    group: str | list[str] | None = None
    preliminary: bool = False
    during_edit: bool = False
    omit_callback: bool = False


@dataclass(frozen=True)
class SetValueOptions:
    """Options for the value setters of a value host.

    Attributes:
        validate: Validate immediately when the value changed.
        reset: Set the change counter back to 0 and clear validation.
        during_edit: When validating, use the during-edit path.
        conversion_error_token_value: Message describing why the input value
            could not be converted. Kept only while the native value is UNDEFINED.
        skip_value_changed_callback: Do not fire the value changed callbacks.
    """

    validate: bool = False
    reset: bool = False
    during_edit: bool = False
    conversion_error_token_value: str | None = None
    skip_value_changed_callback: bool = False


@dataclass(frozen=True)
class TokenLabelAndValue:
    """A value offered to message templates as ``{token_label}``."""

    token_label: str
    associated_value: Any
    purpose: str = "value"


@dataclass(frozen=True)
class InputValidateResult:
    """Outcome of running one input validator."""

    condition_evaluate_result: ConditionEvaluateResult = ConditionEvaluateResult.UNDETERMINED
    issue_found: IssueFound | None = None
    skipped: bool = False


@dataclass(frozen=True)
class ValidateResult:
    """Outcome of validating one input value host.

    ``pending`` holds futures for async conditions that had not finished
    when validate returned. ``skipped`` is set when the host was not
    validated because its group did not match.
    """

    value_host_name: str
    validation_result: ValidationResult
    issues_found: tuple[IssueFound, ...] = ()
    skipped: bool = False
    pending: tuple[Future, ...] = field(default=(), compare=False)

    @property
    def is_valid(self) -> bool:
        return self.validation_result != ValidationResult.INVALID
