"""Exceptions raised by the rule engine.

Only configuration faults are raised. Rule outcomes (Match, NoMatch,
Undetermined) are always returned, never thrown.
"""

from typing import Any, Dict

from ruleknobs_common import (
    ConfigurationError,
    NotFoundError,
    OperationError,
    RuleknobsError,
)


class EngineError(RuleknobsError):
    """Base exception for the rule engine.

    Each engine error also derives from the common class describing its kind,
    so it can be caught either as an ``EngineError`` or as, say, a
    ``NotFoundError``.
    """


class ConditionConfigError(EngineError, ConfigurationError):
    """Raised when a condition cannot run because of how it was configured.

    Examples are an unknown ``value_host_name``, a comparison without any
    second operand, or a malformed regular expression.

    Args:
        message: Description of the fault
        condition_type: Type of the condition at fault
        value_host_name: Value host being evaluated, when known
        property_name: The config property at fault, when known
    """

    def __init__(
        self,
        message: str,
        condition_type: str | None = None,
        value_host_name: str | None = None,
        property_name: str | None = None,
        context: Dict[str, Any] | None = None,
    ):
        ctx: Dict[str, Any] = dict(context or {})
        if condition_type is not None:
            ctx["condition_type"] = condition_type
        if value_host_name is not None:
            ctx["value_host_name"] = value_host_name
        if property_name is not None:
            ctx["property"] = property_name
        super().__init__(message, context=ctx)
        self.condition_type = condition_type
        self.value_host_name = value_host_name
        self.property_name = property_name


class AsyncConditionError(ConditionConfigError):
    """Raised when a pending result appears where only immediate results are allowed."""

    pass


class UnknownConditionTypeError(EngineError, NotFoundError):
    """Raised when a condition config names an unregistered condition type."""

    def __init__(self, condition_type: str, available: list[str] | None = None):
        super().__init__(
            f"Unknown condition type: {condition_type}",
            context={"condition_type": condition_type, "available": available or []},
        )
        self.condition_type = condition_type


class ValueHostNotFoundError(EngineError, NotFoundError):
    """Raised when a value host name is not known to the manager."""

    def __init__(self, value_host_name: str):
        super().__init__(
            f"Value host not found: {value_host_name}",
            context={"value_host_name": value_host_name},
        )
        self.value_host_name = value_host_name


class DuplicateValueHostError(EngineError, OperationError):
    """Raised when adding a value host whose name is already in use."""

    def __init__(self, value_host_name: str):
        super().__init__(
            f"Value host {value_host_name} already assigned",
            context={"value_host_name": value_host_name},
        )
        self.value_host_name = value_host_name
