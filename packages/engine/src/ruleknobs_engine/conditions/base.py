"""Condition contract and the helpers shared by every condition kind.

A condition is a stateless evaluator: given a value host and a resolver
(normally the validation manager) it returns a ``ConditionEvaluateResult``.
Conditions are built from a plain config mapping, which is copied and frozen
at construction, so changing a rule means building a new condition.

Rather than deep inheritance chains, the common steps are helper functions:

- ``ensure_primary_value_host`` picks the host to evaluate
- ``config_fault`` logs and builds the exception for configuration faults
- ``log_type_mismatch`` reports comparisons that could not be made
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar, Mapping, Protocol

from ..enums import ConditionCategory, ConditionEvaluateResult
from ..exceptions import ConditionConfigError
from ..types import TokenLabelAndValue

if TYPE_CHECKING:
    from ..validation_services import ValidationServices
    from ..value_hosts.base import ValueHost
    from .factory import ConditionFactory

logger = logging.getLogger(__name__)

EvaluateResult = ConditionEvaluateResult | Future


class ValueHostResolver(Protocol):
    """Looks up value hosts by name and exposes the services."""

    @property
    def services(self) -> ValidationServices: ...

    def get_value_host(self, name: str) -> ValueHost | None: ...


def config_fault(
    message: str,
    condition_type: str | None,
    value_host_name: str | None = None,
    property_name: str | None = None,
) -> ConditionConfigError:
    """Log a configuration fault and return the exception to raise."""
    where = f" for {value_host_name}" if value_host_name else ""
    logger.error(f"{condition_type}{where}: {message}")
    return ConditionConfigError(message, condition_type, value_host_name, property_name)


def coerce_evaluate_result(value: Any) -> ConditionEvaluateResult | None:
    """Read a ConditionEvaluateResult from config (enum, int or name such as ``"NoMatch"``)."""
    if value is None or isinstance(value, ConditionEvaluateResult):
        return value
    if isinstance(value, str):
        key = value.replace("_", "").replace("-", "").lower()
        for member in ConditionEvaluateResult:
            if member.name.replace("_", "").lower() == key:
                return member
        raise ValueError(f"Not a condition result: {value}")
    return ConditionEvaluateResult(value)


class Condition(ABC):
    """Base class for all conditions.

    Config keys understood by every condition:
        condition_type: Overrides the class default type name
        category: Overrides the class default ``ConditionCategory``
        value_host_name: Evaluate this host instead of the one supplied by
            the caller. It must exist.
    """

    default_condition_type: ClassVar[str] = "UNKNOWN"
    default_category: ClassVar[ConditionCategory] = ConditionCategory.UNDETERMINED

    def __init__(self, config: Mapping[str, Any] | None = None):
        self._config: Mapping[str, Any] = MappingProxyType(copy.deepcopy(dict(config or {})))
        self.supports_during_edit = False

    @classmethod
    def from_config(cls, config: Mapping[str, Any], factory: ConditionFactory) -> Condition:
        """Build an instance. Conditions with children build them through ``factory``."""
        return cls(config)

    @property
    def config(self) -> Mapping[str, Any]:
        return self._config

    @property
    def condition_type(self) -> str:
        return self._config.get("condition_type") or self.default_condition_type

    @property
    def category(self) -> ConditionCategory:
        category = self._config.get("category")
        if category is None:
            return self.default_category
        return ConditionCategory(category)

    @property
    def value_host_name(self) -> str | None:
        return self._config.get("value_host_name")

    @abstractmethod
    def evaluate(self, value_host: ValueHost | None, resolver: ValueHostResolver) -> EvaluateResult:
        """Evaluate the rule.

        Args:
            value_host: Host supplied by the caller, may be None when the
                condition names its own host
            resolver: Used to reach other hosts and the services

        Returns:
            A ConditionEvaluateResult, or a Future of one for async rules
        """

    def evaluate_during_edits(
        self, text: str, value_host: ValueHost, services: ValidationServices
    ) -> ConditionEvaluateResult:
        """Evaluate the raw input text while the user is editing it."""
        return ConditionEvaluateResult.UNDETERMINED

    def gather_value_host_names(self, names: set[str]) -> None:
        """Add every value host name this condition reads to ``names``."""
        if self.value_host_name:
            names.add(self.value_host_name)

    def get_values_for_tokens(
        self, value_host: ValueHost, resolver: ValueHostResolver
    ) -> list[TokenLabelAndValue]:
        """Values this condition offers to message templates."""
        return []

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.condition_type!r})"


def ensure_primary_value_host(
    condition: Condition, value_host: ValueHost | None, resolver: ValueHostResolver
) -> ValueHost:
    """Return the host a condition evaluates.

    The condition's own ``value_host_name`` wins over the caller's host and
    must resolve.

    Raises:
        ConditionConfigError: If the name is unknown or there is no host at all
    """
    name = condition.value_host_name
    if name:
        found = resolver.get_value_host(name)
        if found is None:
            raise config_fault(
                f"value_host_name {name} is unknown",
                condition.condition_type,
                value_host_name=name,
                property_name="value_host_name",
            )
        return found
    if value_host is None:
        raise config_fault(
            "No value host supplied and value_host_name is not assigned",
            condition.condition_type,
            property_name="value_host_name",
        )
    return value_host


def log_type_mismatch(
    condition: Condition,
    value_host: ValueHost,
    first_label: str,
    second_label: str,
    first: Any,
    second: Any,
) -> None:
    logger.warning(
        f"Type mismatch. {first_label} cannot be compared to {second_label} "
        f"({first!r}, {second!r}) in {condition.condition_type} for {value_host.name}"
    )


class StringCondition(Condition):
    """Base for rules over string values.

    ``evaluate`` checks the native value as is: a non-string is Undetermined
    and nothing is trimmed, because whatever converted the input to the
    native value owns normalization. ``evaluate_during_edits`` checks the raw
    input text, trimming it first when ``trim`` is set.

    Config keys:
        trim: Trim the text during edits (default True)
        supports_during_edit: Set False for rules that must not run on
            partial input (default True)
    """

    def __init__(self, config: Mapping[str, Any] | None = None):
        super().__init__(config)
        self.trim: bool = self.config.get("trim", True) is not False
        self.supports_during_edit = self.config.get("supports_during_edit", True) is not False

    def evaluate(self, value_host: ValueHost | None, resolver: ValueHostResolver) -> EvaluateResult:
        value_host = ensure_primary_value_host(self, value_host, resolver)
        value = value_host.get_value()
        if not isinstance(value, str):
            return ConditionEvaluateResult.UNDETERMINED
        return self.evaluate_string(value, value_host, resolver.services)

    def evaluate_during_edits(
        self, text: str, value_host: ValueHost, services: ValidationServices
    ) -> ConditionEvaluateResult:
        if not self.supports_during_edit:
            return ConditionEvaluateResult.UNDETERMINED
        if self.trim:
            text = text.strip()
        return self.evaluate_string(text, value_host, services)

    @abstractmethod
    def evaluate_string(
        self, text: str, value_host: ValueHost, services: ValidationServices
    ) -> ConditionEvaluateResult:
        """Evaluate a string that passed the shape guard."""
