"""Conditions built from child conditions.

Children are created through the condition factory when the parent is
built, so a whole tree comes from one nested config:

    ```python
    factory.create(
        condition_type="AllMatch",
        condition_configs=[
            {"condition_type": "RequireText"},
            {"condition_type": "StringLength", "maximum": 20},
        ],
    )
    ```

A child without its own ``value_host_name`` is evaluated against the
parent's host.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from ..enums import ConditionCategory, ConditionEvaluateResult
from ..exceptions import AsyncConditionError
from .base import (
    Condition,
    EvaluateResult,
    ValueHostResolver,
    coerce_evaluate_result,
    config_fault,
    ensure_primary_value_host,
)

if TYPE_CHECKING:
    from ..value_hosts.base import ValueHost
    from .factory import ConditionFactory

logger = logging.getLogger(__name__)


class ChildResultsCondition(Condition):
    """Base for conditions that fold the results of a list of children.

    Config keys:
        condition_configs: Configs of the children, in evaluation order
        treat_undetermined_as: Result used in place of a child's
            Undetermined result. Unset keeps Undetermined.
    """

    default_category = ConditionCategory.CHILDREN

    def __init__(self, config: Mapping[str, Any] | None = None, conditions: Sequence[Condition] = ()):
        super().__init__(config)
        self.conditions: tuple[Condition, ...] = tuple(conditions)
        self.treat_undetermined_as = coerce_evaluate_result(self.config.get("treat_undetermined_as"))

    @classmethod
    def from_config(cls, config: Mapping[str, Any], factory: ConditionFactory) -> Condition:
        children = [factory.create_condition(child) for child in config.get("condition_configs") or []]
        return cls(config, children)

    def evaluate(self, value_host: ValueHost | None, resolver: ValueHostResolver) -> EvaluateResult:
        if not self.conditions:
            return ConditionEvaluateResult.UNDETERMINED
        parent = value_host
        if self.value_host_name:
            parent = ensure_primary_value_host(self, value_host, resolver)
        return self.fold(parent, resolver)

    @abstractmethod
    def fold(self, parent: ValueHost | None, resolver: ValueHostResolver) -> ConditionEvaluateResult:
        """Combine the child results into this condition's result."""

    def evaluate_child(
        self, child: Condition, parent: ValueHost | None, resolver: ValueHostResolver
    ) -> ConditionEvaluateResult:
        return self.cleanup_child_result(child, child.evaluate(parent, resolver))

    def cleanup_child_result(self, child: Condition, result: EvaluateResult) -> ConditionEvaluateResult:
        """Reject pending results and apply ``treat_undetermined_as``."""
        if isinstance(result, Future):
            message = f"{child.condition_type} returned a pending result inside {self.condition_type}"
            logger.error(message)
            raise AsyncConditionError(message, self.condition_type, self.value_host_name)
        if result == ConditionEvaluateResult.UNDETERMINED and self.treat_undetermined_as is not None:
            return self.treat_undetermined_as
        return result

    def gather_value_host_names(self, names: set[str]) -> None:
        super().gather_value_host_names(names)
        for child in self.conditions:
            child.gather_value_host_names(names)


class AllMatchCondition(ChildResultsCondition):
    """Match when every child matches.

    Stops at the first NoMatch or Undetermined child.
    """

    default_condition_type = "AllMatch"

    def fold(self, parent: ValueHost | None, resolver: ValueHostResolver) -> ConditionEvaluateResult:
        for child in self.conditions:
            result = self.evaluate_child(child, parent, resolver)
            if result == ConditionEvaluateResult.NO_MATCH:
                return ConditionEvaluateResult.NO_MATCH
            if result == ConditionEvaluateResult.UNDETERMINED:
                return ConditionEvaluateResult.UNDETERMINED
        return ConditionEvaluateResult.MATCH


class AnyMatchCondition(ChildResultsCondition):
    """Match when at least one child matches.

    An Undetermined child stops evaluation and makes the whole condition
    Undetermined, even when an earlier child matched.
    """

    default_condition_type = "AnyMatch"

    def fold(self, parent: ValueHost | None, resolver: ValueHostResolver) -> ConditionEvaluateResult:
        match_count = 0
        for child in self.conditions:
            result = self.evaluate_child(child, parent, resolver)
            if result == ConditionEvaluateResult.UNDETERMINED:
                return ConditionEvaluateResult.UNDETERMINED
            if result == ConditionEvaluateResult.MATCH:
                match_count += 1
        return ConditionEvaluateResult.MATCH if match_count > 0 else ConditionEvaluateResult.NO_MATCH


class CountMatchesCondition(ChildResultsCondition):
    """Match when the number of matching children is within ``minimum``..``maximum``.

    ``minimum`` defaults to 1 and ``maximum`` to unbounded. An Undetermined
    child stops evaluation.
    """

    default_condition_type = "CountMatches"

    def __init__(self, config: Mapping[str, Any] | None = None, conditions: Sequence[Condition] = ()):
        super().__init__(config, conditions)
        minimum = self.config.get("minimum")
        self.minimum: int = 1 if minimum is None else minimum
        self.maximum: int | None = self.config.get("maximum")

    def fold(self, parent: ValueHost | None, resolver: ValueHostResolver) -> ConditionEvaluateResult:
        match_count = 0
        for child in self.conditions:
            result = self.evaluate_child(child, parent, resolver)
            if result == ConditionEvaluateResult.UNDETERMINED:
                return ConditionEvaluateResult.UNDETERMINED
            if result == ConditionEvaluateResult.MATCH:
                match_count += 1
        if match_count < self.minimum:
            return ConditionEvaluateResult.NO_MATCH
        if self.maximum is not None and match_count > self.maximum:
            return ConditionEvaluateResult.NO_MATCH
        return ConditionEvaluateResult.MATCH


class NotCondition(Condition):
    """Inverts the result of ``child_condition_config``. Undetermined stays Undetermined."""

    default_condition_type = "Not"
    default_category = ConditionCategory.CHILDREN

    def __init__(self, config: Mapping[str, Any] | None = None, child: Condition | None = None):
        super().__init__(config)
        if child is None:
            raise config_fault(
                "child_condition_config is required",
                self.condition_type,
                value_host_name=self.value_host_name,
                property_name="child_condition_config",
            )
        self.child = child

    @classmethod
    def from_config(cls, config: Mapping[str, Any], factory: ConditionFactory) -> Condition:
        child_config = config.get("child_condition_config")
        child = factory.create_condition(child_config) if child_config else None
        return cls(config, child)

    def evaluate(self, value_host: ValueHost | None, resolver: ValueHostResolver) -> EvaluateResult:
        parent = value_host
        if self.value_host_name:
            parent = ensure_primary_value_host(self, value_host, resolver)
        result = self.child.evaluate(parent, resolver)
        if isinstance(result, Future):
            message = f"{self.child.condition_type} returned a pending result inside {self.condition_type}"
            logger.error(message)
            raise AsyncConditionError(message, self.condition_type, self.value_host_name)
        if result == ConditionEvaluateResult.MATCH:
            return ConditionEvaluateResult.NO_MATCH
        if result == ConditionEvaluateResult.NO_MATCH:
            return ConditionEvaluateResult.MATCH
        return ConditionEvaluateResult.UNDETERMINED

    def gather_value_host_names(self, names: set[str]) -> None:
        super().gather_value_host_names(names)
        self.child.gather_value_host_names(names)


class WhenCondition(Condition):
    """Evaluates the child only when the enabler matches.

    The enabler is evaluated without a host, so it names its own
    ``value_host_name``. When it does not match the result is Undetermined,
    which validators treat as "rule did not apply".

    ``condition_type`` reports the child's type unless set explicitly, so
    issues are named after the rule that actually ran.
    """

    default_condition_type = "When"
    default_category = ConditionCategory.CHILDREN

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        enabler: Condition | None = None,
        child: Condition | None = None,
    ):
        super().__init__(config)
        if enabler is None:
            raise config_fault(
                "enabler_config is required",
                self.config.get("condition_type") or self.default_condition_type,
                property_name="enabler_config",
            )
        if child is None:
            raise config_fault(
                "child_condition_config is required",
                self.config.get("condition_type") or self.default_condition_type,
                property_name="child_condition_config",
            )
        self.enabler = enabler
        self.child = child

    @classmethod
    def from_config(cls, config: Mapping[str, Any], factory: ConditionFactory) -> Condition:
        enabler_config = config.get("enabler_config")
        child_config = config.get("child_condition_config")
        return cls(
            config,
            factory.create_condition(enabler_config) if enabler_config else None,
            factory.create_condition(child_config) if child_config else None,
        )

    @property
    def condition_type(self) -> str:
        return self.config.get("condition_type") or self.child.condition_type

    def evaluate(self, value_host: ValueHost | None, resolver: ValueHostResolver) -> EvaluateResult:
        enabled = self.enabler.evaluate(None, resolver)
        if enabled != ConditionEvaluateResult.MATCH:
            logger.info(f"{self.condition_type} skipped because its enabler did not match")
            return ConditionEvaluateResult.UNDETERMINED
        parent = value_host
        if self.value_host_name:
            parent = ensure_primary_value_host(self, value_host, resolver)
        return self.child.evaluate(parent, resolver)

    def gather_value_host_names(self, names: set[str]) -> None:
        super().gather_value_host_names(names)
        self.child.gather_value_host_names(names)
        self.enabler.gather_value_host_names(names)
