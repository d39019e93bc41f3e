"""The validation manager: owns the value hosts of one form.

The manager creates value hosts from descriptors, is the resolver
conditions use to reach other hosts, ripples value changes to dependent
hosts, validates everything and collects issues for display.

Example:
    ```python
    services = ValidationServices.create_default()
    manager = ValidationManager(ValidationManagerConfig(
        services=services,
        value_host_descriptors=[
            InputValueHostDescriptor(
                name="email",
                label="Email",
                validator_descriptors=[
                    InputValidatorDescriptor(
                        condition_config={"condition_type": "RequireText"},
                        error_message="{Label} is required",
                    ),
                ],
            ),
        ],
    ))
    manager.get_input_value_host("email").set_values("", "", SetValueOptions(validate=True))
    manager.is_valid
    # False
    ```
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Mapping, Sequence

from ruleknobs_common import serialize, serialize_list

from .dependency import DependencyIndex
from .descriptors import ValueHostDescriptor, descriptor_from_dict
from .exceptions import DuplicateValueHostError, ValueHostNotFoundError
from .types import BusinessLogicError, IssueSnapshot, ValidateOptions, ValidateResult
from .validation_services import ValidationServices
from .value_hosts.base import ValueHost
from .value_hosts.input import (
    BUSINESS_LOGIC_VALUE_HOST_NAME,
    BusinessLogicInputValueHost,
    InputValueHost,
)
from .value_hosts.state import ValueHostState, merge_state

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationManagerState:
    """Manager level state. The counter increases on every value host state change."""

    state_change_counter: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"state_change_counter": self.state_change_counter}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ValidationManagerState:
        return cls(state_change_counter=data.get("state_change_counter", 0))


@dataclass(frozen=True)
class ValueHostStateChanged:
    name: str


def validation_manager_reducer(state: ValidationManagerState, action: Any) -> ValidationManagerState:
    if isinstance(action, ValueHostStateChanged):
        return replace(state, state_change_counter=state.state_change_counter + 1)
    raise ValueError(f"Action {type(action).__name__} does not apply to ValidationManagerState")


@dataclass
class ValidationManagerConfig:
    """Everything needed to build a validation manager.

    Attributes:
        services: Factories and services
        value_host_descriptors: Value hosts to create, in order
        saved_state: Manager state from an earlier snapshot
        saved_value_host_states: Value host states from an earlier snapshot,
            matched to descriptors by name
        on_state_changed: ``(manager, manager_state)``
        on_validated: ``(manager, results)`` after ``validate``
        on_value_host_state_changed: ``(value_host, state)``
        on_value_changed: ``(value_host, old_value)``
        on_input_value_changed: ``(value_host, old_input_value)``
        on_value_host_validated: ``(value_host, result)``
    """

    services: ValidationServices
    value_host_descriptors: Sequence[ValueHostDescriptor] = field(default_factory=list)
    saved_state: ValidationManagerState | Mapping[str, Any] | None = None
    saved_value_host_states: Sequence[ValueHostState | Mapping[str, Any]] = field(default_factory=list)
    on_state_changed: Callable[[ValidationManager, ValidationManagerState], None] | None = None
    on_validated: Callable[[ValidationManager, list[ValidateResult]], None] | None = None
    on_value_host_state_changed: Callable[[ValueHost, ValueHostState], None] | None = None
    on_value_changed: Callable[[ValueHost, Any], None] | None = None
    on_input_value_changed: Callable[[ValueHost, Any], None] | None = None
    on_value_host_validated: Callable[[ValueHost, ValidateResult], None] | None = None


class ValidationManager:
    """Owns the value hosts of a form and validates them together."""

    def __init__(self, config: ValidationManagerConfig):
        self._config = copy.copy(config)
        self._value_hosts: dict[str, ValueHost] = {}
        self._dependencies = DependencyIndex()
        saved = config.saved_state
        if saved is None:
            self._state = ValidationManagerState()
        elif isinstance(saved, ValidationManagerState):
            self._state = saved
        else:
            self._state = ValidationManagerState.from_dict(saved)
        self._saved_value_host_states: dict[str, ValueHostState | Mapping[str, Any]] = {
            _state_name(s): s for s in config.saved_value_host_states
        }
        for descriptor in config.value_host_descriptors:
            self._add(descriptor, None)
        self._dependencies.rebuild(self.input_value_hosts())
        logger.info(f"ValidationManager created with {len(self._value_hosts)} value hosts")

    @property
    def services(self) -> ValidationServices:
        return self._config.services

    @property
    def state(self) -> ValidationManagerState:
        return self._state

    # -- value hosts ---------------------------------------------------------

    def add_value_host(
        self, descriptor: ValueHostDescriptor, initial_state: ValueHostState | None = None
    ) -> ValueHost:
        """Create and add a value host.

        Raises:
            DuplicateValueHostError: If the name is already used
        """
        if descriptor.name in self._value_hosts:
            raise DuplicateValueHostError(descriptor.name)
        value_host = self._add(descriptor, initial_state)
        self._dependencies.rebuild(self.input_value_hosts())
        return value_host

    def update_value_host(
        self, descriptor: ValueHostDescriptor, initial_state: ValueHostState | None = None
    ) -> ValueHost:
        """Replace the value host of the same name, or add it.

        Without ``initial_state`` the current state is kept.
        """
        existing = self._value_hosts.get(descriptor.name)
        if initial_state is None and existing is not None:
            initial_state = existing.state
        value_host = self._add(descriptor, initial_state)
        self._dependencies.rebuild(self.input_value_hosts())
        return value_host

    def discard_value_host(self, name: str) -> None:
        """Remove a value host.

        Raises:
            ValueHostNotFoundError: If there is no value host with that name
        """
        if name not in self._value_hosts:
            raise ValueHostNotFoundError(name)
        del self._value_hosts[name]
        self._saved_value_host_states.pop(name, None)
        self._dependencies.rebuild(self.input_value_hosts())

    def _add(self, descriptor: ValueHostDescriptor, initial_state: ValueHostState | None) -> ValueHost:
        factory = self.services.value_host_factory
        default_state = factory.create_default_state(descriptor)
        saved = initial_state if initial_state is not None else self._saved_value_host_states.get(descriptor.name)
        state = default_state if saved is None else merge_state(default_state, saved)
        value_host = factory.create_value_host(self, descriptor, state)
        self._value_hosts[descriptor.name] = value_host
        return value_host

    def get_value_host(self, name: str) -> ValueHost | None:
        return self._value_hosts.get(name)

    def get_input_value_host(self, name: str) -> InputValueHost | None:
        value_host = self._value_hosts.get(name)
        if isinstance(value_host, InputValueHost):
            return value_host
        return None

    def value_hosts(self) -> list[ValueHost]:
        return list(self._value_hosts.values())

    def input_value_hosts(self) -> list[InputValueHost]:
        return [vh for vh in self._value_hosts.values() if isinstance(vh, InputValueHost)]

    # -- notifications from value hosts ---------------------------------------

    def notify_other_value_hosts_of_value_change(self, name: str, revalidate: bool) -> None:
        """Tell the input hosts whose rules read ``name`` that it changed.

        Only direct dependents are told. Their reaction does not ripple further.
        """
        for dependent in self._dependencies.dependents_of(name):
            value_host = self.get_input_value_host(dependent)
            if value_host is not None and dependent != name:
                value_host.other_value_host_changed_notification(name, revalidate)

    def on_value_host_state_changed(self, value_host: ValueHost, state: ValueHostState) -> None:
        if self._config.on_value_host_state_changed is not None:
            self._config.on_value_host_state_changed(value_host, state)
        self._state = validation_manager_reducer(self._state, ValueHostStateChanged(value_host.name))
        if self._config.on_state_changed is not None:
            self._config.on_state_changed(self, self._state)

    def on_value_changed(self, value_host: ValueHost, old_value: Any) -> None:
        if self._config.on_value_changed is not None:
            self._config.on_value_changed(value_host, old_value)

    def on_input_value_changed(self, value_host: ValueHost, old_value: Any) -> None:
        if self._config.on_input_value_changed is not None:
            self._config.on_input_value_changed(value_host, old_value)

    def on_value_host_validated(self, value_host: ValueHost, result: ValidateResult) -> None:
        if self._config.on_value_host_validated is not None:
            self._config.on_value_host_validated(value_host, result)

    # -- validation ----------------------------------------------------------

    def validate(self, options: ValidateOptions | None = None) -> list[ValidateResult]:
        """Validate every input value host.

        Hosts outside of ``options.group`` are left alone and not reported.
        """
        options = options or ValidateOptions()
        results = []
        for value_host in self.input_value_hosts():
            result = value_host.validate(options)
            if not result.skipped:
                results.append(result)
        if not options.omit_callback and self._config.on_validated is not None:
            self._config.on_validated(self, results)
        return results

    def clear_validation(self) -> bool:
        """Clear validation and business logic errors on every input host."""
        changed = False
        for value_host in self.input_value_hosts():
            changed = value_host.clear_validation() or changed
        return changed

    @property
    def is_valid(self) -> bool:
        return all(vh.is_valid for vh in self.input_value_hosts())

    def do_not_save_native_value(self) -> bool:
        """True when any input host is invalid, unvalidated after a change, or still validating."""
        return any(vh.do_not_save_native_value() for vh in self.input_value_hosts())

    # -- business logic errors -------------------------------------------------

    def set_business_logic_errors(self, errors: Iterable[BusinessLogicError] | None) -> bool:
        """Replace all business logic errors.

        Each error goes to the input host it names. Errors without a known
        host go to the ``*`` host, which is added on first use.

        Returns:
            True when at least one error was assigned
        """
        for value_host in self.input_value_hosts():
            value_host.clear_business_logic_errors()
        assigned = False
        for error in errors or ():
            target = None
            if error.associated_value_host_name:
                target = self.get_input_value_host(error.associated_value_host_name)
                if target is None:
                    logger.warning(
                        f"Business logic error for unknown value host {error.associated_value_host_name}"
                    )
            if target is None:
                target = self._business_logic_value_host()
            target.set_business_logic_error(error)
            assigned = True
        return assigned

    def _business_logic_value_host(self) -> InputValueHost:
        value_host = self.get_input_value_host(BUSINESS_LOGIC_VALUE_HOST_NAME)
        if value_host is None:
            value_host = self.add_value_host(BusinessLogicInputValueHost.create_descriptor())  # type: ignore[assignment]
        return value_host  # type: ignore[return-value]

    # -- issues --------------------------------------------------------------

    def get_issues_for_input(self, name: str) -> list[IssueSnapshot]:
        value_host = self.get_input_value_host(name)
        if value_host is None:
            return []
        return value_host.get_issues_for_input()

    def get_issues_for_summary(self, group: str | Sequence[str] | None = None) -> list[IssueSnapshot]:
        issues: list[IssueSnapshot] = []
        for value_host in self.input_value_hosts():
            issues.extend(value_host.get_issues_for_summary(group))
        return issues

    # -- snapshots -----------------------------------------------------------

    def get_value_host_states(self) -> list[ValueHostState]:
        return [vh.state for vh in self._value_hosts.values()]

    def to_dict(self) -> dict[str, Any]:
        """Snapshot of the manager and value host states as plain data."""
        return {
            "state": serialize(self._state),
            "value_host_states": serialize_list(self.get_value_host_states()),
        }

    @classmethod
    def from_dict(
        cls,
        services: ValidationServices,
        descriptors: Sequence[ValueHostDescriptor | Mapping[str, Any]],
        data: Mapping[str, Any],
        **callbacks: Any,
    ) -> ValidationManager:
        """Rebuild a manager from descriptors and a ``to_dict`` snapshot.

        Args:
            services: Services for the new manager
            descriptors: The same descriptors the snapshot was taken with
            data: Output of ``to_dict``
            **callbacks: Callback fields of ValidationManagerConfig
        """
        value_host_descriptors = [
            d if isinstance(d, ValueHostDescriptor) else descriptor_from_dict(d) for d in descriptors
        ]
        saved_names = {d.name for d in value_host_descriptors}
        # the "*" host is added on demand and has no descriptor
        for saved in data.get("value_host_states", []):
            if saved["name"] == BUSINESS_LOGIC_VALUE_HOST_NAME and saved["name"] not in saved_names:
                value_host_descriptors.append(BusinessLogicInputValueHost.create_descriptor())
        return cls(
            ValidationManagerConfig(
                services=services,
                value_host_descriptors=value_host_descriptors,
                saved_state=data.get("state"),
                saved_value_host_states=list(data.get("value_host_states", [])),
                **callbacks,
            )
        )


def _state_name(state: ValueHostState | Mapping[str, Any]) -> str:
    if isinstance(state, ValueHostState):
        return state.name
    return state["name"]
