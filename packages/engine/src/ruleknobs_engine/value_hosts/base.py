"""The plain value host and the manager contract value hosts report to."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Protocol

from ..descriptors import ValueHostDescriptor
from ..types import SetValueOptions, ValidateResult
from ..undefined import UNDEFINED, values_equal
from .state import ItemSaved, ValueAssigned, ValueHostState, states_equal, value_host_reducer

if TYPE_CHECKING:
    from ..validation_services import ValidationServices

logger = logging.getLogger(__name__)


class ValueHostsManager(Protocol):
    """What a value host needs from its owner.

    ``ValidationManager`` implements it. Conditions reach other value hosts
    through ``get_value_host``.
    """

    @property
    def services(self) -> ValidationServices: ...

    def get_value_host(self, name: str) -> ValueHost | None: ...

    def notify_other_value_hosts_of_value_change(self, name: str, revalidate: bool) -> None: ...

    def on_value_host_state_changed(self, value_host: ValueHost, state: ValueHostState) -> None: ...

    def on_value_changed(self, value_host: ValueHost, old_value: Any) -> None: ...

    def on_input_value_changed(self, value_host: ValueHost, old_value: Any) -> None: ...

    def on_value_host_validated(self, value_host: ValueHost, result: ValidateResult) -> None: ...


class ValueHost:
    """A named value with immutable state.

    Every change runs an action through ``reducer`` and replaces the whole
    state object. The manager is told about every real state change, and
    about value changes so that dependent hosts can react.
    """

    is_input_value_host: ClassVar[bool] = False
    reducer: ClassVar[Callable[[Any, Any], Any]] = staticmethod(value_host_reducer)

    def __init__(self, manager: ValueHostsManager, descriptor: ValueHostDescriptor, state: ValueHostState):
        self._manager = manager
        self._descriptor = descriptor
        self._state = state

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def descriptor(self) -> ValueHostDescriptor:
        return self._descriptor

    @property
    def manager(self) -> ValueHostsManager:
        return self._manager

    @property
    def services(self) -> ValidationServices:
        return self._manager.services

    @property
    def label(self) -> str:
        """Label localized through the services' localization context."""
        label = self.services.localization.localize(self._descriptor.label_l10n, self._descriptor.label)
        return label or ""

    @property
    def data_type(self) -> str | None:
        return self._descriptor.data_type

    @property
    def state(self) -> ValueHostState:
        return self._state

    def update_state(self, action: Any) -> bool:
        """Apply ``action`` and replace the state if the result differs.

        Returns:
            True when the state changed
        """
        new_state = type(self).reducer(self._state, action)
        if states_equal(new_state, self._state):
            return False
        self._state = new_state
        self._manager.on_value_host_state_changed(self, new_state)
        return True

    def get_value(self) -> Any:
        return self._state.value

    def set_value(self, value: Any, options: SetValueOptions | None = None) -> None:
        options = options or SetValueOptions()
        old_value = self._state.value
        changed = not values_equal(old_value, value)
        self.update_state(ValueAssigned(value, reset=options.reset))
        if not changed:
            return
        self._manager.notify_other_value_hosts_of_value_change(self.name, options.validate)
        if not options.skip_value_changed_callback:
            self._manager.on_value_changed(self, old_value)

    def set_value_to_undefined(self, options: SetValueOptions | None = None) -> None:
        self.set_value(UNDEFINED, options)

    @property
    def is_changed(self) -> bool:
        return self._state.change_counter > 0

    def save_into_items(self, key: str, value: Any) -> None:
        """Keep a scratch value for conditions. UNDEFINED removes it."""
        self.update_state(ItemSaved(key, value))

    def get_from_items(self, key: str) -> Any:
        return self._state.items.get(key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
