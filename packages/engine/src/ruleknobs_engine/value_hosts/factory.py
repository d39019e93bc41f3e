"""Creates value hosts and their default state from descriptors."""

from __future__ import annotations

import logging
from typing import Any

from ruleknobs_common import ConfigurationError, Registry
from ruleknobs_config import FactoryBase

from ..descriptors import InputValueHostDescriptor, ValueHostDescriptor, ValueHostType
from .base import ValueHost, ValueHostsManager
from .input import BusinessLogicInputValueHost, InputValueHost
from .state import InputValueHostState, ValueHostState

logger = logging.getLogger(__name__)


class ValueHostFactory(FactoryBase):
    """Maps ``value_host_type`` to a value host class and its state class."""

    def __init__(self, register_defaults: bool = True):
        self._registry: Registry[tuple[type[ValueHost], type[ValueHostState]]] = Registry(
            "value_hosts", case_sensitive=False
        )
        if register_defaults:
            self.register(ValueHostType.NON_INPUT, ValueHost, ValueHostState)
            self.register(ValueHostType.INPUT, InputValueHost, InputValueHostState)
            self.register(ValueHostType.BUSINESS_LOGIC, BusinessLogicInputValueHost, InputValueHostState)

    def register(
        self,
        value_host_type: str,
        value_host_class: type[ValueHost],
        state_class: type[ValueHostState],
        allow_overwrite: bool = False,
    ) -> None:
        self._registry.register(value_host_type, (value_host_class, state_class), allow_overwrite=allow_overwrite)

    def create(self, **config: Any) -> ValueHost:
        """Create a value host from ``manager``, ``descriptor`` and optional ``state``."""
        return self.create_value_host(config["manager"], config["descriptor"], config.get("state"))

    def create_value_host(
        self,
        manager: ValueHostsManager,
        descriptor: ValueHostDescriptor,
        state: ValueHostState | None = None,
    ) -> ValueHost:
        """Create a value host.

        Raises:
            NotFoundError: If ``descriptor.value_host_type`` is not registered
            ConfigurationError: If an input value host type is given a
                plain ``ValueHostDescriptor``
        """
        value_host_class, _ = self._registry.get(descriptor.value_host_type)
        if issubclass(value_host_class, InputValueHost) and not isinstance(descriptor, InputValueHostDescriptor):
            logger.error(
                f"Value host {descriptor.name} of type {descriptor.value_host_type} needs an InputValueHostDescriptor"
            )
            raise ConfigurationError(
                f"Value host type {descriptor.value_host_type} requires an InputValueHostDescriptor",
                context={"value_host_name": descriptor.name, "value_host_type": descriptor.value_host_type},
            )
        logger.debug(f"Creating {value_host_class.__name__} {descriptor.name}")
        if state is None:
            state = self.create_default_state(descriptor)
        return value_host_class(manager, descriptor, state)

    def create_default_state(self, descriptor: ValueHostDescriptor) -> ValueHostState:
        _, state_class = self._registry.get(descriptor.value_host_type)
        return state_class(name=descriptor.name, value=descriptor.initial_value)
