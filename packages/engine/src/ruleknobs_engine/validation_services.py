"""The services container shared by a validation manager and its value hosts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .conditions.factory import ConditionFactory
from .services import ComparerService, ConverterService, LocalizationContext, MessageTokenResolver
from .value_hosts.factory import ValueHostFactory


@dataclass
class ValidationServices:
    """Factories and services used during validation.

    One instance can be shared by many managers. Replace a member to plug in
    application specific behavior, e.g. a comparer for a custom data type.
    """

    condition_factory: ConditionFactory
    converter_service: ConverterService
    comparer_service: ComparerService
    message_token_resolver: MessageTokenResolver
    localization: LocalizationContext
    value_host_factory: ValueHostFactory

    @classmethod
    def create_default(
        cls,
        culture_id: str = "en",
        localizer: Callable[[str, str, str | None], str | None] | None = None,
    ) -> ValidationServices:
        """Wire the built-in factories and services."""
        converter_service = ConverterService()
        return cls(
            condition_factory=ConditionFactory(),
            converter_service=converter_service,
            comparer_service=ComparerService(converter_service),
            message_token_resolver=MessageTokenResolver(),
            localization=LocalizationContext(culture_id, localizer),
            value_host_factory=ValueHostFactory(),
        )
