"""Factory base class shared by configuration-driven builders."""

from typing import Any


class FactoryBase:
    """Base class for factory objects.

    Factories turn a configuration mapping into an object. Subclasses
    implement ``create`` and receive the configuration as keyword arguments,
    so a factory can be handed a dict straight from a YAML file:

        ```python
        condition = factory.create(**{"condition_type": "RequireText"})
        ```
    """

    def create(self, **config: Any) -> Any:
        """Create an object from configuration.

        Args:
            **config: Configuration parameters

        Returns:
            Created object
        """
        raise NotImplementedError("Subclasses must implement create method")
