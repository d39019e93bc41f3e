"""Common utilities and base classes for ruleknobs packages.

This package provides shared functionality used across all ruleknobs packages:

- **Exceptions**: Unified exception hierarchy with context support
- **Registry**: Generic registry pattern for managing named items
- **Serialization**: helpers for to_dict/from_dict objects

Example:
    ```python
    from ruleknobs_common import ConfigurationError, Registry, serialize

    raise ConfigurationError("Missing expression", context={"condition_type": "RegExp"})
    ```
"""

from ruleknobs_common.exceptions import (
    ConfigurationError,
    NotFoundError,
    OperationError,
    RuleknobsError,
    SerializationError,
    ValidationError,
)
from ruleknobs_common.registry import Registry
from ruleknobs_common.serialization import deserialize, serialize, serialize_list

__version__ = "1.0.0"

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "RuleknobsError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
    "OperationError",
    "SerializationError",
    # Registry
    "Registry",
    # Serialization
    "serialize",
    "deserialize",
    "serialize_list",
]
