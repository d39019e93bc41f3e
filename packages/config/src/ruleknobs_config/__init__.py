"""Configuration support for ruleknobs packages.

- ``FactoryBase``: base for factories that build objects from config mappings
- ``ConfigLoader``: YAML/JSON loading with ``extends`` inheritance and
  ``${VAR:default}`` environment substitution
"""

from ruleknobs_config.builders import FactoryBase
from ruleknobs_config.exceptions import (
    ConfigError,
    ConfigInheritanceError,
    ConfigNotFoundError,
    EnvironmentVariableError,
)
from ruleknobs_config.loader import ConfigLoader, deep_merge, substitute_env_vars

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "FactoryBase",
    "ConfigLoader",
    "deep_merge",
    "substitute_env_vars",
    "ConfigError",
    "ConfigInheritanceError",
    "ConfigNotFoundError",
    "EnvironmentVariableError",
]
