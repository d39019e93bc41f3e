"""Custom exceptions for the config package.

Built on the common exception framework from ruleknobs_common.
"""

from ruleknobs_common import ConfigurationError, NotFoundError

ConfigError = ConfigurationError


class ConfigNotFoundError(NotFoundError):
    """Raised when a requested configuration file does not exist."""

    pass


class ConfigInheritanceError(ConfigurationError):
    """Raised when ``extends`` chains are circular or cannot be resolved."""

    pass


class EnvironmentVariableError(ConfigurationError):
    """Raised when a required ``${VAR}`` reference has no value."""

    pass
