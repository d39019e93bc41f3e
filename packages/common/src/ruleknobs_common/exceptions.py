"""Exception hierarchy shared by the ruleknobs packages.

Rule outcomes (a failed Range check, a missing required value) are never
raised; they are reported as issues on the value host. The exceptions here
are for callers and configuration that cannot be processed at all.

Every error carries a ``context`` dictionary naming what was being handled
when it failed, so log records and test assertions can look at structured
data rather than parse the message:

    ```python
    try:
        manager.add_value_host(descriptor)
    except RuleknobsError as e:
        logger.error(f"{e} ({e.context})")
    ```

Packages add their own subclasses (``ConditionConfigError``,
``ValueHostNotFoundError``) under the branch that describes the fault.
"""

from typing import Any, Dict


class RuleknobsError(Exception):
    """Root of every ruleknobs exception.

    Args:
        message: Human-readable error message
        context: What was being processed, e.g. ``{"value_host_name": "age"}``
        details: Accepted as a synonym of ``context`` and preferred over it
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class ValidationError(RuleknobsError):
    """Supplied data is structurally unusable, e.g. a host config without a name."""


class ConfigurationError(RuleknobsError):
    """A rule, factory or config file is set up wrongly.

    Raised for condition parameters that are missing or malformed, value
    host names that do not resolve and files that cannot be loaded.
    """


class NotFoundError(RuleknobsError):
    """A named item (condition type, value host, config file) does not exist."""


class OperationError(RuleknobsError):
    """A request conflicts with current state, such as adding a host twice."""


class SerializationError(RuleknobsError):
    """A value could not be turned into plain data or restored from it."""


__all__ = [
    "RuleknobsError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
    "OperationError",
    "SerializationError",
]
