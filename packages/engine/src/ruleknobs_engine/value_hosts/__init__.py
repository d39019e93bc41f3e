"""Value hosts: named values with immutable state, and their validators."""

from .base import ValueHost, ValueHostsManager
from .factory import ValueHostFactory
from .input import (
    BUSINESS_LOGIC_VALUE_HOST_NAME,
    BusinessLogicInputValueHost,
    InputValueHost,
    groups_match,
)
from .state import (
    BusinessLogicErrorAdded,
    BusinessLogicErrorsCleared,
    InputValueAssigned,
    InputValueHostState,
    ItemSaved,
    MarkedChangedButUnvalidated,
    ValidationCleared,
    Validated,
    ValueAssigned,
    ValueHostState,
    ValuesAssigned,
    input_value_host_reducer,
    merge_state,
    states_equal,
    value_host_reducer,
)
from .validator import InputValidator, default_severity

__all__ = [
    "ValueHost",
    "ValueHostsManager",
    "InputValueHost",
    "BusinessLogicInputValueHost",
    "BUSINESS_LOGIC_VALUE_HOST_NAME",
    "groups_match",
    "InputValidator",
    "default_severity",
    "ValueHostFactory",
    "ValueHostState",
    "InputValueHostState",
    "ValueAssigned",
    "InputValueAssigned",
    "ValuesAssigned",
    "ItemSaved",
    "ValidationCleared",
    "MarkedChangedButUnvalidated",
    "Validated",
    "BusinessLogicErrorAdded",
    "BusinessLogicErrorsCleared",
    "value_host_reducer",
    "input_value_host_reducer",
    "states_equal",
    "merge_state",
]
