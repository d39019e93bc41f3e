"""Rule evaluation engine for form validation.

Value hosts hold named values, conditions evaluate rules against them to
Match, NoMatch or Undetermined, and the validation manager ties them together:

- **Conditions**: leaf rules and compound rules built by ``ConditionFactory``
- **Value hosts**: immutable state updated through reducers
- **ValidationManager**: validation, cross-field ripple, business logic
  errors and state snapshots

Example:
    ```python
    from ruleknobs_engine import (
        InputValidatorDescriptor, InputValueHostDescriptor, SetValueOptions,
        ValidationManager, ValidationManagerConfig, ValidationServices,
    )

    manager = ValidationManager(ValidationManagerConfig(
        services=ValidationServices.create_default(),
        value_host_descriptors=[
            InputValueHostDescriptor(
                name="name",
                label="Name",
                validator_descriptors=[InputValidatorDescriptor(
                    condition_config={"condition_type": "RequireText"},
                    error_message="{Label} is required",
                )],
            ),
        ],
    ))
    manager.get_input_value_host("name").set_values("", "", SetValueOptions(validate=True))
    manager.get_issues_for_input("name")[0].error_message
    # 'Name is required'
    ```
"""

from .conditions import Condition, ConditionFactory, ConditionType
from .descriptors import (
    InputValidatorDescriptor,
    InputValueHostDescriptor,
    ValueHostDescriptor,
    ValueHostType,
    descriptor_from_dict,
)
from .enums import (
    ComparersResult,
    ConditionCategory,
    ConditionEvaluateResult,
    ValidationResult,
    ValidationSeverity,
)
from .exceptions import (
    AsyncConditionError,
    ConditionConfigError,
    DuplicateValueHostError,
    EngineError,
    UnknownConditionTypeError,
    ValueHostNotFoundError,
)
from .loader import load_validation_manager_config
from .manager import ValidationManager, ValidationManagerConfig, ValidationManagerState
from .services import (
    ComparerService,
    ConverterService,
    LocalizationContext,
    LookupKey,
    MessageTokenResolver,
)
from .types import (
    BusinessLogicError,
    InputValidateResult,
    IssueFound,
    IssueSnapshot,
    SetValueOptions,
    TokenLabelAndValue,
    ValidateOptions,
    ValidateResult,
)
from .undefined import UNDEFINED, is_missing
from .validation_services import ValidationServices
from .value_hosts import (
    BusinessLogicInputValueHost,
    InputValidator,
    InputValueHost,
    InputValueHostState,
    ValueHost,
    ValueHostFactory,
    ValueHostState,
)

__version__ = "1.0.0"

__all__ = [
    "__version__",
    # Sentinel
    "UNDEFINED",
    "is_missing",
    # Enums
    "ConditionEvaluateResult",
    "ConditionCategory",
    "ValidationResult",
    "ValidationSeverity",
    "ComparersResult",
    # Records
    "IssueFound",
    "IssueSnapshot",
    "BusinessLogicError",
    "ValidateOptions",
    "SetValueOptions",
    "InputValidateResult",
    "ValidateResult",
    "TokenLabelAndValue",
    # Exceptions
    "EngineError",
    "ConditionConfigError",
    "AsyncConditionError",
    "UnknownConditionTypeError",
    "ValueHostNotFoundError",
    "DuplicateValueHostError",
    # Services
    "ConverterService",
    "ComparerService",
    "LocalizationContext",
    "LookupKey",
    "MessageTokenResolver",
    "ValidationServices",
    # Conditions
    "Condition",
    "ConditionFactory",
    "ConditionType",
    # Descriptors
    "ValueHostDescriptor",
    "InputValueHostDescriptor",
    "InputValidatorDescriptor",
    "ValueHostType",
    "descriptor_from_dict",
    # Value hosts
    "ValueHost",
    "InputValueHost",
    "BusinessLogicInputValueHost",
    "InputValidator",
    "ValueHostFactory",
    "ValueHostState",
    "InputValueHostState",
    # Manager
    "ValidationManager",
    "ValidationManagerConfig",
    "ValidationManagerState",
    "load_validation_manager_config",
]
