"""Value host state, the actions that change it and the reducers applying them.

State objects are frozen. A change is expressed as an action and applied by
a pure reducer that returns a new state:

    ```python
    new_state = input_value_host_reducer(state, ValueAssigned(42))
    ```

The value host compares the result with its current state (deeply, see
``states_equal``) and only replaces it, and reports the change, when they
differ.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping

from ruleknobs_common import deserialize

from ..enums import ValidationResult
from ..types import BusinessLogicError, IssueFound
from ..undefined import UNDEFINED, values_equal


# -- state -------------------------------------------------------------------

@dataclass(frozen=True)
class ValueHostState:
    """State of a value host.

    Attributes:
        name: Name of the owning value host
        value: Native value. UNDEFINED when it could not be produced.
        change_counter: Number of value changes since the last reset
        items: Scratch values saved by conditions, such as a string length
    """

    name: str
    value: Any = UNDEFINED
    change_counter: int = 0
    items: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Plain data for persistence. UNDEFINED values are left out."""
        data: dict[str, Any] = {"name": self.name}
        if self.value is not UNDEFINED:
            data["value"] = self.value
        data["change_counter"] = self.change_counter
        if self.items:
            data["items"] = dict(self.items)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ValueHostState:
        return cls(
            name=data["name"],
            value=data.get("value", UNDEFINED),
            change_counter=data.get("change_counter", 0),
            items=dict(data.get("items") or {}),
        )


@dataclass(frozen=True)
class InputValueHostState(ValueHostState):
    """State of an input value host.

    Attributes:
        input_value: Raw value from the editor, often a string
        validation_result: Result of the latest validation
        issues_found: Issues from the latest validation, None when there are none
        async_processing: An async condition is still running
        conversion_error_token_value: Why the input could not be converted,
            for the ``{ConversionError}`` token
        business_logic_errors: Errors assigned by business logic
    """

    input_value: Any = UNDEFINED
    validation_result: ValidationResult = ValidationResult.NOT_ATTEMPTED
    issues_found: tuple[IssueFound, ...] | None = None
    async_processing: bool = False
    conversion_error_token_value: str | None = None
    business_logic_errors: tuple[BusinessLogicError, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.input_value is not UNDEFINED:
            data["input_value"] = self.input_value
        data["validation_result"] = int(self.validation_result)
        if self.issues_found is not None:
            data["issues_found"] = [issue.to_dict() for issue in self.issues_found]
        if self.async_processing:
            data["async_processing"] = True
        if self.conversion_error_token_value is not None:
            data["conversion_error_token_value"] = self.conversion_error_token_value
        if self.business_logic_errors is not None:
            data["business_logic_errors"] = [error.to_dict() for error in self.business_logic_errors]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> InputValueHostState:
        issues = data.get("issues_found")
        errors = data.get("business_logic_errors")
        return cls(
            name=data["name"],
            value=data.get("value", UNDEFINED),
            change_counter=data.get("change_counter", 0),
            items=dict(data.get("items") or {}),
            input_value=data.get("input_value", UNDEFINED),
            validation_result=ValidationResult(
                data.get("validation_result", ValidationResult.NOT_ATTEMPTED)
            ),
            issues_found=None if issues is None else tuple(
                issue if isinstance(issue, IssueFound) else IssueFound.from_dict(issue)
                for issue in issues
            ),
            async_processing=bool(data.get("async_processing", False)),
            conversion_error_token_value=data.get("conversion_error_token_value"),
            business_logic_errors=None if errors is None else tuple(
                error if isinstance(error, BusinessLogicError) else BusinessLogicError.from_dict(error)
                for error in errors
            ),
        )


def states_equal(first: ValueHostState, second: ValueHostState) -> bool:
    """Deep, type-strict equality of two states."""
    if type(first) is not type(second):
        return False
    return all(
        values_equal(getattr(first, f.name), getattr(second, f.name)) for f in fields(first)
    )


def merge_state(default: ValueHostState, saved: ValueHostState | Mapping[str, Any]) -> ValueHostState:
    """Restore ``saved`` into the state class of ``default``.

    Fields missing from the snapshot come from ``default``, except the
    values: a value left out of a snapshot was UNDEFINED when it was taken.
    Fields the state class does not have are ignored.
    """
    saved_data = saved.to_dict() if isinstance(saved, ValueHostState) else dict(saved)
    data = default.to_dict()
    data.pop("value", None)
    data.pop("input_value", None)
    data.update(saved_data)
    data["name"] = default.name
    return deserialize(type(default), data)


# -- actions -----------------------------------------------------------------

@dataclass(frozen=True)
class ValueAssigned:
    value: Any
    reset: bool = False
    conversion_error_token_value: str | None = None


@dataclass(frozen=True)
class InputValueAssigned:
    input_value: Any
    reset: bool = False


@dataclass(frozen=True)
class ValuesAssigned:
    value: Any
    input_value: Any
    reset: bool = False
    conversion_error_token_value: str | None = None


@dataclass(frozen=True)
class ItemSaved:
    """Saves a scratch value. UNDEFINED removes the key."""

    key: str
    value: Any


@dataclass(frozen=True)
class ValidationCleared:
    pass


@dataclass(frozen=True)
class MarkedChangedButUnvalidated:
    """Clears validation and marks the value as needing validation again."""

    pass


@dataclass(frozen=True)
class Validated:
    validation_result: ValidationResult
    issues_found: tuple[IssueFound, ...] | None = None
    async_processing: bool = False


@dataclass(frozen=True)
class BusinessLogicErrorAdded:
    error: BusinessLogicError


@dataclass(frozen=True)
class BusinessLogicErrorsCleared:
    pass


# -- reducers ----------------------------------------------------------------

def _next_change_counter(state: ValueHostState, changed: bool, reset: bool) -> int:
    if reset:
        return 0
    if changed:
        return state.change_counter + 1
    return state.change_counter


def value_host_reducer(state: ValueHostState, action: Any) -> ValueHostState:
    """Apply an action to any value host state.

    Raises:
        ValueError: If the action does not apply to this kind of state
    """
    if isinstance(action, ValueAssigned):
        changed = not values_equal(state.value, action.value)
        return replace(
            state,
            value=action.value if changed else state.value,
            change_counter=_next_change_counter(state, changed, action.reset),
        )
    if isinstance(action, ItemSaved):
        items = dict(state.items)
        if action.value is UNDEFINED:
            items.pop(action.key, None)
        else:
            items[action.key] = action.value
        return replace(state, items=items)
    raise ValueError(f"Action {type(action).__name__} does not apply to {type(state).__name__}")


def _conversion_error(value: Any, token_value: str | None) -> str | None:
    if value is UNDEFINED and token_value:
        return token_value
    return None


def _cleared(state: InputValueHostState) -> InputValueHostState:
    return replace(
        state,
        validation_result=ValidationResult.NOT_ATTEMPTED,
        issues_found=None,
        async_processing=False,
        conversion_error_token_value=None,
        business_logic_errors=None,
    )


def input_value_host_reducer(state: InputValueHostState, action: Any) -> InputValueHostState:
    """Apply an action to an input value host state."""
    if isinstance(action, ValueAssigned):
        changed = not values_equal(state.value, action.value)
        new_state = value_host_reducer(state, action)
        return replace(
            new_state,
            validation_result=(
                ValidationResult.VALUE_CHANGED_BUT_UNVALIDATED if changed else state.validation_result
            ),
            conversion_error_token_value=_conversion_error(
                new_state.value, action.conversion_error_token_value
            ),
        )
    if isinstance(action, InputValueAssigned):
        changed = not values_equal(state.input_value, action.input_value)
        if not changed:
            return replace(
                state,
                change_counter=_next_change_counter(state, False, action.reset),
                conversion_error_token_value=None,
            )
        return replace(
            state,
            input_value=action.input_value,
            validation_result=ValidationResult.VALUE_CHANGED_BUT_UNVALIDATED,
            change_counter=_next_change_counter(state, True, action.reset),
            conversion_error_token_value=None,
        )
    if isinstance(action, ValuesAssigned):
        changed = not (
            values_equal(state.value, action.value)
            and values_equal(state.input_value, action.input_value)
        )
        new_state = state
        if changed:
            new_state = replace(
                state,
                value=action.value,
                input_value=action.input_value,
                validation_result=ValidationResult.VALUE_CHANGED_BUT_UNVALIDATED,
                issues_found=None,
            )
        return replace(
            new_state,
            change_counter=_next_change_counter(state, changed, action.reset),
            conversion_error_token_value=_conversion_error(
                new_state.value, action.conversion_error_token_value
            ),
        )
    if isinstance(action, ValidationCleared):
        return _cleared(state)
    if isinstance(action, MarkedChangedButUnvalidated):
        return replace(_cleared(state), validation_result=ValidationResult.VALUE_CHANGED_BUT_UNVALIDATED)
    if isinstance(action, Validated):
        return replace(
            state,
            validation_result=action.validation_result,
            issues_found=action.issues_found or None,
            async_processing=action.async_processing,
        )
    if isinstance(action, BusinessLogicErrorAdded):
        return replace(state, business_logic_errors=(*(state.business_logic_errors or ()), action.error))
    if isinstance(action, BusinessLogicErrorsCleared):
        return replace(state, business_logic_errors=None)
    return value_host_reducer(state, action)  # type: ignore[return-value]
