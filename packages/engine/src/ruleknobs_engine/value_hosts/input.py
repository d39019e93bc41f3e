"""Input value hosts: values edited by the user, with validation rules.

An input value host keeps two values. The *input value* is what the editor
holds (usually a string). The *native value* is the result of converting it
to the application's data type, or UNDEFINED when conversion failed. Rules
evaluate the native value, except during edits where string rules evaluate
the input value.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Any, Sequence

from ..descriptors import InputValueHostDescriptor, ValueHostType
from ..enums import ConditionCategory, ConditionEvaluateResult, ValidationResult, ValidationSeverity
from ..types import (
    BusinessLogicError,
    InputValidateResult,
    IssueFound,
    IssueSnapshot,
    SetValueOptions,
    ValidateOptions,
    ValidateResult,
)
from ..undefined import values_equal
from .base import ValueHost, ValueHostsManager
from .state import (
    BusinessLogicErrorAdded,
    BusinessLogicErrorsCleared,
    InputValueAssigned,
    InputValueHostState,
    MarkedChangedButUnvalidated,
    ValidationCleared,
    Validated,
    ValueAssigned,
    ValuesAssigned,
    input_value_host_reducer,
)
from .validator import InputValidator

logger = logging.getLogger(__name__)

BUSINESS_LOGIC_VALUE_HOST_NAME = "*"


def _group_names(group: str | Sequence[str] | None) -> list[str]:
    if group is None:
        return []
    if isinstance(group, str):
        group = [group]
    return [g.lower() for g in group if g]


def groups_match(requested: str | Sequence[str] | None, host_group: str | Sequence[str] | None) -> bool:
    """True when a requested group applies to a host's group.

    An empty group on either side matches everything. Otherwise any shared
    name matches, ignoring case.
    """
    requested_names = _group_names(requested)
    host_names = _group_names(host_group)
    if not requested_names or not host_names:
        return True
    return bool(set(requested_names) & set(host_names))


class _AsyncFold:
    """Results collected by one validate call while async rules finish."""

    def __init__(self, token: int, status: ValidationResult, issues: list[IssueFound], remaining: int):
        self.token = token
        self.status = status
        self.issues = issues
        self.remaining = remaining


class InputValueHost(ValueHost):
    """A value host with an input value and validators."""

    is_input_value_host = True
    reducer = staticmethod(input_value_host_reducer)

    def __init__(
        self,
        manager: ValueHostsManager,
        descriptor: InputValueHostDescriptor,
        state: InputValueHostState,
    ):
        super().__init__(manager, descriptor, state)
        self._validators = [InputValidator(self, v) for v in descriptor.validator_descriptors]
        self._dependency_names: frozenset[str] | None = None
        self._validation_token = 0
        self._async_lock = threading.RLock()

    @property
    def descriptor(self) -> InputValueHostDescriptor:
        return self._descriptor  # type: ignore[return-value]

    @property
    def state(self) -> InputValueHostState:
        return self._state  # type: ignore[return-value]

    @property
    def group(self) -> str | Sequence[str] | None:
        return self.descriptor.group

    @property
    def validators(self) -> list[InputValidator]:
        return list(self._validators)

    # -- values --------------------------------------------------------------

    def get_input_value(self) -> Any:
        return self.state.input_value

    def set_value(self, value: Any, options: SetValueOptions | None = None) -> None:
        options = options or SetValueOptions()
        old_value = self.state.value
        changed = not values_equal(old_value, value)
        self.update_state(
            ValueAssigned(value, options.reset, options.conversion_error_token_value)
        )
        self._after_change(options, changed)
        if changed and not options.skip_value_changed_callback:
            self._manager.on_value_changed(self, old_value)

    def set_input_value(self, value: Any, options: SetValueOptions | None = None) -> None:
        options = options or SetValueOptions()
        old_value = self.state.input_value
        changed = not values_equal(old_value, value)
        self.update_state(InputValueAssigned(value, options.reset))
        self._after_change(options, changed)
        if changed and not options.skip_value_changed_callback:
            self._manager.on_input_value_changed(self, old_value)

    def set_values(self, native_value: Any, input_value: Any, options: SetValueOptions | None = None) -> None:
        """Set the native and input values together, with one validation."""
        options = options or SetValueOptions()
        old_value = self.state.value
        old_input = self.state.input_value
        native_changed = not values_equal(old_value, native_value)
        input_changed = not values_equal(old_input, input_value)
        self.update_state(
            ValuesAssigned(native_value, input_value, options.reset, options.conversion_error_token_value)
        )
        self._after_change(options, native_changed or input_changed)
        if options.skip_value_changed_callback:
            return
        if native_changed:
            self._manager.on_value_changed(self, old_value)
        if input_changed:
            self._manager.on_input_value_changed(self, old_input)

    def _after_change(self, options: SetValueOptions, changed: bool) -> None:
        if options.validate:
            if self.state.validation_result == ValidationResult.VALUE_CHANGED_BUT_UNVALIDATED:
                self.validate(ValidateOptions(during_edit=options.during_edit))
        elif options.reset:
            self.clear_validation()
        if changed:
            self._manager.notify_other_value_hosts_of_value_change(self.name, options.validate)

    def get_conversion_error_message(self) -> str | None:
        return self.state.conversion_error_token_value

    # -- dependencies --------------------------------------------------------

    def gather_value_host_names(self, names: set[str]) -> None:
        """Add the names of every value host the rules of this host read."""
        for validator in self._validators:
            validator.gather_value_host_names(names)

    @property
    def dependency_names(self) -> frozenset[str]:
        """Names of other value hosts this host's rules read."""
        if self._dependency_names is None:
            names: set[str] = set()
            self.gather_value_host_names(names)
            names.discard(self.name)
            self._dependency_names = frozenset(names)
        return self._dependency_names

    def other_value_host_changed_notification(self, name: str, revalidate: bool) -> None:
        """React to a change of another value host's value."""
        if name == self.name:
            return
        current = self.state.validation_result
        if current == ValidationResult.NOT_ATTEMPTED:
            return
        if not revalidate and current == ValidationResult.VALUE_CHANGED_BUT_UNVALIDATED:
            return
        if name not in self.dependency_names:
            return
        if revalidate:
            self.validate()
        else:
            with self._async_lock:
                self._validation_token += 1
                self.update_state(MarkedChangedButUnvalidated())

    # -- validation ----------------------------------------------------------

    @property
    def requires_input(self) -> bool:
        return any(v.category == ConditionCategory.REQUIRED for v in self._validators)

    def validate(self, options: ValidateOptions | None = None) -> ValidateResult:
        """Run the validators and store the outcome in the state.

        Validators run in order. NoMatch results become issues and a severe
        issue stops the remaining validators. The result is Invalid when any
        issue is more than a warning, Valid when a rule matched or only
        warnings were found, and Undetermined otherwise. Async rules leave
        the host in ASYNC_PROCESSING until they finish.
        """
        options = options or ValidateOptions()
        if not groups_match(options.group, self.group):
            logger.debug(f"Validation of {self.name} skipped: group {options.group} does not match")
            return ValidateResult(self.name, self.validation_result, self.state.issues_found or (), skipped=True)

        with self._async_lock:
            self._validation_token += 1
            token = self._validation_token
        status = ValidationResult.UNDETERMINED
        issues: list[IssueFound] = []
        pending: list[Future] = []
        for validator in self._validators:
            result = validator.validate(options)
            if isinstance(result, Future):
                pending.append(result)
                continue
            if result.skipped:
                continue
            if result.issue_found is not None:
                status = _fold_issue(status, result.issue_found)
                issues.append(result.issue_found)
                if result.issue_found.severity == ValidationSeverity.SEVERE:
                    break
            elif status == ValidationResult.UNDETERMINED and result.condition_evaluate_result == ConditionEvaluateResult.MATCH:
                status = ValidationResult.VALID

        stored_status = status
        if pending and status != ValidationResult.INVALID:
            stored_status = ValidationResult.ASYNC_PROCESSING
        self.update_state(Validated(stored_status, tuple(issues) or None, async_processing=bool(pending)))
        logger.debug(f"Validated {self.name}: {stored_status.name}, {len(issues)} issue(s)")

        validate_result = ValidateResult(self.name, stored_status, tuple(issues), pending=tuple(pending))
        if not options.omit_callback:
            self._manager.on_value_host_validated(self, validate_result)

        if pending:
            fold = _AsyncFold(token, status, issues, len(pending))
            for future in pending:
                future.add_done_callback(lambda f, fold=fold: self._async_validator_done(f, fold, options))
        return validate_result

    def _async_validator_done(self, future: Future, fold: _AsyncFold, options: ValidateOptions) -> None:
        with self._async_lock:
            if fold.token != self._validation_token:
                logger.debug(f"Discarding stale async validation result for {self.name}")
                return
            try:
                result: InputValidateResult = future.result()
            except Exception as e:
                logger.error(f"Async validation of {self.name} failed: {e}")
                result = InputValidateResult(ConditionEvaluateResult.UNDETERMINED)
            if result.issue_found is not None:
                fold.status = _fold_issue(fold.status, result.issue_found)
                fold.issues.append(result.issue_found)
            elif fold.status == ValidationResult.UNDETERMINED and result.condition_evaluate_result == ConditionEvaluateResult.MATCH:
                fold.status = ValidationResult.VALID
            fold.remaining -= 1
            if fold.remaining > 0:
                return
            # token check and store under one lock
            self.update_state(Validated(fold.status, tuple(fold.issues) or None))
        if not options.omit_callback:
            self._manager.on_value_host_validated(
                self, ValidateResult(self.name, fold.status, tuple(fold.issues))
            )

    def clear_validation(self) -> bool:
        """Back to NOT_ATTEMPTED, dropping issues and business logic errors."""
        with self._async_lock:
            self._validation_token += 1
            return self.update_state(ValidationCleared())

    @property
    def validation_result(self) -> ValidationResult:
        """The stored result, forced to INVALID by any business logic error above a warning."""
        for error in self.state.business_logic_errors or ():
            if error.severity != ValidationSeverity.WARNING:
                return ValidationResult.INVALID
        return self.state.validation_result

    @property
    def is_valid(self) -> bool:
        return self.validation_result != ValidationResult.INVALID

    def do_not_save_native_value(self) -> bool:
        """True when the native value should not be saved yet."""
        if self.validation_result in (ValidationResult.INVALID, ValidationResult.VALUE_CHANGED_BUT_UNVALIDATED):
            return True
        return self.state.async_processing

    # -- business logic errors -----------------------------------------------

    def set_business_logic_error(self, error: BusinessLogicError) -> None:
        """Add an error. Errors accumulate until cleared."""
        self.update_state(BusinessLogicErrorAdded(error))

    def clear_business_logic_errors(self) -> None:
        self.update_state(BusinessLogicErrorsCleared())

    # -- issues --------------------------------------------------------------

    def get_issue_found(self, condition_type: str) -> IssueFound | None:
        for issue in self.state.issues_found or ():
            if issue.condition_type == condition_type:
                return issue
        return None

    def get_issues_found(self) -> tuple[IssueFound, ...] | None:
        return self.state.issues_found

    def get_issues_for_input(self) -> list[IssueSnapshot]:
        snapshots = [
            IssueSnapshot(self.name, issue.severity, issue.error_message)
            for issue in self.state.issues_found or ()
        ]
        snapshots.extend(self._business_logic_snapshots())
        return snapshots

    def get_issues_for_summary(self, group: str | Sequence[str] | None = None) -> list[IssueSnapshot]:
        snapshots = []
        if groups_match(group, self.group):
            snapshots = [
                IssueSnapshot(self.name, issue.severity, issue.summary_message or issue.error_message)
                for issue in self.state.issues_found or ()
            ]
        snapshots.extend(self._business_logic_snapshots())
        return snapshots

    def _business_logic_snapshots(self) -> list[IssueSnapshot]:
        return [
            IssueSnapshot(self.name, error.severity, error.error_message)
            for error in self.state.business_logic_errors or ()
        ]


def _fold_issue(status: ValidationResult, issue: IssueFound) -> ValidationResult:
    if issue.severity == ValidationSeverity.WARNING:
        return ValidationResult.VALID if status == ValidationResult.UNDETERMINED else status
    return ValidationResult.INVALID


class BusinessLogicInputValueHost(InputValueHost):
    """Holds business logic errors that are not about a specific value host.

    The manager adds it on demand under the name ``*``.
    """

    @staticmethod
    def create_descriptor() -> InputValueHostDescriptor:
        return InputValueHostDescriptor(
            name=BUSINESS_LOGIC_VALUE_HOST_NAME,
            label=BUSINESS_LOGIC_VALUE_HOST_NAME,
            value_host_type=ValueHostType.BUSINESS_LOGIC,
        )
