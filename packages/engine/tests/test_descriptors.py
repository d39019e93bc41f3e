"""Tests for descriptors, records and the dependency index."""

import pytest

from ruleknobs_common import ValidationError
from ruleknobs_engine import (
    UNDEFINED,
    BusinessLogicError,
    InputValidatorDescriptor,
    InputValueHostDescriptor,
    IssueFound,
    ValidationSeverity,
    ValueHostDescriptor,
    ValueHostType,
    descriptor_from_dict,
)
from ruleknobs_engine.dependency import DependencyIndex
from ruleknobs_engine.descriptors import coerce_severity


class TestDescriptors:
    """Test building descriptors from plain data."""

    def test_plain_descriptor(self):
        """Test a host without validators."""
        descriptor = descriptor_from_dict({"name": "total", "data_type": "Number", "initial_value": 0})
        assert type(descriptor) is ValueHostDescriptor
        assert descriptor.value_host_type == ValueHostType.NON_INPUT
        assert descriptor.initial_value == 0

    def test_input_descriptor(self):
        """Test validators make an input host."""
        descriptor = descriptor_from_dict(
            {
                "name": "email",
                "label": "Email",
                "label_l10n": "email",
                "group": ["signup", "profile"],
                "validator_descriptors": [
                    {
                        "condition_config": {"condition_type": "RequireText"},
                        "enabler_config": {"condition_type": "NotNull", "value_host_name": "country"},
                        "severity": 1,
                        "error_message": "{Label} is required",
                        "summary_message_l10n": "email_required",
                    }
                ],
            }
        )
        assert isinstance(descriptor, InputValueHostDescriptor)
        assert descriptor.value_host_type == ValueHostType.INPUT
        assert descriptor.initial_value is UNDEFINED
        assert descriptor.group == ["signup", "profile"]

        validator = descriptor.validator_descriptors[0]
        assert validator.condition_config == {"condition_type": "RequireText"}
        assert validator.enabler_config["value_host_name"] == "country"
        assert validator.severity == ValidationSeverity.ERROR
        assert validator.summary_message_l10n == "email_required"
        assert validator.enabled is True

    @pytest.mark.parametrize("value_host_type", ["NonInput", "noninput", "NONINPUT"])
    def test_non_input_type_ignores_case(self, value_host_type):
        """Test a plain host type in any case gives a plain descriptor."""
        descriptor = descriptor_from_dict(
            {"name": "total", "value_host_type": value_host_type, "validator_descriptors": []}
        )
        assert type(descriptor) is ValueHostDescriptor

    def test_explicit_business_logic_type(self):
        """Test an explicit value host type is kept."""
        descriptor = descriptor_from_dict({"name": "*", "value_host_type": ValueHostType.BUSINESS_LOGIC})
        assert isinstance(descriptor, InputValueHostDescriptor)
        assert descriptor.value_host_type == ValueHostType.BUSINESS_LOGIC

    @pytest.mark.parametrize("data", [{"label": "Email"}, {"name": ""}, {"name": 3}])
    def test_name_is_required(self, data):
        """Test a config without a usable name."""
        with pytest.raises(ValidationError) as exc_info:
            descriptor_from_dict(data)
        assert exc_info.value.context["config"] == data

    def test_descriptors_are_frozen(self):
        """Test descriptors cannot be changed."""
        descriptor = ValueHostDescriptor(name="a")
        with pytest.raises(AttributeError):
            descriptor.name = "b"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, None),
            ("Severe", ValidationSeverity.SEVERE),
            ("warning", ValidationSeverity.WARNING),
            (1, ValidationSeverity.ERROR),
            (ValidationSeverity.ERROR, ValidationSeverity.ERROR),
        ],
    )
    def test_coerce_severity(self, raw, expected):
        """Test severities from config values."""
        assert coerce_severity(raw) == expected

    def test_coerce_severity_rejects_unknown_names(self):
        """Test an unknown severity name."""
        with pytest.raises(ValueError):
            coerce_severity("Fatal")


class TestRecords:
    """Test the records stored in value host state."""

    def test_issue_found_round_trip(self):
        """Test IssueFound as plain data."""
        issue = IssueFound("email", "RequireText", ValidationSeverity.SEVERE, "Required", "Email required")
        data = issue.to_dict()
        assert data["severity"] == 2
        assert IssueFound.from_dict(data) == issue

    def test_business_logic_error_defaults(self):
        """Test a form-level error."""
        error = BusinessLogicError.from_dict({"error_message": "Server busy"})
        assert error.associated_value_host_name is None
        assert error.severity == ValidationSeverity.ERROR


class TestDependencyIndex:
    """Test DependencyIndex."""

    def test_dependents(self, make_manager):
        """Test which hosts are told about a change."""
        manager = make_manager(
            ValueHostDescriptor(name="start"),
            InputValueHostDescriptor(
                name="end",
                validator_descriptors=[
                    InputValidatorDescriptor(
                        condition_config={"condition_type": "GreaterThan", "second_value_host_name": "start"}
                    )
                ],
            ),
            InputValueHostDescriptor(
                name="note",
                validator_descriptors=[
                    InputValidatorDescriptor(
                        condition_config={"condition_type": "RequireText", "value_host_name": "note"}
                    )
                ],
            ),
        )
        index = DependencyIndex()
        index.rebuild(manager.input_value_hosts())

        assert index.dependents_of("start") == ["end"]
        assert "start" in index
        # a host never depends on itself
        assert "note" not in index
        assert index.dependents_of("end") == []
