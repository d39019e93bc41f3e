"""Tests for loading form definitions from files."""

import json

import pytest
import yaml

from ruleknobs_config import ConfigError, ConfigLoader, ConfigNotFoundError
from ruleknobs_engine import (
    InputValueHostDescriptor,
    SetValueOptions,
    ValidationManager,
    ValidationSeverity,
    ValueHostDescriptor,
    load_validation_manager_config,
)

FORM = {
    "value_hosts": [
        {"name": "country", "label": "Country"},
        {
            "name": "age",
            "label": "${AGE_LABEL:Age}",
            "data_type": "Integer",
            "group": "profile",
            "validator_descriptors": [
                {
                    "condition_config": {"condition_type": "Range", "minimum": 18, "maximum": 120},
                    "error_message": "{Label} must be between {Minimum} and {Maximum}",
                    "severity": "Warning",
                }
            ],
        },
        {"name": "notes", "value_host_type": "Input"},
    ]
}


@pytest.fixture
def write_file(tmp_path):
    def write(name, data):
        path = tmp_path / name
        if name.endswith(".json"):
            path.write_text(json.dumps(data), encoding="utf-8")
        else:
            path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return write


class TestLoadValidationManagerConfig:
    """Test load_validation_manager_config."""

    def test_descriptors_from_yaml(self, write_file, monkeypatch):
        """Test descriptor classes and fields read from YAML."""
        monkeypatch.delenv("AGE_LABEL", raising=False)
        config = load_validation_manager_config(write_file("form.yaml", FORM))
        country, age, notes = config.value_host_descriptors

        assert type(country) is ValueHostDescriptor
        assert isinstance(age, InputValueHostDescriptor)
        assert isinstance(notes, InputValueHostDescriptor)
        assert age.label == "Age"
        assert age.group == "profile"
        assert age.validator_descriptors[0].severity == ValidationSeverity.WARNING
        assert notes.validator_descriptors == ()

    def test_environment_substitution(self, write_file, monkeypatch):
        """Test ${VAR:default} references are resolved."""
        monkeypatch.setenv("AGE_LABEL", "Your age")
        config = load_validation_manager_config(write_file("form.yaml", FORM))
        assert config.value_host_descriptors[1].label == "Your age"

    def test_manager_from_loaded_config(self, write_file, monkeypatch):
        """Test a working manager from a form definition."""
        monkeypatch.delenv("AGE_LABEL", raising=False)
        manager = ValidationManager(load_validation_manager_config(write_file("form.json", FORM)))
        age = manager.get_input_value_host("age")
        age.set_values(12, "12", SetValueOptions(validate=True))

        issues = manager.get_issues_for_input("age")
        assert issues[0].error_message == "Age must be between 18 and 120"
        assert issues[0].severity == ValidationSeverity.WARNING
        assert manager.is_valid

    def test_extends(self, write_file):
        """Test a form inheriting its value hosts from a base file."""
        write_file("base.yaml", {"value_hosts": [{"name": "email", "label": "Email"}]})
        path = write_file("signup.yaml", {"extends": "base", "title": "Sign up"})

        config = load_validation_manager_config(path)
        assert [d.name for d in config.value_host_descriptors] == ["email"]

    def test_callbacks_and_services(self, write_file, services):
        """Test extra arguments reach the config."""
        callback = lambda manager, results: None  # noqa: E731
        config = load_validation_manager_config(
            write_file("form.yaml", FORM), services=services, on_validated=callback
        )
        assert config.services is services
        assert config.on_validated is callback

    def test_shared_loader(self, write_file, tmp_path):
        """Test a caller supplied loader is used."""
        path = write_file("form.yaml", FORM)
        loader = ConfigLoader(tmp_path)
        first = load_validation_manager_config(path, loader=loader)
        second = load_validation_manager_config(path, loader=loader)
        assert first.value_host_descriptors == second.value_host_descriptors

    def test_missing_value_hosts(self, write_file):
        """Test a file without a value_hosts list."""
        with pytest.raises(ConfigError):
            load_validation_manager_config(write_file("form.yaml", {"value_hosts": {"name": "email"}}))

    def test_missing_file(self, tmp_path):
        """Test a path that does not exist."""
        with pytest.raises(ConfigNotFoundError):
            load_validation_manager_config(tmp_path / "nope.yaml")
