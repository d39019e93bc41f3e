"""Pytest configuration and fixtures for ruleknobs_engine tests."""

import sys
from pathlib import Path

import pytest

src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from ruleknobs_engine import (  # noqa: E402
    InputValueHostDescriptor,
    ValidationManager,
    ValidationManagerConfig,
    ValidationServices,
    ValueHostDescriptor,
)


@pytest.fixture
def services():
    """Default validation services."""
    return ValidationServices.create_default()


@pytest.fixture
def make_manager(services):
    """Build a manager from descriptors. Extra keyword arguments go to the config."""

    def make(*descriptors, **config):
        return ValidationManager(
            ValidationManagerConfig(services=services, value_host_descriptors=list(descriptors), **config)
        )

    return make


@pytest.fixture
def value_host(make_manager):
    """A plain value host named ``value`` inside a manager that also has ``other``.

    The returned host's ``manager`` is the resolver for condition tests.
    """
    manager = make_manager(
        ValueHostDescriptor(name="value"),
        ValueHostDescriptor(name="other"),
    )
    return manager.get_value_host("value")


@pytest.fixture
def input_host(make_manager):
    """An input value host named ``field`` without validators."""
    manager = make_manager(InputValueHostDescriptor(name="field", label="Field"))
    return manager.get_input_value_host("field")
