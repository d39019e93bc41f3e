"""Pytest configuration and fixtures for config package tests."""

import sys
from pathlib import Path

import pytest
import yaml

src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture
def write_yaml(tmp_path):
    """Write a dict as a YAML file under tmp_path and return its path."""

    def write(name, data):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return write


@pytest.fixture
def sample_form():
    """Sample form definition."""
    return {
        "value_hosts": [
            {"name": "email", "label": "Email"},
            {"name": "age", "label": "Age", "data_type": "Integer"},
        ],
        "messages": {"required": "{Label} is required"},
    }
