"""Tests for the exception hierarchy."""

import pytest

from ruleknobs_common.exceptions import (
    ConfigurationError,
    NotFoundError,
    OperationError,
    RuleknobsError,
    SerializationError,
    ValidationError,
)


class TestRuleknobsError:
    """Test the root exception."""

    def test_message_only(self):
        """Test an error without context."""
        error = RuleknobsError("Value host 'email' is missing")
        assert str(error) == "Value host 'email' is missing"
        assert error.context == {}

    def test_context_and_details_are_the_same_dict(self):
        """Test details is an alias of context."""
        error = RuleknobsError("Range failed", context={"condition_type": "Range"})
        assert error.details is error.context
        assert error.context["condition_type"] == "Range"

    def test_details_wins_over_context(self):
        """Test details is preferred when both are given."""
        error = RuleknobsError("x", context={"source": "context"}, details={"source": "details"})
        assert error.context == {"source": "details"}


class TestHierarchy:
    """Test the subclasses."""

    @pytest.mark.parametrize(
        "exception_class",
        [ValidationError, ConfigurationError, NotFoundError, OperationError, SerializationError],
    )
    def test_caught_as_root(self, exception_class):
        """Test every error can be caught as RuleknobsError."""
        with pytest.raises(RuleknobsError) as exc_info:
            raise exception_class("failed", context={"value_host_name": "age"})
        assert exc_info.value.context == {"value_host_name": "age"}

    def test_siblings_are_distinct(self):
        """Test a NotFoundError is not a ConfigurationError."""
        assert not issubclass(NotFoundError, ConfigurationError)
        assert not issubclass(OperationError, NotFoundError)
