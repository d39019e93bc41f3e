"""Tests for conditions built from child conditions."""

from concurrent.futures import Future

import pytest

from ruleknobs_engine import AsyncConditionError, ConditionConfigError, ConditionFactory
from ruleknobs_engine import ConditionEvaluateResult as R
from ruleknobs_engine.conditions import (
    AllMatchCondition,
    AnyMatchCondition,
    Condition,
    CountMatchesCondition,
    EqualToCondition,
    NotCondition,
    RequireTextCondition,
    WhenCondition,
)
from ruleknobs_engine.conditions.compound import ChildResultsCondition

M, N, U = R.MATCH, R.NO_MATCH, R.UNDETERMINED


class FixedCondition(Condition):
    """Returns the result given at construction and counts its evaluations."""

    default_condition_type = "Fixed"

    def __init__(self, config=None, result=R.MATCH):
        super().__init__(config)
        self.result = R(self.config.get("result", result))
        self.calls = 0

    def evaluate(self, value_host, resolver):
        self.calls += 1
        return self.result


class PendingCondition(Condition):
    """Returns an unfinished Future."""

    default_condition_type = "Pending"

    def evaluate(self, value_host, resolver):
        return Future()


def fixed(*results):
    return [FixedCondition(result=r) for r in results]


@pytest.fixture
def factory():
    factory = ConditionFactory()
    factory.register("Fixed", FixedCondition)
    return factory


class TestAllMatchCondition:
    """Test AllMatchCondition."""

    @pytest.mark.parametrize(
        "results,expected",
        [
            ((M, M, M), M),
            ((M, N, M), N),
            ((M, U, M), U),
            ((N, U), N),
            ((U, N), U),
        ],
    )
    def test_results(self, value_host, results, expected):
        """Test every child must match."""
        condition = AllMatchCondition({}, fixed(*results))
        assert condition.evaluate(value_host, value_host.manager) == expected

    def test_stops_at_first_failure(self, value_host):
        """Test children after a NoMatch are not evaluated."""
        children = fixed(M, N, M)
        AllMatchCondition({}, children).evaluate(value_host, value_host.manager)
        assert [c.calls for c in children] == [1, 1, 0]

    def test_no_children_is_undetermined(self, value_host):
        """Test an empty list."""
        assert AllMatchCondition({}).evaluate(value_host, value_host.manager) == U

    def test_treat_undetermined_as(self, value_host):
        """Test overriding Undetermined children."""
        condition = AllMatchCondition({"treat_undetermined_as": "Match"}, fixed(M, U, M))
        assert condition.evaluate(value_host, value_host.manager) == M

        condition = AllMatchCondition({"treat_undetermined_as": "NoMatch"}, fixed(M, U, M))
        assert condition.evaluate(value_host, value_host.manager) == N

    def test_children_use_parent_host(self, value_host):
        """Test children without a host name evaluate the parent's host."""
        condition = AllMatchCondition(
            {}, [RequireTextCondition(), EqualToCondition({"second_value": "abc"})]
        )
        value_host.set_value("abc")
        assert condition.evaluate(value_host, value_host.manager) == M
        value_host.set_value("abd")
        assert condition.evaluate(value_host, value_host.manager) == N

    def test_own_value_host_name(self, value_host):
        """Test a compound with its own host passes it to the children."""
        value_host.manager.get_value_host("other").set_value("x")
        condition = AllMatchCondition({"value_host_name": "other"}, [RequireTextCondition()])
        assert condition.evaluate(None, value_host.manager) == M


class TestAnyMatchCondition:
    """Test AnyMatchCondition."""

    @pytest.mark.parametrize(
        "results,expected",
        [
            ((N, M), M),
            ((N, N), N),
            ((N, U, M), U),
            ((M, U), U),
        ],
    )
    def test_results(self, value_host, results, expected):
        """Test one match is enough unless a child is Undetermined."""
        condition = AnyMatchCondition({}, fixed(*results))
        assert condition.evaluate(value_host, value_host.manager) == expected

    def test_treat_undetermined_as(self, value_host):
        """Test an Undetermined child counted as NoMatch."""
        condition = AnyMatchCondition({"treat_undetermined_as": "NoMatch"}, fixed(U, M))
        assert condition.evaluate(value_host, value_host.manager) == M

    def test_no_children_is_undetermined(self, value_host):
        """Test an empty list."""
        assert AnyMatchCondition({}).evaluate(value_host, value_host.manager) == U


class TestCountMatchesCondition:
    """Test CountMatchesCondition."""

    @pytest.mark.parametrize(
        "config,results,expected",
        [
            ({"minimum": 2}, (M, N, M, M), M),
            ({"minimum": 2}, (M, N, N, N), N),
            ({"minimum": 1, "maximum": 2}, (M, M, M), N),
            ({"minimum": 0, "maximum": 0}, (N, N), M),
            ({}, (N, M), M),
            ({}, (N, N), N),
            ({"minimum": 1}, (M, U), U),
        ],
    )
    def test_results(self, value_host, config, results, expected):
        """Test the number of matches against the bounds."""
        condition = CountMatchesCondition(config, fixed(*results))
        assert condition.evaluate(value_host, value_host.manager) == expected

    def test_defaults(self):
        """Test minimum 1 and no maximum."""
        condition = CountMatchesCondition({})
        assert condition.minimum == 1
        assert condition.maximum is None


class TestNotCondition:
    """Test NotCondition."""

    @pytest.mark.parametrize("child,expected", [(M, N), (N, M), (U, U)])
    def test_inverts(self, value_host, child, expected):
        """Test Match and NoMatch swap and Undetermined stays."""
        condition = NotCondition({}, FixedCondition(result=child))
        assert condition.evaluate(value_host, value_host.manager) == expected

    def test_requires_child(self, factory):
        """Test the child config is required."""
        with pytest.raises(ConditionConfigError):
            factory.create(condition_type="Not")

    def test_from_config(self, factory, value_host):
        """Test building the child through the factory."""
        condition = factory.create(condition_type="Not", child_condition_config={"condition_type": "RequireText"})
        value_host.set_value("")
        assert condition.evaluate(value_host, value_host.manager) == M


class TestWhenCondition:
    """Test WhenCondition."""

    def test_enabler_matches(self, value_host):
        """Test the child result is returned when enabled."""
        condition = WhenCondition({}, FixedCondition(result=M), FixedCondition(result=N))
        assert condition.evaluate(value_host, value_host.manager) == N

    def test_enabler_does_not_match(self, value_host):
        """Test the child is not evaluated when disabled."""
        child = FixedCondition(result=N)
        for enabler_result in (N, U):
            condition = WhenCondition({}, FixedCondition(result=enabler_result), child)
            assert condition.evaluate(value_host, value_host.manager) == U
        assert child.calls == 0

    def test_reports_child_condition_type(self):
        """Test issues are named after the child rule."""
        condition = WhenCondition({}, FixedCondition(), RequireTextCondition())
        assert condition.condition_type == "RequireText"
        assert WhenCondition({"condition_type": "Custom"}, FixedCondition(), RequireTextCondition()).condition_type == "Custom"

    def test_from_config_with_enabler_host(self, factory, value_host):
        """Test an enabler that reads another host."""
        condition = factory.create(
            condition_type="When",
            enabler_config={"condition_type": "RequireText", "value_host_name": "other"},
            child_condition_config={"condition_type": "RequireText"},
        )
        value_host.set_value("")
        assert condition.evaluate(value_host, value_host.manager) == U

        value_host.manager.get_value_host("other").set_value("yes")
        assert condition.evaluate(value_host, value_host.manager) == N

        names = set()
        condition.gather_value_host_names(names)
        assert names == {"other"}

    @pytest.mark.parametrize(
        "config",
        [
            {"condition_type": "When", "child_condition_config": {"condition_type": "RequireText"}},
            {"condition_type": "When", "enabler_config": {"condition_type": "RequireText"}},
        ],
    )
    def test_requires_enabler_and_child(self, factory, config):
        """Test both parts are required."""
        with pytest.raises(ConditionConfigError):
            factory.create_condition(config)


class TestCompoundTrees:
    """Test nested trees built through the factory."""

    def test_fold_is_abstract(self):
        """Test the shared base needs a fold to be usable."""
        with pytest.raises(TypeError):
            ChildResultsCondition({}, fixed(M))

    def test_nested_configs(self, factory, value_host):
        """Test a tree from a single nested config."""
        condition = factory.create(
            condition_type="AllMatch",
            condition_configs=[
                {"condition_type": "RequireText"},
                {
                    "condition_type": "AnyMatch",
                    "condition_configs": [
                        {"condition_type": "StringLength", "maximum": 3},
                        {"condition_type": "RegExp", "expression_as_string": "^x"},
                    ],
                },
            ],
        )
        assert isinstance(condition, AllMatchCondition)
        assert isinstance(condition.conditions[1], AnyMatchCondition)

        value_host.set_value("abc")
        assert condition.evaluate(value_host, value_host.manager) == M
        value_host.set_value("xylophone")
        assert condition.evaluate(value_host, value_host.manager) == M
        value_host.set_value("abcd")
        assert condition.evaluate(value_host, value_host.manager) == N

    def test_gather_recurses(self, factory):
        """Test names are gathered from every level."""
        condition = factory.create(
            condition_type="AnyMatch",
            condition_configs=[
                {"condition_type": "EqualTo", "second_value_host_name": "password"},
                {
                    "condition_type": "Not",
                    "child_condition_config": {"condition_type": "RequireText", "value_host_name": "email"},
                },
            ],
        )
        names = set()
        condition.gather_value_host_names(names)
        assert names == {"password", "email"}

    def test_registered_types_nest(self, factory, value_host):
        """Test custom types can appear anywhere in a tree."""
        condition = factory.create(
            condition_type="Or",
            condition_configs=[{"condition_type": "Fixed", "result": 0}, {"condition_type": "Fixed", "result": 1}],
        )
        assert condition.evaluate(value_host, value_host.manager) == M


class TestPendingChildren:
    """Test async children are rejected inside compound conditions."""

    @pytest.mark.parametrize("condition_class", [AllMatchCondition, AnyMatchCondition, CountMatchesCondition])
    def test_child_results(self, value_host, condition_class):
        """Test a Future from a child raises AsyncConditionError."""
        condition = condition_class({}, [FixedCondition(), PendingCondition()])
        with pytest.raises(AsyncConditionError):
            condition.evaluate(value_host, value_host.manager)

    def test_not(self, value_host):
        """Test a Future under Not raises AsyncConditionError."""
        with pytest.raises(AsyncConditionError):
            NotCondition({}, PendingCondition()).evaluate(value_host, value_host.manager)

    def test_is_config_error(self):
        """Test AsyncConditionError is a configuration fault."""
        assert issubclass(AsyncConditionError, ConditionConfigError)
