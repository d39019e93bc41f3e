"""Tests for ConditionFactory and ValueHostFactory."""

import pytest

from ruleknobs_common import ConfigurationError, NotFoundError, OperationError
from ruleknobs_config import FactoryBase
from ruleknobs_engine import (
    ConditionConfigError,
    ConditionFactory,
    ConditionType,
    EngineError,
    InputValueHost,
    InputValueHostDescriptor,
    InputValueHostState,
    UnknownConditionTypeError,
    ValueHost,
    ValueHostDescriptor,
    ValueHostFactory,
    ValueHostState,
)
from ruleknobs_engine import ConditionEvaluateResult as R
from ruleknobs_engine.conditions import (
    AllMatchCondition,
    AnyMatchCondition,
    Condition,
    EqualToCondition,
    RangeCondition,
    RequireTextCondition,
)


class EvenCondition(Condition):
    default_condition_type = "Even"

    def evaluate(self, value_host, resolver):
        value = value_host.get_value()
        if not isinstance(value, int):
            return R.UNDETERMINED
        return R.MATCH if value % 2 == 0 else R.NO_MATCH


class TestConditionFactory:
    """Test ConditionFactory."""

    def test_is_factory_base(self):
        """Test the factory follows the FactoryBase contract."""
        assert isinstance(ConditionFactory(), FactoryBase)

    def test_create_from_keywords(self):
        """Test create(**config)."""
        condition = ConditionFactory().create(condition_type="Range", minimum=1, maximum=5)
        assert isinstance(condition, RangeCondition)
        assert condition.minimum == 1

    def test_create_from_mapping(self):
        """Test create_condition(config)."""
        condition = ConditionFactory().create_condition({"condition_type": ConditionType.REQUIRE_TEXT})
        assert isinstance(condition, RequireTextCondition)

    @pytest.mark.parametrize(
        "alias,condition_class",
        [
            ("All", AllMatchCondition),
            ("And", AllMatchCondition),
            ("Any", AnyMatchCondition),
            ("Or", AnyMatchCondition),
            ("EqualToValue", EqualToCondition),
        ],
    )
    def test_aliases(self, alias, condition_class):
        """Test alternative type names."""
        config = {"condition_type": alias}
        if condition_class is EqualToCondition:
            config["second_value"] = 1
        assert isinstance(ConditionFactory().create_condition(config), condition_class)

    def test_alias_keeps_configured_type_name(self):
        """Test the configured name is reported as the condition type."""
        condition = ConditionFactory().create(condition_type="Or")
        assert condition.condition_type == "Or"

    def test_missing_condition_type(self):
        """Test a config without condition_type."""
        with pytest.raises(ConditionConfigError) as exc_info:
            ConditionFactory().create_condition({"minimum": 1})
        assert exc_info.value.property_name == "condition_type"

    def test_unknown_condition_type(self):
        """Test an unregistered type lists the available ones."""
        with pytest.raises(UnknownConditionTypeError) as exc_info:
            ConditionFactory().create(condition_type="Postcode")

        assert exc_info.value.condition_type == "Postcode"
        assert "RequireText" in exc_info.value.context["available"]
        assert isinstance(exc_info.value, NotFoundError)
        assert isinstance(exc_info.value, EngineError)

    def test_register_custom_condition(self, value_host):
        """Test a registered condition is created and evaluated."""
        factory = ConditionFactory()
        factory.register("Even", EvenCondition)
        condition = factory.create(condition_type="Even")

        value_host.set_value(4)
        assert condition.evaluate(value_host, value_host.manager) == R.MATCH
        assert factory.is_registered("Even")
        assert "Even" in factory.condition_types()

    def test_register_existing_type(self):
        """Test replacing a type needs allow_overwrite."""
        factory = ConditionFactory()
        with pytest.raises(OperationError):
            factory.register("RequireText", EvenCondition)

        factory.register("RequireText", EvenCondition, allow_overwrite=True)
        assert isinstance(factory.create(condition_type="RequireText"), EvenCondition)

    def test_without_defaults(self):
        """Test an empty factory."""
        factory = ConditionFactory(register_defaults=False)
        assert factory.condition_types() == []
        with pytest.raises(UnknownConditionTypeError):
            factory.create(condition_type="RequireText")

    def test_every_built_in_type_is_registered(self):
        """Test the ConditionType names are all available."""
        factory = ConditionFactory()
        names = [v for k, v in vars(ConditionType).items() if k.isupper()]
        assert names
        assert all(factory.is_registered(name) for name in names)


class TestValueHostFactory:
    """Test ValueHostFactory."""

    def test_creates_by_value_host_type(self, make_manager):
        """Test the descriptor type selects the class."""
        manager = make_manager()
        factory = ValueHostFactory()

        plain = factory.create_value_host(manager, ValueHostDescriptor(name="a"))
        edited = factory.create(manager=manager, descriptor=InputValueHostDescriptor(name="b"))

        assert type(plain) is ValueHost
        assert isinstance(plain.state, ValueHostState)
        assert isinstance(edited, InputValueHost)
        assert isinstance(edited.state, InputValueHostState)

    def test_type_lookup_ignores_case(self, make_manager):
        """Test value_host_type is case insensitive."""
        host = ValueHostFactory().create_value_host(
            make_manager(), InputValueHostDescriptor(name="a", value_host_type="input")
        )
        assert isinstance(host, InputValueHost)

    @pytest.mark.parametrize("value_host_type", ["Input", "businesslogic"])
    def test_input_type_needs_input_descriptor(self, make_manager, value_host_type):
        """Test an input host type paired with a plain descriptor."""
        with pytest.raises(ConfigurationError) as exc_info:
            ValueHostFactory().create_value_host(
                make_manager(), ValueHostDescriptor(name="a", value_host_type=value_host_type)
            )
        assert exc_info.value.context == {"value_host_name": "a", "value_host_type": value_host_type}

    def test_default_state_uses_initial_value(self):
        """Test the initial value lands in the default state."""
        state = ValueHostFactory().create_default_state(ValueHostDescriptor(name="a", initial_value=3))
        assert state == ValueHostState(name="a", value=3)

    def test_unknown_type(self, make_manager):
        """Test an unregistered value host type."""
        with pytest.raises(NotFoundError):
            ValueHostFactory().create_value_host(
                make_manager(), ValueHostDescriptor(name="a", value_host_type="Calculated")
            )

    def test_register_custom_type(self, make_manager):
        """Test adding a value host type."""

        class CalculatedValueHost(ValueHost):
            pass

        factory = ValueHostFactory()
        factory.register("Calculated", CalculatedValueHost, ValueHostState)
        host = factory.create_value_host(make_manager(), ValueHostDescriptor(name="a", value_host_type="Calculated"))
        assert isinstance(host, CalculatedValueHost)
