"""Tests for configuration loading, inheritance and substitution."""

import json

import pytest

from ruleknobs_config import (
    ConfigError,
    ConfigInheritanceError,
    ConfigLoader,
    ConfigNotFoundError,
    EnvironmentVariableError,
    deep_merge,
    substitute_env_vars,
)


class TestDeepMerge:
    """Test deep_merge utility function."""

    def test_simple_merge(self):
        """Test merging simple dictionaries."""
        base = {"a": 1, "b": 2}
        override = {"b": 3, "c": 4}
        result = deep_merge(base, override)

        assert result == {"a": 1, "b": 3, "c": 4}
        # Original dicts should be unchanged
        assert base == {"a": 1, "b": 2}
        assert override == {"b": 3, "c": 4}

    def test_nested_merge(self):
        """Test merging nested dictionaries."""
        base = {"messages": {"required": "Required", "range": "Out of range"}}
        override = {"messages": {"range": "{Label} out of range"}}

        assert deep_merge(base, override) == {
            "messages": {"required": "Required", "range": "{Label} out of range"}
        }

    def test_lists_are_replaced(self):
        """Test that lists are replaced, not concatenated."""
        base = {"value_hosts": [{"name": "a"}]}
        override = {"value_hosts": [{"name": "b"}]}

        assert deep_merge(base, override) == {"value_hosts": [{"name": "b"}]}


class TestSubstituteEnvVars:
    """Test ${VAR} substitution."""

    def test_substitutes_set_variable(self, monkeypatch):
        """Test that a set variable is substituted."""
        monkeypatch.setenv("FORM_LABEL", "Email address")
        assert substitute_env_vars({"label": "${FORM_LABEL}"}) == {"label": "Email address"}

    def test_default_used_when_unset(self, monkeypatch):
        """Test the ${VAR:default} form."""
        monkeypatch.delenv("FORM_LABEL", raising=False)
        assert substitute_env_vars(["${FORM_LABEL:Email}"]) == ["Email"]

    def test_missing_variable_raises(self, monkeypatch):
        """Test that a missing variable without default raises."""
        monkeypatch.delenv("FORM_LABEL", raising=False)
        with pytest.raises(EnvironmentVariableError) as exc_info:
            substitute_env_vars("${FORM_LABEL}")
        assert exc_info.value.context["variable"] == "FORM_LABEL"

    def test_non_strings_untouched(self):
        """Test that numbers and booleans pass through."""
        assert substitute_env_vars({"minimum": 1, "trim": True}) == {"minimum": 1, "trim": True}


class TestConfigLoader:
    """Test ConfigLoader."""

    def test_load_yaml_by_name(self, tmp_path, write_yaml, sample_form):
        """Test loading a YAML file by name without extension."""
        write_yaml("form.yaml", sample_form)
        loader = ConfigLoader(tmp_path)

        assert loader.load("form") == sample_form

    def test_load_json(self, tmp_path, sample_form):
        """Test loading a JSON file."""
        path = tmp_path / "form.json"
        path.write_text(json.dumps(sample_form), encoding="utf-8")

        assert ConfigLoader().load_from_file(path) == sample_form

    def test_extends(self, tmp_path, write_yaml, sample_form):
        """Test that a child file inherits from its parent."""
        write_yaml("base.yaml", sample_form)
        child = write_yaml("signup.yaml", {
            "extends": "base",
            "messages": {"required": "Please enter {Label}"},
        })

        config = ConfigLoader().load_from_file(child)

        assert config["value_hosts"] == sample_form["value_hosts"]
        assert config["messages"]["required"] == "Please enter {Label}"
        assert "extends" not in config

    def test_cache(self, tmp_path, write_yaml):
        """Test files are read once until the cache is cleared."""
        write_yaml("form.yaml", {"title": "Before"})
        loader = ConfigLoader(tmp_path)
        assert loader.load("form")["title"] == "Before"

        write_yaml("form.yaml", {"title": "After"})
        assert loader.load("form")["title"] == "Before"

        loader.clear_cache()
        assert loader.load("form")["title"] == "After"

    def test_circular_extends(self, write_yaml):
        """Test that circular inheritance is detected."""
        write_yaml("a.yaml", {"extends": "b"})
        path = write_yaml("b.yaml", {"extends": "a"})

        with pytest.raises(ConfigInheritanceError):
            ConfigLoader().load_from_file(path)

    def test_missing_file(self, tmp_path):
        """Test loading a file that does not exist."""
        with pytest.raises(ConfigNotFoundError):
            ConfigLoader(tmp_path).load("nothing")

    def test_missing_parent(self, write_yaml):
        """Test extending a file that does not exist."""
        path = write_yaml("child.yaml", {"extends": "missing"})

        with pytest.raises(ConfigNotFoundError):
            ConfigLoader().load_from_file(path)

    def test_invalid_yaml(self, tmp_path):
        """Test that parse errors become ConfigError."""
        path = tmp_path / "bad.yaml"
        path.write_text("value_hosts: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigError):
            ConfigLoader().load_from_file(path)

    def test_root_must_be_mapping(self, tmp_path):
        """Test that a list at the root is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader().load_from_file(path)
        assert exc_info.value.context["type"] == "list"

    def test_empty_file(self, tmp_path):
        """Test that an empty file loads as an empty dict."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        assert ConfigLoader().load_from_file(path) == {}

    def test_env_substitution_on_load(self, write_yaml, monkeypatch):
        """Test environment variables are substituted when loading."""
        monkeypatch.setenv("AGE_LABEL", "Your age")
        path = write_yaml("form.yaml", {"value_hosts": [{"name": "age", "label": "${AGE_LABEL}"}]})

        config = ConfigLoader().load_from_file(path)
        assert config["value_hosts"][0]["label"] == "Your age"

    def test_substitution_can_be_disabled(self, write_yaml):
        """Test substitute_vars=False leaves references alone."""
        path = write_yaml("form.yaml", {"label": "${UNSET_FOR_TEST}"})

        config = ConfigLoader().load_from_file(path, substitute_vars=False)
        assert config["label"] == "${UNSET_FOR_TEST}"

    def test_result_is_a_copy(self, write_yaml, sample_form):
        """Test that changing a loaded config does not change the cache."""
        path = write_yaml("form.yaml", sample_form)
        loader = ConfigLoader()

        first = loader.load_from_file(path)
        first["value_hosts"].clear()

        assert loader.load_from_file(path)["value_hosts"] == sample_form["value_hosts"]
