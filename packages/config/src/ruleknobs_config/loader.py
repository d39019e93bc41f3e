"""Loading of YAML/JSON configuration files.

Form definitions tend to share a lot: a base file declares common value
hosts and messages, and per-form files override or extend it. The loader
supports this through an ``extends`` key naming the parent file (relative to
the child's directory, extension optional). Child values win over parent
values through a deep merge. String values may reference environment
variables as ``${VAR}`` or ``${VAR:default}``.

Example:
    ```yaml
    # base.yaml
    value_hosts:
      - name: email
        label: Email

    # signup.yaml
    extends: base
    messages:
      required: "{Label} is required"
    ```

    ```python
    loader = ConfigLoader("./forms")
    config = loader.load("signup")
    ```
"""

import copy
import json
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from ruleknobs_config.exceptions import (
    ConfigError,
    ConfigInheritanceError,
    ConfigNotFoundError,
    EnvironmentVariableError,
)

logger = logging.getLogger(__name__)

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")
_EXTENSIONS = (".yaml", ".yml", ".json")


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, ``override`` taking precedence.

    Nested dictionaries are merged recursively; lists and scalars are
    replaced wholesale.

    Example:
        >>> deep_merge({"a": 1, "n": {"x": 1, "y": 2}}, {"n": {"y": 3}})
        {'a': 1, 'n': {'x': 1, 'y': 3}}
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def substitute_env_vars(data: Any) -> Any:
    """Recursively substitute ``${VAR}`` and ``${VAR:default}`` references.

    Raises:
        EnvironmentVariableError: If a variable without default is not set
    """
    if isinstance(data, dict):
        return {k: substitute_env_vars(v) for k, v in data.items()}
    if isinstance(data, list):
        return [substitute_env_vars(item) for item in data]
    if isinstance(data, str):
        return _ENV_PATTERN.sub(_replace_env_var, data)
    return data


def _replace_env_var(match: re.Match[str]) -> str:
    var_name, default_value = match.group(1), match.group(2)
    env_value = os.environ.get(var_name)
    if env_value is not None:
        return env_value
    if default_value is not None:
        return default_value
    raise EnvironmentVariableError(
        f"Required environment variable not set: {var_name}",
        context={"variable": var_name},
    )


class ConfigLoader:
    """Configuration loader with ``extends`` inheritance and caching.

    Attributes:
        config_dir: Directory used to resolve configuration names
    """

    def __init__(self, config_dir: str | Path | None = None):
        self.config_dir = Path(config_dir) if config_dir else Path(".")
        self._cache: dict[Path, dict[str, Any]] = {}

    def load(self, name: str, substitute_vars: bool = True) -> dict[str, Any]:
        """Load a configuration by name (without extension) from ``config_dir``."""
        return self.load_from_file(self._find(self.config_dir, name), substitute_vars)

    def load_from_file(self, filepath: str | Path, substitute_vars: bool = True) -> dict[str, Any]:
        """Load a configuration from a specific file path.

        Inheritance is resolved relative to the file's directory.

        Raises:
            ConfigNotFoundError: If the file (or a parent) does not exist
            ConfigInheritanceError: If the ``extends`` chain is circular
            ConfigError: If the file cannot be parsed
        """
        resolved = copy.deepcopy(self._resolve(Path(filepath), loading=[]))
        if substitute_vars:
            resolved = substitute_env_vars(resolved)
        logger.info(f"Loaded configuration: {filepath}")
        return resolved

    def clear_cache(self) -> None:
        self._cache.clear()

    def _resolve(self, path: Path, loading: list[Path]) -> dict[str, Any]:
        path = path.resolve()
        if path in loading:
            chain = " -> ".join(p.name for p in loading + [path])
            raise ConfigInheritanceError(
                f"Circular inheritance detected: {chain}",
                context={"file": str(path)},
            )
        if path in self._cache:
            logger.debug(f"Using cached config: {path}")
            return self._cache[path]

        raw = self._read(path)
        parent_name = raw.pop("extends", None)
        if parent_name:
            logger.debug(f"Config '{path.name}' extends '{parent_name}'")
            parent = self._resolve(self._find(path.parent, parent_name), loading + [path])
            raw = deep_merge(parent, raw)
        self._cache[path] = raw
        return raw

    @staticmethod
    def _find(directory: Path, name: str) -> Path:
        candidate = directory / name
        if candidate.suffix in _EXTENSIONS and candidate.exists():
            return candidate
        for ext in _EXTENSIONS:
            with_ext = directory / f"{name}{ext}"
            if with_ext.exists():
                return with_ext
        raise ConfigNotFoundError(
            f"Configuration not found: {name}",
            context={"name": name, "directory": str(directory)},
        )

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        if not path.exists():
            raise ConfigNotFoundError(
                f"Configuration file not found: {path}",
                context={"file": str(path)},
            )
        try:
            with open(path, encoding="utf-8") as f:
                if path.suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(
                f"Failed to parse configuration {path}: {e}",
                context={"file": str(path)},
            ) from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"Configuration root must be a mapping: {path}",
                context={"file": str(path), "type": type(data).__name__},
            )
        return data
