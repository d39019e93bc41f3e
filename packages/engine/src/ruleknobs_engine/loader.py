"""Form definitions from YAML or JSON files.

A form definition lists value hosts under ``value_hosts``. It may extend a
shared base file and use environment variables, see ``ConfigLoader``:

    ```yaml
    value_hosts:
      - name: age
        label: ${AGE_LABEL:Age}
        data_type: Integer
        validator_descriptors:
          - condition_config:
              condition_type: Range
              minimum: 18
              maximum: 120
            error_message: "{Label} must be between {Minimum} and {Maximum}"
    ```
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ruleknobs_config import ConfigError, ConfigLoader

from .descriptors import descriptor_from_dict
from .manager import ValidationManagerConfig
from .validation_services import ValidationServices

logger = logging.getLogger(__name__)


def load_validation_manager_config(
    path: str | Path,
    services: ValidationServices | None = None,
    loader: ConfigLoader | None = None,
    **callbacks: Any,
) -> ValidationManagerConfig:
    """Read a form definition file into a ValidationManagerConfig.

    Args:
        path: YAML or JSON file
        services: Services for the manager, defaults to ``create_default()``
        loader: Loader to use, e.g. one shared to reuse its cache
        **callbacks: Callback fields of ValidationManagerConfig

    Raises:
        ConfigError: If the file has no ``value_hosts`` list
    """
    loader = loader or ConfigLoader(Path(path).parent)
    data = loader.load_from_file(path)
    value_hosts = data.get("value_hosts")
    if not isinstance(value_hosts, list):
        raise ConfigError(
            f"Form definition must contain a value_hosts list: {path}",
            context={"file": str(path)},
        )
    descriptors = [descriptor_from_dict(entry) for entry in value_hosts]
    logger.info(f"Loaded {len(descriptors)} value hosts from {path}")
    return ValidationManagerConfig(
        services=services or ValidationServices.create_default(),
        value_host_descriptors=descriptors,
        **callbacks,
    )
