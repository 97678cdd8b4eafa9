"""
Step inputs and configuration for jdkkit.

Settings are merged from four layers, later layers winning:

    1. Built-in defaults
    2. YAML configuration file (jdkkit.yaml)
    3. Runner inputs (INPUT_<NAME> environment variables)
    4. Command-line flags

Keys use the runner's dashed input names (java-version, check-latest, ...).
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "jdkkit.yaml"


def _env_name(name: str) -> str:
    """Environment variable the runner uses for an input."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


def get_input(name: str, required: bool = False) -> str:
    """
    Read a runner input.

    Args:
        name: Input name as declared by the step (e.g. 'java-version')
        required: Raise if the input is empty

    Returns:
        Stripped input value, '' when unset

    Raises:
        ValueError: If required and not supplied
    """
    value = os.environ.get(_env_name(name), "").strip()
    if required and not value:
        raise ValueError(f"Input required and not supplied: {name}")
    return value


def get_boolean_input(name: str, default: bool = False) -> bool:
    """
    Read a boolean runner input; only 'true' (any case) is truthy.

    Example:
        >>> os.environ["INPUT_CHECK-LATEST"] = "TRUE"
        >>> get_boolean_input("check-latest")
        True
    """
    return (get_input(name) or str(default)).upper() == "TRUE"


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        FileNotFoundError: If required=True and file doesn't exist
        ValueError: If YAML parsing fails or the document is not a mapping
    """
    if not config_file.exists():
        if required:
            raise FileNotFoundError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise ValueError(f"Invalid YAML in {config_file}: {e}") from e

    config = config or {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration in {config_file} must be a mapping")
    return config


@dataclass
class SetupSettings:
    """Resolved settings for one setup invocation."""

    java_version: str = ""
    java_version_file: str = ""
    distribution: str = "graalvm"
    architecture: str = ""
    java_package: str = "jdk"
    check_latest: bool = False
    token: str = ""

    @staticmethod
    def input_name(field_name: str) -> str:
        return field_name.replace("_", "-")


def _coerce(value: Any, as_bool: bool) -> Any:
    if as_bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().upper() == "TRUE"
    return str(value).strip()


def load_settings(
    overrides: Optional[Dict[str, Any]] = None,
    config_file: Optional[Path] = None,
) -> SetupSettings:
    """
    Merge defaults, config file, runner inputs and CLI overrides.

    Args:
        overrides: Values from the command line keyed by field name; None
            values are treated as "not given"
        config_file: YAML file to read (default: ./jdkkit.yaml when present)

    Returns:
        SetupSettings with every layer applied
    """
    settings = SetupSettings()
    config = load_yaml_config(
        config_file or Path(DEFAULT_CONFIG_FILE), required=config_file is not None
    )
    overrides = overrides or {}

    for f in fields(SetupSettings):
        as_bool = f.type is bool
        name = SetupSettings.input_name(f.name)

        if name in config and config[name] is not None:
            setattr(settings, f.name, _coerce(config[name], as_bool))

        if get_input(name):
            value = get_boolean_input(name) if as_bool else get_input(name)
            setattr(settings, f.name, value)

        if overrides.get(f.name) is not None:
            setattr(settings, f.name, _coerce(overrides[f.name], as_bool))

    logger.debug(f"Resolved settings: {settings}")
    return settings


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "SetupSettings",
    "get_input",
    "get_boolean_input",
    "load_yaml_config",
    "load_settings",
]
