"""
Runner command files.

CI runners pick up environment variables, PATH entries and step outputs
from files named by GITHUB_ENV, GITHUB_PATH and GITHUB_OUTPUT. Values are
also applied to the current process so later code in the same invocation
sees them. Outside of a runner the file writes are skipped.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def _command_file(env_var: str) -> Optional[Path]:
    value = os.environ.get(env_var)
    return Path(value) if value else None


def _append_key_value(env_var: str, name: str, value: str):
    """Append a name/value pair using the runner's multiline-safe delimiter format."""
    command_file = _command_file(env_var)
    if command_file is None:
        logger.debug(f"{env_var} not set, skipping {name}")
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in name or delimiter in value:
        raise ValueError(f"Unexpected input: value contains the delimiter {delimiter}")

    with open(command_file, "a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def export_variable(name: str, value: str):
    """
    Set an environment variable for this process and later steps.

    Example:
        >>> export_variable("JAVA_HOME", "/opt/hostedtoolcache/Java_GraalVM_jdk/17/x64")
    """
    os.environ[name] = value
    _append_key_value("GITHUB_ENV", name, value)
    logger.debug(f"Exported {name}={value}")


def add_path(path: str):
    """Prepend a directory to PATH for this process and later steps."""
    os.environ["PATH"] = f"{path}{os.pathsep}{os.environ.get('PATH', '')}"

    command_file = _command_file("GITHUB_PATH")
    if command_file is not None:
        with open(command_file, "a", encoding="utf-8") as f:
            f.write(f"{path}\n")
    logger.debug(f"Added {path} to PATH")


def set_output(name: str, value: str):
    """Publish a step output."""
    _append_key_value("GITHUB_OUTPUT", name, value)
    logger.debug(f"Output {name}={value}")


__all__ = ["export_variable", "add_path", "set_output"]
