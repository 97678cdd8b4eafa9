"""
Shared utilities for CLI commands.
"""

import sys
from typing import Any, Dict, Optional

from jdkkit.core.inputs import SetupSettings, load_settings

# Command-line attributes that map onto SetupSettings fields
SETTINGS_ARGS = (
    "java_version",
    "java_version_file",
    "distribution",
    "architecture",
    "java_package",
    "check_latest",
    "token",
)


def settings_from_args(args) -> SetupSettings:
    """
    Merge parsed arguments over runner inputs and the configuration file.

    Arguments a command does not define, or leaves unset, do not override.
    """
    overrides = {name: getattr(args, name, None) for name in SETTINGS_ARGS}
    return load_settings(overrides, config_file=getattr(args, "config", None))


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def format_details(title: str, details: Dict[str, Any], width: int = 70) -> str:
    """
    Format a titled block of key/value lines.

    Args:
        title: Block title
        details: Key-value pairs to display
        width: Width of the title rule

    Returns:
        Formatted message string
    """
    lines = [title, "-" * width]
    for key, value in details.items():
        lines.append(f"  {key}: {value}")
    return "\n".join(lines)


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)
