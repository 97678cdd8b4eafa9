"""
Runner directory resolution for jdkkit.

CI runners advertise two directories through the environment:

    RUNNER_TEMP        : scratch space for downloads and extraction
    RUNNER_TOOL_CACHE  : durable root of the shared tool cache

Both fall back to locations under the OS temp directory when unset so the
tool also works outside of a runner.
"""

import os
import tempfile
from pathlib import Path


def get_temp_dir() -> Path:
    """
    Get the runner temp directory.

    Returns:
        Path from RUNNER_TEMP, or the OS default temp directory

    Example:
        >>> os.environ["RUNNER_TEMP"] = "/home/runner/work/_temp"
        >>> get_temp_dir()
        PosixPath('/home/runner/work/_temp')
    """
    return Path(os.environ.get("RUNNER_TEMP") or tempfile.gettempdir())


def get_tool_cache_dir() -> Path:
    """
    Get the root directory of the shared tool cache.

    Returns:
        Path from RUNNER_TOOL_CACHE, or <temp>/jdkkit-tool-cache
    """
    root = os.environ.get("RUNNER_TOOL_CACHE")
    if root:
        return Path(root)
    return get_temp_dir() / "jdkkit-tool-cache"


__all__ = [
    "get_temp_dir",
    "get_tool_cache_dir",
]
