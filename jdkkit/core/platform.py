"""
Platform detection for jdkkit.

This module detects the host operating system and CPU architecture and maps
them onto the names JDK distributions use in their download URLs.

Usage:
    from jdkkit.core.platform import detect_platform

    key = detect_platform(package_type="jdk")
    print(f"OS: {key.os}, architecture: {key.arch}")
"""

import functools
import platform
from dataclasses import dataclass
from typing import Optional

from jdkkit.core.exceptions import UnsupportedPlatform

SUPPORTED_OS = ("linux", "macos", "windows")


@dataclass(frozen=True)
class PlatformKey:
    """
    Target platform for a JDK download.

    Attributes:
        os: Operating system family ('linux', 'macos', 'windows')
        arch: CPU architecture as requested by the caller ('x64', 'aarch64', ...)
        package_type: Package flavour ('jdk', 'jre', 'jdk+fx', ...)
    """

    os: str
    arch: str
    package_type: str = "jdk"

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'macos-aarch64').

        Example:
            >>> PlatformKey('linux', 'x64').platform_string()
            'linux-x64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return f"{self.platform_string()} ({self.package_type})"


@functools.lru_cache(maxsize=1)
def detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'linux', 'macos' or 'windows'

    Raises:
        UnsupportedPlatform: If OS is not supported
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "linux":
        return "linux"
    elif system == "darwin":
        return "macos"
    else:
        raise UnsupportedPlatform(
            f"Platform '{system}' is not supported. "
            f"Supported platforms: {', '.join(repr(s) for s in SUPPORTED_OS)}"
        )


@functools.lru_cache(maxsize=1)
def detect_architecture() -> str:
    """
    Detect CPU architecture.

    Uses the same vocabulary as the runner's `architecture` input so that an
    unset input and an explicit one produce the same tool cache key.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm', ...
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    else:
        # ppc64le, s390x and friends pass through unchanged
        return machine


def distribution_architecture(architecture: str) -> str:
    """
    Map a runner architecture name onto the name JDK vendors publish.

    Example:
        >>> distribution_architecture('arm64')
        'aarch64'
        >>> distribution_architecture('amd64')
        'x64'
    """
    mapping = {
        "amd64": "x64",
        "ia32": "x86",
        "arm64": "aarch64",
    }
    return mapping.get(architecture, architecture)


def get_download_archive_extension(os_name: Optional[str] = None) -> str:
    """
    Get the archive extension JDK vendors use on the given OS.

    Returns:
        'zip' on Windows, 'tar.gz' everywhere else
    """
    if os_name is None:
        os_name = detect_os()
    return "zip" if os_name == "windows" else "tar.gz"


def detect_platform(
    architecture: Optional[str] = None, package_type: str = "jdk"
) -> PlatformKey:
    """
    Build the platform key for the current host.

    Args:
        architecture: Requested architecture (default: host architecture)
        package_type: Requested package type

    Returns:
        PlatformKey for URL templating and cache keys
    """
    return PlatformKey(
        os=detect_os(),
        arch=architecture or detect_architecture(),
        package_type=package_type,
    )


def clear_platform_cache():
    """
    Clear the platform detection cache.

    Useful for testing when platform.system()/machine() are patched.
    """
    detect_os.cache_clear()
    detect_architecture.cache_clear()


__all__ = [
    "PlatformKey",
    "SUPPORTED_OS",
    "detect_os",
    "detect_architecture",
    "distribution_architecture",
    "get_download_archive_extension",
    "detect_platform",
    "clear_platform_cache",
]
