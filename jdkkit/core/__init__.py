"""
Core functionality for jdkkit.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    get_temp_dir,
    get_tool_cache_dir,
)

from .platform import (
    PlatformKey,
    detect_platform,
    detect_os,
    detect_architecture,
    clear_platform_cache,
)

from .tool_cache import ToolCache

from .download import HttpClient, get_github_http_headers

from .exceptions import (
    JdkKitError,
    InvalidVersionError,
    LocatorError,
    UnsupportedArchitecture,
    UnsupportedPackageType,
    UnsupportedVersion,
    UnsupportedPlatform,
    ArtifactNotFoundError,
    NetworkError,
    DownloadFailure,
    ProbeFailure,
    ExtractionFailure,
    UnsupportedArchiveFormat,
    ToolCacheError,
    ToolCacheLockTimeout,
    DistributionRegistryError,
)

__all__ = [
    # Directory
    "get_temp_dir",
    "get_tool_cache_dir",
    # Platform
    "PlatformKey",
    "detect_platform",
    "detect_os",
    "detect_architecture",
    "clear_platform_cache",
    # Tool cache
    "ToolCache",
    # HTTP
    "HttpClient",
    "get_github_http_headers",
    # Exceptions
    "JdkKitError",
    "InvalidVersionError",
    "LocatorError",
    "UnsupportedArchitecture",
    "UnsupportedPackageType",
    "UnsupportedVersion",
    "UnsupportedPlatform",
    "ArtifactNotFoundError",
    "NetworkError",
    "DownloadFailure",
    "ProbeFailure",
    "ExtractionFailure",
    "UnsupportedArchiveFormat",
    "ToolCacheError",
    "ToolCacheLockTimeout",
    "DistributionRegistryError",
]
