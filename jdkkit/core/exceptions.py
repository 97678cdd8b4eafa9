"""
Centralized exception hierarchy for jdkkit.

This module defines all custom exceptions used across the codebase
so that callers can catch a single base class at the top level.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class JdkKitError(Exception):
    """Base exception for all jdkkit errors."""

    pass


class InvalidVersionError(JdkKitError):
    """Invalid version format or range expression."""

    pass


# ============================================================================
# Locator Exceptions
# ============================================================================


class LocatorError(JdkKitError):
    """Base exception for artifact resolution errors."""

    pass


class UnsupportedArchitecture(LocatorError):
    """Raised when the distribution does not publish builds for an architecture."""

    def __init__(self, architecture: str):
        self.architecture = architecture
        super().__init__(f"Unsupported architecture: {architecture}")


class UnsupportedPackageType(LocatorError):
    """Raised when the distribution does not offer the requested package type."""

    def __init__(self, distribution: str, package_type: str, allowed: list):
        self.distribution = distribution
        self.package_type = package_type
        allowed_str = ", ".join(f"`{p}`" for p in allowed)
        suffix = "type" if len(allowed) == 1 else "types"
        super().__init__(
            f"{distribution} provides only the {allowed_str} package {suffix} "
            f"(requested: {package_type})"
        )


class UnsupportedVersion(LocatorError):
    """Raised when the requested version is below the distribution's floor."""

    def __init__(self, distribution: str, version: str, min_version: int):
        self.distribution = distribution
        self.version = version
        self.min_version = min_version
        super().__init__(
            f"{distribution} is only supported for JDK {min_version} and later "
            f"(requested: {version})"
        )


class UnsupportedPlatform(LocatorError):
    """Raised when the host operating system has no published builds."""

    pass


class ArtifactNotFoundError(LocatorError):
    """Raised when metadata for a build cannot be found."""

    pass


# ============================================================================
# Network Exceptions
# ============================================================================


class NetworkError(JdkKitError):
    """Base exception for HTTP failures."""

    def __init__(self, message: str, url: str = "", status_code: int = 0):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class DownloadFailure(NetworkError):
    """Raised when an archive or metadata document cannot be fetched."""

    pass


class ProbeFailure(NetworkError):
    """Raised when the existence probe for a download URL does not succeed."""

    pass


# ============================================================================
# Extraction Exceptions
# ============================================================================


class ExtractionFailure(JdkKitError):
    """Raised when an archive is corrupt or cannot be unpacked."""

    pass


class UnsupportedArchiveFormat(ExtractionFailure):
    """Archive format is not supported by any available extractor."""

    pass


# ============================================================================
# Tool Cache Exceptions
# ============================================================================


class ToolCacheError(JdkKitError):
    """Base exception for tool cache errors."""

    pass


class ToolCacheLockTimeout(ToolCacheError):
    """Raised when a tool cache entry lock cannot be acquired within timeout."""

    pass


# ============================================================================
# Registry Exceptions
# ============================================================================


class DistributionRegistryError(JdkKitError):
    """Distribution catalog cannot be loaded or names an unknown distribution."""

    pass
