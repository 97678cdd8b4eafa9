"""
JDK distribution support for jdkkit.

This module provides functionality for:
- Version specifier parsing and range matching
- Distribution rules and artifact location
- Download, extraction and tool cache installation
"""

from jdkkit.distributions.versions import (
    get_version_from_file_content,
    is_version_satisfies,
    normalize_version,
)
from jdkkit.distributions.registry import (
    DistributionConfig,
    DistributionRegistry,
)
from jdkkit.distributions.locator import (
    ArtifactDescriptor,
    ArtifactLocator,
)
from jdkkit.distributions.installer import (
    AcquisitionPipeline,
    InstallerOptions,
    InstallResult,
    JavaInstaller,
    ToolIdentity,
)

__all__ = [
    # Versions
    "get_version_from_file_content",
    "is_version_satisfies",
    "normalize_version",
    # Registry
    "DistributionConfig",
    "DistributionRegistry",
    # Locator
    "ArtifactDescriptor",
    "ArtifactLocator",
    # Installer
    "AcquisitionPipeline",
    "InstallerOptions",
    "InstallResult",
    "JavaInstaller",
    "ToolIdentity",
]
