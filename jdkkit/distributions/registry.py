"""
Distribution registry and per-vendor download rules.

Distributions are described by data records rather than subclasses: each
record names the architectures, package types and minimum major version a
vendor publishes, plus the URL templates used to locate builds. Records are
loaded from the embedded distributions.yaml.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from jdkkit.core.exceptions import DistributionRegistryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EarlyAccessConfig:
    """Where a distribution publishes early-access build metadata."""

    versions_url: str
    """Template for the versions document; receives {version} ('21-ea')"""

    file_prefix: str
    """Only files whose name starts with this prefix are considered"""


@dataclass(frozen=True)
class DistributionConfig:
    """Download rules for one JDK distribution."""

    name: str
    display_name: str
    min_version: int
    architectures: Tuple[str, ...]
    package_types: Tuple[str, ...]
    latest_url: str
    archive_url: str
    platforms: Dict[str, str] = field(default_factory=dict)
    ea: Optional[EarlyAccessConfig] = None

    @property
    def tool_name(self) -> str:
        """Prefix of the tool cache folder name ('Java_GraalVM')."""
        return f"Java_{self.display_name}"

    def toolcache_folder_name(self, package_type: str) -> str:
        """
        Tool cache folder for a package type.

        Example:
            >>> config.toolcache_folder_name("jdk")
            'Java_GraalVM_jdk'
        """
        return f"{self.tool_name}_{package_type}"

    def platform_name(self, os_name: str) -> str:
        """Vendor spelling of an OS family; unmapped names pass through."""
        return self.platforms.get(os_name, os_name)

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "DistributionConfig":
        """
        Build a config record from a catalog entry.

        Raises:
            DistributionRegistryError: If required keys are missing or malformed
        """
        if not isinstance(data, dict):
            raise DistributionRegistryError(
                f"Distribution '{name}' must be a mapping, got {type(data).__name__}"
            )

        try:
            ea_data = data.get("ea")
            ea = (
                EarlyAccessConfig(
                    versions_url=ea_data["versions_url"],
                    file_prefix=ea_data.get("file_prefix", ""),
                )
                if ea_data
                else None
            )
            return cls(
                name=name,
                display_name=data.get("display_name", name),
                min_version=int(data.get("min_version", 0)),
                architectures=tuple(data["architectures"]),
                package_types=tuple(data.get("package_types", ["jdk"])),
                latest_url=data["latest_url"],
                archive_url=data["archive_url"],
                platforms=dict(data.get("platforms") or {}),
                ea=ea,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DistributionRegistryError(
                f"Invalid configuration for distribution '{name}': {e}"
            ) from e


class DistributionRegistry:
    """
    Catalog of known JDK distributions.

    Example:
        >>> registry = DistributionRegistry()
        >>> config = registry.get("graalvm")
        >>> config.min_version
        17
    """

    def __init__(self, catalog_path: Optional[Path] = None):
        """
        Initialize distribution registry.

        Args:
            catalog_path: Optional path to a catalog YAML file.
                          If None, uses the embedded distributions.yaml

        Raises:
            DistributionRegistryError: If the catalog cannot be loaded
        """
        self.catalog_path = catalog_path or self._get_default_catalog_path()
        self._distributions = self._load_catalog()
        logger.debug(f"Loaded {len(self._distributions)} distributions")

    def _get_default_catalog_path(self) -> Path:
        return Path(__file__).parent.parent / "data" / "distributions.yaml"

    def _load_catalog(self) -> Dict[str, DistributionConfig]:
        if not self.catalog_path.exists():
            raise DistributionRegistryError(
                f"Distribution catalog not found: {self.catalog_path}"
            )

        try:
            with open(self.catalog_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise DistributionRegistryError(
                f"Invalid YAML in distribution catalog: {e}\n"
                f"File: {self.catalog_path}"
            ) from e

        if not isinstance(data, dict):
            raise DistributionRegistryError(
                f"Distribution catalog must be a mapping\nFile: {self.catalog_path}"
            )

        return {
            name.lower(): DistributionConfig.from_dict(name.lower(), entry)
            for name, entry in data.items()
        }

    def get(self, name: str) -> DistributionConfig:
        """
        Look up a distribution by name (case-insensitive).

        Raises:
            DistributionRegistryError: If the distribution is unknown
        """
        config = self._distributions.get(name.lower())
        if config is None:
            raise DistributionRegistryError(
                f"No supported distribution was found for input {name}. "
                f"Supported distributions: {', '.join(self.list_distributions())}"
            )
        return config

    def list_distributions(self) -> List[str]:
        return sorted(self._distributions)

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._distributions


__all__ = [
    "DistributionConfig",
    "DistributionRegistry",
    "DistributionRegistryError",
    "EarlyAccessConfig",
]
