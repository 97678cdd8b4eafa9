"""
Artifact location for JDK distributions.

Given a version range and a target platform, the locator checks the
distribution's eligibility rules and produces the download URL of a single
build. Stable builds are located by URL templating followed by one HEAD
probe; early-access builds are looked up in the vendor's published metadata.

Eligibility is checked before any network call, in this order:

    1. architecture
    2. early access (skips the remaining checks)
    3. package type
    4. minimum major version
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from jdkkit.core.download import HttpClient, get_github_http_headers
from jdkkit.core.exceptions import (
    ArtifactNotFoundError,
    InvalidVersionError,
    ProbeFailure,
    UnsupportedArchitecture,
    UnsupportedPackageType,
    UnsupportedVersion,
)
from jdkkit.core.platform import (
    PlatformKey,
    distribution_architecture,
    get_download_archive_extension,
)
from jdkkit.distributions.registry import DistributionConfig
from jdkkit.distributions.versions import coerce_version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactDescriptor:
    """A downloadable build: where it lives and which version it is."""

    url: str
    version: str


class ArtifactLocator:
    """
    Resolve download URLs for one distribution.

    Example:
        >>> locator = ArtifactLocator(registry.get("graalvm"), HttpClient())
        >>> locator.locate("17", PlatformKey("linux", "x64"))
        ArtifactDescriptor(url='https://download.oracle.com/graalvm/17/latest/graalvm-jdk-17_linux-x64_bin.tar.gz', version='17')
    """

    def __init__(
        self,
        config: DistributionConfig,
        http: HttpClient,
        token: Optional[str] = None,
    ):
        """
        Initialize locator.

        Args:
            config: Distribution rules and URL templates
            http: HTTP client used for probes and metadata
            token: Optional GitHub token for early-access metadata requests
        """
        self.config = config
        self.http = http
        self.token = token

    def locate(
        self, version_spec: str, platform_key: PlatformKey, stable: bool = True
    ) -> ArtifactDescriptor:
        """
        Find the build matching a version range on a platform.

        Args:
            version_spec: Major version ('17') or exact version ('17.0.12')
            platform_key: Target OS, architecture and package type
            stable: False to look up the latest early-access build instead

        Returns:
            ArtifactDescriptor with the download URL and version

        Raises:
            UnsupportedArchitecture: Architecture is not published
            UnsupportedPackageType: Package type is not published
            UnsupportedVersion: Major version below the distribution's floor
            ProbeFailure: The download URL does not answer 200
            ArtifactNotFoundError: Early-access metadata has no matching build
        """
        arch = distribution_architecture(platform_key.arch)
        if arch not in self.config.architectures:
            raise UnsupportedArchitecture(arch)

        if not stable:
            return self._find_ea_build(f"{version_spec}-ea", platform_key.os, arch)

        if platform_key.package_type not in self.config.package_types:
            raise UnsupportedPackageType(
                self.config.display_name,
                platform_key.package_type,
                list(self.config.package_types),
            )

        major = self._major_version(version_spec)
        if major < self.config.min_version:
            raise UnsupportedVersion(
                self.config.display_name, version_spec, self.config.min_version
            )

        url = self.build_url(version_spec, platform_key.os, arch)
        logger.debug(f"Probing {url}")

        status = self.http.head(url)
        if status == 404:
            raise ProbeFailure(
                f"Could not find {self.config.display_name} for SemVer {version_spec}",
                url=url,
                status_code=status,
            )
        if status != 200:
            raise ProbeFailure(
                f"Http request for {self.config.display_name} failed "
                f"with status code: {status}",
                url=url,
                status_code=status,
            )

        return ArtifactDescriptor(url=url, version=version_spec)

    def build_url(self, version_spec: str, os_name: str, arch: str) -> str:
        """
        Fill in the download URL template for a version.

        Versions containing a dot name an archived release; anything else
        asks for the latest release of that major line.
        """
        template = self.config.archive_url if "." in version_spec else self.config.latest_url
        return template.format(
            major=version_spec.split(".")[0],
            version=version_spec,
            os=self.config.platform_name(os_name),
            arch=arch,
            extension=get_download_archive_extension(os_name),
        )

    @staticmethod
    def _major_version(version_spec: str) -> int:
        coerced = coerce_version(version_spec)
        if coerced is None:
            raise InvalidVersionError(
                f"Cannot determine the major version of '{version_spec}'"
            )
        return coerced.major

    # ========================================================================
    # Early access
    # ========================================================================

    def _find_ea_build(self, ea_version: str, os_name: str, arch: str) -> ArtifactDescriptor:
        if self.config.ea is None:
            raise ArtifactNotFoundError(
                f"{self.config.display_name} does not publish early-access builds"
            )

        versions = self._fetch_ea_versions(ea_version)

        latest = next((v for v in versions if v.get("latest")), None)
        if latest is None:
            raise ArtifactNotFoundError(
                f"Unable to find latest version for '{ea_version}'"
            )

        platform_name = self.config.platform_name(os_name)
        file_info = next(
            (
                f
                for f in latest.get("files", [])
                if f.get("arch") == arch and f.get("platform") == platform_name
            ),
            None,
        )
        if file_info is None or not str(file_info.get("filename", "")).startswith(
            self.config.ea.file_prefix
        ):
            raise ArtifactNotFoundError(
                f"Unable to find file metadata for '{ea_version}'"
            )

        url = f"{latest['download_base_url']}{file_info['filename']}"
        logger.debug(f"Early-access build {latest.get('version')} at {url}")
        return ArtifactDescriptor(url=url, version=str(latest["version"]))

    def _fetch_ea_versions(self, ea_version: str) -> List[Dict[str, Any]]:
        url = self.config.ea.versions_url.format(version=ea_version)
        headers = get_github_http_headers(self.token)

        logger.info(
            f"Fetching available {self.config.display_name} EA builds from '{url}'"
        )
        versions = self.http.get_json(url, headers=headers)
        if not versions:
            raise ArtifactNotFoundError(
                f"No {self.config.display_name} EA build found. "
                f"Are you sure java-version: '{ea_version}' is correct?"
            )
        return versions


__all__ = ["ArtifactDescriptor", "ArtifactLocator"]
