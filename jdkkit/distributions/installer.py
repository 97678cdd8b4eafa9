"""
JDK acquisition and installation.

This module turns a located artifact into an installed JDK:

    CHECK_CACHE -> hit: done
                -> miss: DOWNLOAD -> EXTRACT -> NORMALIZE -> STORE_CACHE -> done

`AcquisitionPipeline` runs those steps for one artifact. `JavaInstaller`
wraps it with version normalization, tool cache search, remote resolution
and publishing the result to the runner (JAVA_HOME, PATH, step outputs).
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from jdkkit.core.actions import add_path, export_variable, set_output
from jdkkit.core.download import DownloadProgress, HttpClient
from jdkkit.core.exceptions import NetworkError
from jdkkit.core.filesystem import (
    FilesystemError,
    extract_jdk_file,
    find_installation_root,
    rename_win_archive,
    safe_rmtree,
)
from jdkkit.core.platform import (
    PlatformKey,
    detect_architecture,
    detect_os,
    get_download_archive_extension,
)
from jdkkit.core.tool_cache import ToolCache
from jdkkit.distributions.locator import ArtifactDescriptor, ArtifactLocator
from jdkkit.distributions.registry import DistributionConfig
from jdkkit.distributions.versions import (
    get_toolcache_version_name,
    is_version_satisfies,
    normalize_version,
    parse_toolcache_version_name,
    parse_version,
    version_sort_key,
)

logger = logging.getLogger(__name__)

# macOS bundles keep the JDK under <root>/Contents/Home
MACOS_JAVA_CONTENT_POSTFIX = Path("Contents") / "Home"


@dataclass(frozen=True)
class ToolIdentity:
    """Tool cache key of an installation."""

    tool_name: str
    """Tool folder name (e.g., 'Java_GraalVM_jdk')"""

    version: str
    """Version folder name (e.g., '17.0.12', '21.0.0-ea.7')"""

    architecture: str
    """Architecture folder name (e.g., 'x64')"""


@dataclass
class InstallerOptions:
    """What the caller asked to install."""

    version: str
    architecture: str = ""
    package_type: str = "jdk"
    check_latest: bool = False


@dataclass
class InstallResult:
    """An installed JDK."""

    version: str
    """Resolved Java version"""

    path: Path
    """Installation directory (JAVA_HOME)"""

    was_cached: bool = False
    """Whether the installation came from the tool cache"""


class AcquisitionPipeline:
    """
    Downloads, extracts and caches one artifact.

    A successful acquisition always leaves a complete tool cache entry; a
    failed one leaves none. Temporary archives and extraction directories
    are removed either way.

    Example:
        >>> pipeline = AcquisitionPipeline(ToolCache(), HttpClient())
        >>> identity = ToolIdentity("Java_GraalVM_jdk", "17", "x64")
        >>> result = pipeline.acquire(artifact, identity)
        >>> print(result.path)
        /opt/hostedtoolcache/Java_GraalVM_jdk/17/x64
    """

    def __init__(
        self,
        tool_cache: ToolCache,
        http: HttpClient,
        os_name: Optional[str] = None,
        display_name: str = "",
    ):
        """
        Initialize pipeline.

        Args:
            tool_cache: Tool cache to look up and store installations
            http: HTTP client for the archive download
            os_name: Host OS family (default: detected)
            display_name: Distribution name used in log messages
        """
        self.tool_cache = tool_cache
        self.http = http
        self.os_name = os_name or detect_os()
        self.display_name = display_name

    def acquire(self, artifact: ArtifactDescriptor, identity: ToolIdentity) -> InstallResult:
        """
        Make an artifact available in the tool cache.

        Args:
            artifact: Download URL and version of the build
            identity: Tool cache key to install under

        Returns:
            InstallResult pointing at the cache-owned installation

        Raises:
            DownloadFailure: If the archive cannot be downloaded
            ExtractionFailure: If the archive cannot be unpacked
            ToolCacheError: If the installation cannot be stored
        """
        cached = self.tool_cache.find(
            identity.tool_name, identity.version, identity.architecture
        )
        if cached is not None:
            logger.info(f"Java {artifact.version} found in tool cache: {cached}")
            return InstallResult(version=artifact.version, path=cached, was_cached=True)

        label = f" ({self.display_name})" if self.display_name else ""
        logger.info(f"Downloading Java {artifact.version}{label} from {artifact.url} ...")
        archive_path = self.http.download(artifact.url, progress_callback=self._log_progress)
        extract_dir = None

        try:
            logger.info("Extracting Java archive...")
            extension = get_download_archive_extension(self.os_name)

            if self.os_name == "windows" and archive_path.suffix != ".zip":
                archive_path = rename_win_archive(archive_path)

            extract_dir = extract_jdk_file(archive_path, extension)
            java_root = find_installation_root(extract_dir)

            path = self.tool_cache.cache_dir(
                java_root, identity.tool_name, identity.version, identity.architecture
            )
        finally:
            self._cleanup(archive_path, extract_dir)

        return InstallResult(version=artifact.version, path=path)

    def _log_progress(self, progress: DownloadProgress):
        logger.debug(f"Downloaded {progress}")

    def _cleanup(self, archive_path: Path, extract_dir: Optional[Path]):
        """Remove temporary download and extraction files."""
        try:
            archive_path.unlink(missing_ok=True)
            logger.debug(f"Removed archive: {archive_path}")
        except OSError as e:
            logger.warning(f"Failed to remove archive {archive_path}: {e}")

        if extract_dir is not None:
            try:
                safe_rmtree(extract_dir)
                logger.debug(f"Removed temp extraction: {extract_dir}")
            except (OSError, FilesystemError) as e:
                logger.warning(f"Failed to remove temp extraction {extract_dir}: {e}")


class JavaInstaller:
    """
    Installs a JDK of one distribution and makes it the default.

    Example:
        >>> installer = JavaInstaller(
        ...     registry.get("graalvm"),
        ...     InstallerOptions(version="17", architecture="x64"),
        ... )
        >>> result = installer.setup_java()
        >>> print(result.version, result.path)
    """

    def __init__(
        self,
        config: DistributionConfig,
        options: InstallerOptions,
        tool_cache: Optional[ToolCache] = None,
        http: Optional[HttpClient] = None,
        token: Optional[str] = None,
        os_name: Optional[str] = None,
    ):
        """
        Initialize installer.

        Args:
            config: Distribution rules
            options: Requested version, architecture and package type
            tool_cache: Tool cache (default: RUNNER_TOOL_CACHE)
            http: HTTP client (default: new client)
            token: GitHub token for early-access metadata
            os_name: Host OS family (default: detected)

        Raises:
            InvalidVersionError: If the requested version is not a valid range
        """
        self.config = config
        self.options = options
        self.tool_cache = tool_cache or ToolCache()
        self.http = http or HttpClient()
        self.os_name = os_name or detect_os()

        self.architecture = options.architecture or detect_architecture()
        self.package_type = options.package_type
        self.check_latest = options.check_latest
        self.version, self.stable = normalize_version(options.version)

        self.locator = ArtifactLocator(config, self.http, token=token)
        self.pipeline = AcquisitionPipeline(
            self.tool_cache, self.http, self.os_name, display_name=config.display_name
        )

    @property
    def toolcache_folder_name(self) -> str:
        return self.config.toolcache_folder_name(self.package_type)

    @property
    def platform_key(self) -> PlatformKey:
        return PlatformKey(os=self.os_name, arch=self.architecture, package_type=self.package_type)

    def setup_java(self) -> InstallResult:
        """
        Install the requested JDK and make it the default.

        The tool cache is searched first; the remote is only consulted when
        nothing satisfying is cached or check_latest is set.

        Returns:
            InstallResult of the JDK that was set as default
        """
        found = self.find_in_tool_cache()

        if found is not None and not self.check_latest:
            logger.info(f"Resolved Java {found.version} from tool-cache")
        else:
            logger.info("Trying to resolve the latest version from remote")
            try:
                artifact = self.locator.locate(self.version, self.platform_key, self.stable)
                logger.info(f"Resolved latest version as {artifact.version}")

                if found is not None and found.version == artifact.version:
                    logger.info(f"Resolved Java {found.version} from tool-cache")
                else:
                    logger.info("Trying to download...")
                    found = self.download_tool(artifact)
                    logger.info(f"Java {found.version} was downloaded")
            except NetworkError as e:
                if e.status_code == 403:
                    logger.error(
                        "Received HTTP status code 403. This usually indicates "
                        "the rate limit has been exceeded"
                    )
                elif e.status_code == 429:
                    logger.error(
                        "Received HTTP status code 429. This usually indicates "
                        "too many requests have been sent in a given amount of time"
                    )
                raise

        mac_home = found.path / MACOS_JAVA_CONTENT_POSTFIX
        if self.os_name == "macos" and mac_home.exists():
            found.path = mac_home

        logger.info(f"Setting Java {found.version} as the default")
        self.set_java_default(found.version, found.path)
        return found

    def download_tool(self, artifact: ArtifactDescriptor) -> InstallResult:
        """Acquire a located artifact under its tool cache key."""
        identity = ToolIdentity(
            tool_name=self.toolcache_folder_name,
            version=get_toolcache_version_name(artifact.version, self.stable),
            architecture=self.architecture,
        )
        return self.pipeline.acquire(artifact, identity)

    def find_in_tool_cache(self) -> Optional[InstallResult]:
        """
        Find the newest cached JDK satisfying the requested version.

        Major-only entries ('17') are not semantic versions, so the exact
        folder for the request is checked before ranges are matched.

        Returns:
            InstallResult, or None if nothing suitable is cached
        """
        exact_name = get_toolcache_version_name(self.version, self.stable)
        exact = self.tool_cache.find(self.toolcache_folder_name, exact_name, self.architecture)
        if exact is not None:
            return InstallResult(version=self.version, path=exact, was_cached=True)

        candidates = []
        for name in self.tool_cache.find_all_versions(self.toolcache_folder_name, self.architecture):
            version, stable = parse_toolcache_version_name(name)
            if stable != self.stable or not is_version_satisfies(self.version, version):
                continue
            path = self.tool_cache.find(self.toolcache_folder_name, name, self.architecture)
            if path is not None:
                candidates.append((version, path))

        if not candidates:
            logger.debug(f"No cached Java satisfies {self.version}")
            return None

        version, path = max(candidates, key=lambda c: version_sort_key(parse_version(c[0])))
        return InstallResult(version=version, path=path, was_cached=True)

    def set_java_default(self, version: str, tool_path: Path):
        """Publish an installation as the job's Java."""
        major = version.split(".")[0]
        home = str(tool_path)

        export_variable("JAVA_HOME", home)
        add_path(str(tool_path / "bin"))
        set_output("distribution", self.config.display_name)
        set_output("path", home)
        set_output("version", version)
        export_variable(f"JAVA_HOME_{major}_{self.architecture.upper()}", home)


__all__ = [
    "MACOS_JAVA_CONTENT_POSTFIX",
    "ToolIdentity",
    "InstallerOptions",
    "InstallResult",
    "AcquisitionPipeline",
    "JavaInstaller",
]
