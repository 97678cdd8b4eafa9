"""
Setup command implementation.

Installs one or more JDKs and makes the last one the default. Versions come
from --java-version (one per line) or, when that is empty, from the file
named by --java-version-file.
"""

import logging
from pathlib import Path
from typing import List

from jdkkit.cli.utils import format_details, print_error, settings_from_args
from jdkkit.core.download import HttpClient
from jdkkit.core.exceptions import JdkKitError
from jdkkit.core.inputs import SetupSettings
from jdkkit.core.tool_cache import ToolCache
from jdkkit.distributions.installer import InstallerOptions, JavaInstaller
from jdkkit.distributions.registry import DistributionRegistry
from jdkkit.distributions.versions import get_version_from_file_content

logger = logging.getLogger(__name__)


def resolve_versions(settings: SetupSettings) -> List[str]:
    """
    Collect the versions to install.

    Raises:
        JdkKitError: If no version is given or the version file yields none
    """
    versions = [v.strip() for v in settings.java_version.splitlines() if v.strip()]
    if versions:
        return versions

    if not settings.java_version_file:
        raise JdkKitError("java-version or java-version-file input expected")

    logger.debug("java-version input is empty, looking for java-version-file input")
    version_file = Path(settings.java_version_file)
    try:
        content = version_file.read_text(encoding="utf-8").strip()
    except OSError as e:
        raise JdkKitError(f"Unable to read version file {version_file}: {e}") from e

    version = get_version_from_file_content(content, settings.distribution, version_file)
    logger.debug(f"Parsed version from file '{version}'")
    if not version:
        raise JdkKitError(f"No supported version was found in file {version_file}")

    return [version]


def run(args) -> int:
    """
    Run the setup command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")

    try:
        settings = settings_from_args(args)
        versions = resolve_versions(settings)
        config = DistributionRegistry().get(settings.distribution)

        tool_cache = ToolCache(args.tool_cache) if args.tool_cache else ToolCache()
        http = HttpClient()

        try:
            for version in versions:
                installer = JavaInstaller(
                    config,
                    InstallerOptions(
                        version=version,
                        architecture=settings.architecture,
                        package_type=settings.java_package,
                        check_latest=settings.check_latest,
                    ),
                    tool_cache=tool_cache,
                    http=http,
                    token=settings.token or None,
                )
                result = installer.setup_java()

                print(
                    format_details(
                        "Java configuration:",
                        {
                            "Distribution": config.display_name,
                            "Version": result.version,
                            "Path": result.path,
                        },
                    )
                )
                print()
        finally:
            http.close()

    except (JdkKitError, ValueError) as e:
        print_error(str(e))
        return 1

    return 0
