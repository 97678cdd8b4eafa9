"""
Resolve command implementation.

Prints the download URL a version resolves to, without downloading it.
"""

import logging

from jdkkit.cli.utils import print_error, settings_from_args
from jdkkit.core.download import HttpClient
from jdkkit.core.exceptions import JdkKitError
from jdkkit.core.platform import detect_platform, PlatformKey
from jdkkit.distributions.locator import ArtifactLocator
from jdkkit.distributions.registry import DistributionRegistry
from jdkkit.distributions.versions import normalize_version

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")

    try:
        settings = settings_from_args(args)
        config = DistributionRegistry().get(settings.distribution)
        version, stable = normalize_version(settings.java_version)

        platform_key = detect_platform(settings.architecture or None, settings.java_package)
        if args.os_name:
            platform_key = PlatformKey(args.os_name, platform_key.arch, platform_key.package_type)

        http = HttpClient()
        try:
            locator = ArtifactLocator(config, http, token=settings.token or None)
            artifact = locator.locate(version, platform_key, stable)
        finally:
            http.close()

    except (JdkKitError, ValueError) as e:
        print_error(str(e))
        return 1

    print(f"Version: {artifact.version}")
    print(f"URL: {artifact.url}")
    return 0
