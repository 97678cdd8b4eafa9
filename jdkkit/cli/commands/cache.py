"""
Cache command implementation.

Lists the versions of a distribution installed in the tool cache.
"""

import logging

from jdkkit.cli.utils import print_error, settings_from_args
from jdkkit.core.exceptions import JdkKitError
from jdkkit.core.platform import detect_architecture
from jdkkit.core.tool_cache import ToolCache
from jdkkit.distributions.registry import DistributionRegistry

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the cache command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")

    try:
        settings = settings_from_args(args)
        config = DistributionRegistry().get(settings.distribution)
    except (JdkKitError, ValueError) as e:
        print_error(str(e))
        return 1

    tool_cache = ToolCache(args.tool_cache) if args.tool_cache else ToolCache()
    tool_name = config.toolcache_folder_name(settings.java_package)
    architecture = settings.architecture or detect_architecture()

    versions = tool_cache.find_all_versions(tool_name, architecture)
    if not versions:
        print(f"No {tool_name} ({architecture}) versions in {tool_cache.root}")
        return 0

    print(f"{tool_name} ({architecture}) in {tool_cache.root}:")
    for version in versions:
        print(f"  {version}: {tool_cache.find(tool_name, version, architecture)}")
    return 0
