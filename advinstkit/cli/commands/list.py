"""
List command implementation.

Prints the Advanced Installer versions present in the tool cache.
"""

import logging

from advinstkit.cli.utils import load_config, print_error
from advinstkit.core.exceptions import AdvinstKitError
from advinstkit.core.tool_cache import ToolCache

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the list command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        config = load_config(args)
    except AdvinstKitError as e:
        print_error("Failed to load configuration", str(e))
        return 1

    cache = ToolCache(config.cache_dir)
    versions = cache.find_all_versions(config.tool_name, config.arch)

    if not versions:
        logger.info(f"No cached {config.tool_name} versions in {cache.cache_dir}")
        return 0

    for version in versions:
        print(f"{version}\t{cache.entry_path(config.tool_name, version, config.arch)}")
    return 0
