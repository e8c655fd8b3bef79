"""
Install command implementation.

Provisions Advanced Installer and prints the path to its executable.
"""

import logging

from advinstkit.cli.utils import (
    load_config,
    print_error,
    resolve_license,
    select_environment_sink,
)
from advinstkit.config.settings import ToolRequest
from advinstkit.core.exceptions import AdvinstKitError
from advinstkit.provision.provisioner import ToolProvisioner

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

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

    request = ToolRequest(
        version=args.tool_version,
        license=resolve_license(args),
        enable_com=args.enable_com,
    )
    logger.debug(f"Request: {request}")

    provisioner = ToolProvisioner(config, sink=select_environment_sink(args))

    try:
        result = provisioner.resolve_with_details(request)
    except AdvinstKitError as e:
        print_error(f"Failed to provision advinst {request.version}", str(e))
        return 1

    source = "cache" if result.was_cached else "download"
    logger.info(f"advinst {result.version} ready (from {source})")
    print(result.executable)
    return 0
