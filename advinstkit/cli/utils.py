"""
Shared utilities for CLI commands.

Provides configuration loading, environment sink selection and consistent
error output across commands.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

from advinstkit.config.settings import ProvisionerConfig, load_provisioner_config
from advinstkit.core.environment import (
    EnvironmentSink,
    GitHubActionsEnvironmentSink,
    ProcessEnvironmentSink,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "advinstkit.yaml"
LICENSE_VARIABLE = "ADVINST_LICENSE"


# ============================================================================
# Configuration Management
# ============================================================================


def load_config(args) -> ProvisionerConfig:
    """
    Load provisioner configuration for a CLI invocation.

    An explicit --config file must exist. Without one, ./advinstkit.yaml is
    used when present and defaults otherwise.

    Args:
        args: Parsed arguments with a config attribute

    Returns:
        ProvisionerConfig instance

    Raises:
        ConfigError: If the configuration is missing or invalid
    """
    config_file = getattr(args, "config", None)
    if config_file:
        return load_provisioner_config(Path(config_file), required=True)

    return load_provisioner_config(Path.cwd() / DEFAULT_CONFIG_NAME)


def resolve_license(
    args, environ: Optional[Mapping[str, str]] = None
) -> Optional[str]:
    """
    Get the license from --license, falling back to ADVINST_LICENSE.

    Returns:
        License key, or None when neither is set
    """
    if getattr(args, "license", None):
        return args.license

    environ = os.environ if environ is None else environ
    return environ.get(LICENSE_VARIABLE) or None


def select_environment_sink(
    args, environ: Optional[Mapping[str, str]] = None
) -> EnvironmentSink:
    """
    Choose where exported variables go.

    GitHub Actions environment files are written when --github-actions is
    given or the process runs inside a GitHub Actions job.
    """
    environ = os.environ if environ is None else environ
    if getattr(args, "github_actions", False) or environ.get("GITHUB_ACTIONS") == "true":
        logger.debug("Exporting to GitHub Actions environment files")
        return GitHubActionsEnvironmentSink()

    return ProcessEnvironmentSink()


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)
