"""
Directory resolution for advinstkit.

Resolves where cached tool installations live and where payloads are
downloaded and extracted. CI runners provide both locations through
environment variables; outside a runner the global cache directory and the
system temp directory are used instead.

Directory Structure:
    Global Cache (~/.advinstkit/ or %USERPROFILE%\\.advinstkit\\):
        - tool-cache/     : Cached tool installations (<name>/<version>/<arch>)
        - lock/           : Cache entry lock files
"""

import os
import tempfile
from pathlib import Path
from typing import Mapping, Optional

from advinstkit.core.exceptions import AdvinstKitError

TOOL_CACHE_VARIABLE = "RUNNER_TOOL_CACHE"
TEMP_DIR_VARIABLE = "RUNNER_TEMP"


class DirectoryError(AdvinstKitError):
    """Base exception for directory-related errors."""

    pass


def get_global_cache_dir() -> Path:
    """
    Get the platform-specific global cache directory path.

    Returns:
        Path: The global cache directory path.
            - Windows: %USERPROFILE%\\.advinstkit
            - Linux/macOS: ~/.advinstkit/
    """
    if os.name == "nt":
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise DirectoryError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine global cache directory."
            )
        return Path(user_profile) / ".advinstkit"
    else:
        return Path.home() / ".advinstkit"


def get_tool_cache_dir(
    override: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> Path:
    """
    Get the root directory of the tool cache.

    Args:
        override: Explicit directory from configuration, wins if set
        environ: Environment mapping (default: os.environ)

    Returns:
        Tool cache root directory
    """
    if override is not None:
        return Path(override)

    environ = os.environ if environ is None else environ
    runner_cache = environ.get(TOOL_CACHE_VARIABLE)
    if runner_cache:
        return Path(runner_cache)

    return get_global_cache_dir() / "tool-cache"


def get_temp_dir(
    override: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> Path:
    """
    Get the scratch directory for downloads and extraction.

    Args:
        override: Explicit directory from configuration, wins if set
        environ: Environment mapping (default: os.environ)

    Returns:
        Temporary working directory
    """
    if override is not None:
        return Path(override)

    environ = os.environ if environ is None else environ
    runner_temp = environ.get(TEMP_DIR_VARIABLE)
    if runner_temp:
        return Path(runner_temp)

    return Path(tempfile.gettempdir())
