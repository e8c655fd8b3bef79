"""
Core functionality for advinstkit.

This package contains the foundational modules that the provisioning
pipeline depends on.
"""

from .directory import (
    get_global_cache_dir,
    get_tool_cache_dir,
    get_temp_dir,
    DirectoryError,
)

from .environment import (
    EnvironmentSink,
    MemoryEnvironmentSink,
    ProcessEnvironmentSink,
    GitHubActionsEnvironmentSink,
    get_variable,
)

from .process import (
    CommandRequest,
    CommandResult,
    CommandRunner,
)

from .tool_cache import (
    ToolCache,
)

from .version import (
    normalize_version,
)

from .exceptions import (
    AdvinstKitError,
    ToolNotFoundError,
    FetchError,
    ExternalCommandError,
    ArtifactStoreError,
    StoreLockTimeout,
    ConfigError,
)

__all__ = [
    "get_global_cache_dir",
    "get_tool_cache_dir",
    "get_temp_dir",
    "DirectoryError",
    "EnvironmentSink",
    "MemoryEnvironmentSink",
    "ProcessEnvironmentSink",
    "GitHubActionsEnvironmentSink",
    "get_variable",
    "CommandRequest",
    "CommandResult",
    "CommandRunner",
    "ToolCache",
    "normalize_version",
    "AdvinstKitError",
    "ToolNotFoundError",
    "FetchError",
    "ExternalCommandError",
    "ArtifactStoreError",
    "StoreLockTimeout",
    "ConfigError",
]
