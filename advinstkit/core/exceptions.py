"""
Centralized exception hierarchy for advinstkit.

Every error raised while provisioning is fatal: nothing in this package
retries, and nothing is rolled back once a step has failed.
"""

from typing import Optional, Sequence


# ============================================================================
# Base Exceptions
# ============================================================================


class AdvinstKitError(Exception):
    """Base exception for all advinstkit errors."""

    pass


# ============================================================================
# Resolution Exceptions
# ============================================================================


class ToolNotFoundError(AdvinstKitError):
    """Raised when the expected executable is missing from a resolved root."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Expected to find {path}, but it was not found.")


class FetchError(AdvinstKitError):
    """Raised when the installer payload cannot be retrieved."""

    pass


# ============================================================================
# External Command Exceptions
# ============================================================================


class ExternalCommandError(AdvinstKitError):
    """
    Raised when an external command exits with a non-zero code.

    The message is the command's own standard output, passed through
    untranslated.
    """

    def __init__(
        self,
        stdout: str,
        exit_code: Optional[int] = None,
        stderr: str = "",
        command: Optional[Sequence[str]] = None,
    ):
        self.stdout = stdout
        self.exit_code = exit_code
        self.stderr = stderr
        self.command = list(command) if command else []
        super().__init__(stdout)


# ============================================================================
# Store Exceptions
# ============================================================================


class ArtifactStoreError(AdvinstKitError):
    """Base exception for tool cache write failures."""

    pass


class StoreLockTimeout(ArtifactStoreError):
    """Raised when a cache entry lock cannot be acquired within timeout."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(AdvinstKitError):
    """Configuration parsing or validation error."""

    pass
