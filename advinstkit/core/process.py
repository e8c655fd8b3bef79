"""
External command execution.

Commands are described as typed requests (an executable plus an argument
list) and never as pre-joined shell strings. The contract for every caller is
the same: exit code 0 means success, anything else is an ExternalCommandError
whose message is the command's standard output.
"""

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from advinstkit.core.exceptions import ExternalCommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandRequest:
    """An external command to run."""

    executable: Union[str, Path]
    args: List[str] = field(default_factory=list)

    def argv(self) -> List[str]:
        """Full argument vector, executable first."""
        return [str(self.executable)] + [str(arg) for arg in self.args]


@dataclass
class CommandResult:
    """Outcome of an external command."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class CommandRunner:
    """
    Runs external commands and captures their output.

    Args:
        timeout: Seconds to wait for each command (None waits forever)
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def run(self, request: CommandRequest) -> CommandResult:
        """
        Run a command and capture its output.

        Args:
            request: Command to run

        Returns:
            CommandResult with exit code and captured output

        Raises:
            ExternalCommandError: If the command cannot be started or times out
        """
        argv = request.argv()
        logger.debug(f"Running: {argv[0]} ({len(argv) - 1} argument(s))")

        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ExternalCommandError(
                f"Command timed out after {self.timeout}s: {argv[0]}",
                command=argv,
            ) from e
        except OSError as e:
            raise ExternalCommandError(
                f"Failed to start {argv[0]}: {e}", command=argv
            ) from e

        return CommandResult(
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def run_checked(self, request: CommandRequest) -> CommandResult:
        """
        Run a command and require a zero exit code.

        Raises:
            ExternalCommandError: If the command exits non-zero. The message
                is the command's standard output.
        """
        result = self.run(request)
        if not result.succeeded:
            logger.debug(f"{request.argv()[0]} exited with code {result.exit_code}")
            raise ExternalCommandError(
                result.stdout,
                exit_code=result.exit_code,
                stderr=result.stderr,
                command=request.argv(),
            )
        return result
