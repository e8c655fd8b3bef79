"""
Process environment capabilities.

Provisioning publishes variables and search-path entries for later build
steps. Those writes go through an EnvironmentSink so that the destination
(this process, a CI runner's environment files, or an in-memory record) is
chosen by the caller.
"""

import logging
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, MutableMapping, Optional, Union

logger = logging.getLogger(__name__)


def get_variable(
    name: str, environ: Optional[MutableMapping[str, str]] = None
) -> Optional[str]:
    """
    Read a variable by its exact name, falling back to the upper-cased name.

    Empty values are treated as unset.

    Args:
        name: Variable name
        environ: Environment mapping (default: os.environ)

    Returns:
        Variable value, or None if unset or empty
    """
    environ = os.environ if environ is None else environ
    for candidate in (name, name.upper()):
        value = environ.get(candidate)
        if value:
            return value
    return None


class EnvironmentSink(ABC):
    """Destination for exported variables and search-path entries."""

    @abstractmethod
    def export_variable(self, name: str, value: str) -> None:
        """
        Publish a variable, overwriting any previous value.

        Args:
            name: Variable name
            value: Variable value
        """
        pass

    @abstractmethod
    def add_path(self, directory: Union[str, Path]) -> None:
        """
        Put a directory in front of the executable search path.

        Args:
            directory: Directory to add
        """
        pass


class MemoryEnvironmentSink(EnvironmentSink):
    """Records exports without touching process state."""

    def __init__(self):
        self.variables: Dict[str, str] = {}
        self.paths: List[str] = []

    def export_variable(self, name: str, value: str) -> None:
        self.variables[name] = value

    def add_path(self, directory: Union[str, Path]) -> None:
        self.paths.insert(0, str(directory))


class ProcessEnvironmentSink(EnvironmentSink):
    """
    Writes exports into the environment of the current process.

    Child processes started afterwards inherit the values.
    """

    def __init__(self, environ: Optional[MutableMapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def export_variable(self, name: str, value: str) -> None:
        logger.debug(f"Exporting {name}={value}")
        self.environ[name] = value

    def add_path(self, directory: Union[str, Path]) -> None:
        directory = str(directory)
        current = self.environ.get("PATH", "")
        self.environ["PATH"] = (
            f"{directory}{os.pathsep}{current}" if current else directory
        )
        logger.debug(f"Added to PATH: {directory}")


class GitHubActionsEnvironmentSink(ProcessEnvironmentSink):
    """
    Exports to the current process and to GitHub Actions environment files.

    Values appended to the files named by GITHUB_ENV and GITHUB_PATH are
    picked up by the runner for every later step of the job. When those
    variables are unset only the current process is updated.
    """

    ENV_FILE_VARIABLE = "GITHUB_ENV"
    PATH_FILE_VARIABLE = "GITHUB_PATH"

    def export_variable(self, name: str, value: str) -> None:
        super().export_variable(name, value)

        env_file = self.environ.get(self.ENV_FILE_VARIABLE)
        if env_file:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            if delimiter in name or delimiter in value:
                raise ValueError(f"Unexpected input: value contains delimiter {delimiter}")
            _append_line(env_file, os.linesep.join([f"{name}<<{delimiter}", value, delimiter]))

    def add_path(self, directory: Union[str, Path]) -> None:
        super().add_path(directory)

        path_file = self.environ.get(self.PATH_FILE_VARIABLE)
        if path_file:
            _append_line(path_file, str(directory))


def _append_line(file_path: str, line: str) -> None:
    # Line endings are written exactly as given
    with open(file_path, "a", encoding="utf-8", newline="") as f:
        f.write(f"{line}{os.linesep}")
