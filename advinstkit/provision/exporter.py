"""
Environment export for downstream build steps.
"""

import logging
from pathlib import Path

from advinstkit.config.settings import ProvisionerConfig
from advinstkit.core.environment import EnvironmentSink

logger = logging.getLogger(__name__)


class EnvironmentExporter:
    """Publishes installation paths through an EnvironmentSink."""

    def __init__(self, config: ProvisionerConfig, sink: EnvironmentSink):
        self.config = config
        self.sink = sink

    def export_variables(self, root: Path) -> None:
        """
        Export the installation root and the MSBuild targets directory.

        Args:
            root: Cache root of the installation
        """
        self.sink.export_variable(self.config.root_variable, str(root))
        self.sink.export_variable(
            self.config.msbuild_targets_variable,
            str(self.config.msbuild_targets_dir(root)),
        )

    def add_to_path(self, executable: Path) -> None:
        """Add the directory holding the executable to the search path."""
        self.sink.add_path(Path(executable).parent)
