"""
License registration and COM enablement.
"""

import logging
from pathlib import Path
from typing import Optional

from advinstkit.config.settings import ProvisionerConfig
from advinstkit.core.process import CommandRequest, CommandRunner

logger = logging.getLogger(__name__)


class Registrar:
    """
    Runs the tool's own registration commands against an installation.

    Both operations are skipped when their input is absent, and both are
    safe to repeat, so they run on every provisioning call.
    """

    def __init__(self, config: ProvisionerConfig, runner: Optional[CommandRunner] = None):
        self.config = config
        self.runner = runner or CommandRunner(timeout=config.command_timeout)

    def register(self, executable: Path, license: Optional[str]) -> None:
        """
        Activate a license.

        Args:
            executable: Tool executable
            license: License key; None or empty skips registration

        Raises:
            ExternalCommandError: If the command exits non-zero
        """
        if not license:
            return

        logger.info("Registering advinst tool")
        self.runner.run_checked(
            CommandRequest(executable, [self.config.register_switch, license])
        )

    def enable_automation_interface(self, executable: Path, enabled: bool) -> None:
        """
        Register the tool's COM automation interface.

        Args:
            executable: Tool executable
            enabled: Whether to register it at all

        Raises:
            ExternalCommandError: If the command exits non-zero
        """
        if not enabled:
            return

        logger.info("Enabling advinst COM interface")
        self.runner.run_checked(CommandRequest(executable, [self.config.com_switch]))
