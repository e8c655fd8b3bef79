"""
Payload extraction into the tool cache.
"""

import logging
from pathlib import Path
from typing import MutableMapping, Optional

from advinstkit.config.settings import ProvisionerConfig, ToolRequest
from advinstkit.core.directory import get_temp_dir
from advinstkit.core.filesystem import safe_rmtree
from advinstkit.core.process import CommandRequest, CommandRunner
from advinstkit.core.tool_cache import ToolCache
from advinstkit.core.version import normalize_version

logger = logging.getLogger(__name__)


class ArtifactExtractor:
    """
    Unpacks an installer payload with the installer engine and caches the result.

    The engine runs an administrative install in quiet mode, which lays the
    product files out under the target directory without installing anything
    system-wide. The target directory is emptied before every run, so only
    files from the current payload reach the cache.
    """

    def __init__(
        self,
        config: ProvisionerConfig,
        store: ToolCache,
        runner: Optional[CommandRunner] = None,
        environ: Optional[MutableMapping[str, str]] = None,
    ):
        """
        Initialize extractor.

        Args:
            config: Provisioner configuration
            store: Tool cache receiving the extracted files
            runner: Command runner for the installer engine
            environ: Environment mapping for temp dir resolution (default: os.environ)
        """
        self.config = config
        self.store = store
        self.runner = runner or CommandRunner(timeout=config.command_timeout)
        self.environ = environ

    def temp_dir(self) -> Path:
        return get_temp_dir(self.config.temp_dir, self.environ)

    def extract_dir(self) -> Path:
        """Working directory the engine extracts into."""
        return self.temp_dir() / self.config.extract_dir_name

    def extraction_command(self, payload: Path, target_dir: Path) -> CommandRequest:
        return CommandRequest(
            self.config.installer_engine,
            ["/a", str(payload), f"TARGETDIR={target_dir}", "/qn"],
        )

    def extract(self, payload: Path, request: ToolRequest) -> Path:
        """
        Extract a payload and commit it to the tool cache.

        Args:
            payload: Downloaded installer payload
            request: Tool request whose version keys the cache entry

        Returns:
            Cache root of the new entry

        Raises:
            ExternalCommandError: If the engine exits non-zero
            FilesystemError: If a previous extraction cannot be cleared
            ArtifactStoreError: If the cache write fails
        """
        logger.info("Extracting advinst tool")
        target_dir = self.extract_dir()

        if target_dir.exists():
            logger.debug(f"Clearing previous extraction: {target_dir}")
            safe_rmtree(target_dir, require_prefix=self.temp_dir())

        self.runner.run_checked(self.extraction_command(payload, target_dir))

        return self.store.save(
            target_dir,
            self.config.tool_name,
            normalize_version(request.version),
            self.config.arch,
        )
