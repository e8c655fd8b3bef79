"""
Installer payload retrieval.
"""

import logging
import uuid
from pathlib import Path
from typing import Callable, MutableMapping, Optional
from urllib.parse import unquote, urlparse

from advinstkit.config.settings import ProvisionerConfig, ToolRequest
from advinstkit.core.directory import get_temp_dir
from advinstkit.core.download import DownloadProgress, download_file
from advinstkit.core.environment import get_variable

logger = logging.getLogger(__name__)

DEFAULT_PAYLOAD_NAME = "advinst.msi"


class ArtifactFetcher:
    """
    Downloads the installer payload for a request.

    A custom URL taken from the environment overrides the version-templated
    default location. The requested version then plays no part in sourcing
    the payload, though it still decides the cache key.
    """

    def __init__(
        self,
        config: ProvisionerConfig,
        downloader: Callable[..., Path] = download_file,
        environ: Optional[MutableMapping[str, str]] = None,
    ):
        """
        Initialize fetcher.

        Args:
            config: Provisioner configuration
            downloader: Function with the signature of download_file()
            environ: Environment mapping for the override lookup (default: os.environ)
        """
        self.config = config
        self.downloader = downloader
        self.environ = environ

    def source_url(self, request: ToolRequest) -> str:
        """
        Decide where the payload comes from.

        Args:
            request: Tool request

        Returns:
            Custom URL if set, otherwise the default URL for the raw version
        """
        custom_url = get_variable(self.config.custom_url_variable, self.environ)
        if custom_url:
            logger.info(f"Using custom URL for advinst tool: {custom_url}")
            return custom_url

        return self.config.download_url(request.version)

    def fetch(self, request: ToolRequest) -> Path:
        """
        Download the payload to a fresh location under the temp directory.

        Args:
            request: Tool request

        Returns:
            Path to the downloaded payload

        Raises:
            FetchError: If the download fails
        """
        url = self.source_url(request)
        logger.info(f"Downloading advinst tool with version: {request.version}")

        destination = (
            get_temp_dir(self.config.temp_dir, self.environ)
            / str(uuid.uuid4())
            / _payload_name(url)
        )
        return self.downloader(
            url,
            destination,
            progress_callback=_log_progress,
            timeout=self.config.download_timeout,
        )


def _log_progress(progress: DownloadProgress) -> None:
    logger.debug(f"Downloading: {progress}")


def _payload_name(url: str) -> str:
    name = Path(unquote(urlparse(url).path)).name
    return name or DEFAULT_PAYLOAD_NAME
