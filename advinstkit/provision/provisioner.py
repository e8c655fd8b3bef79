"""
Advanced Installer provisioning.

This module composes the tool cache, fetcher, extractor, registrar and
environment exporter into a single call that leaves a registered, licensed
and PATH-visible installation behind:

1. Normalize the requested version
2. Look the installation up in the tool cache
3. On a miss, download and extract a fresh copy (which caches it)
4. Verify the executable exists under the cache root
5. Register the license and COM interface
6. Export installation variables
7. Add the executable directory to the search path

Steps 5-7 run on cache hits too, since license state is not cached.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import MutableMapping, Optional

from advinstkit.config.settings import ProvisionerConfig, ToolRequest
from advinstkit.core.environment import EnvironmentSink, ProcessEnvironmentSink
from advinstkit.core.exceptions import ToolNotFoundError
from advinstkit.core.process import CommandRunner
from advinstkit.core.tool_cache import ToolCache
from advinstkit.core.version import normalize_version
from advinstkit.provision.exporter import EnvironmentExporter
from advinstkit.provision.extractor import ArtifactExtractor
from advinstkit.provision.fetcher import ArtifactFetcher
from advinstkit.provision.registrar import Registrar

logger = logging.getLogger(__name__)


@dataclass
class ProvisionResult:
    """Result of a provisioning call."""

    executable: Path
    """Path to the registered tool executable"""

    root: Path
    """Cache root of the installation"""

    version: str
    """Normalized version used as the cache key"""

    was_cached: bool
    """Whether the installation came from the tool cache"""


class ToolProvisioner:
    """
    Ensures a given Advanced Installer version is ready to use.

    Every collaborator can be injected; anything not supplied is built from
    the configuration. The fetcher and extractor built here resolve the temp
    directory against the same environment mapping.

    Example:
        >>> provisioner = ToolProvisioner()
        >>> exe = provisioner.resolve(ToolRequest(version="21.1", license="KEY"))
        >>> print(f"Using {exe}")
    """

    def __init__(
        self,
        config: Optional[ProvisionerConfig] = None,
        store: Optional[ToolCache] = None,
        fetcher: Optional[ArtifactFetcher] = None,
        extractor: Optional[ArtifactExtractor] = None,
        registrar: Optional[Registrar] = None,
        exporter: Optional[EnvironmentExporter] = None,
        runner: Optional[CommandRunner] = None,
        sink: Optional[EnvironmentSink] = None,
        environ: Optional[MutableMapping[str, str]] = None,
    ):
        self.config = config or ProvisionerConfig()
        runner = runner or CommandRunner(timeout=self.config.command_timeout)

        self.store = store or ToolCache(self.config.cache_dir)
        self.fetcher = fetcher or ArtifactFetcher(self.config, environ=environ)
        self.extractor = extractor or ArtifactExtractor(
            self.config, self.store, runner, environ=environ
        )
        self.registrar = registrar or Registrar(self.config, runner)
        self.exporter = exporter or EnvironmentExporter(
            self.config, sink or ProcessEnvironmentSink()
        )

    def resolve(self, request: ToolRequest) -> Path:
        """
        Provision the requested version and return its executable.

        Args:
            request: Tool request

        Returns:
            Path to the registered, PATH-visible executable

        Raises:
            ToolNotFoundError: If the executable is missing from the resolved root
            FetchError: If the payload cannot be downloaded
            ExternalCommandError: If extraction or registration fails
            ArtifactStoreError: If the cache write fails
        """
        return self.resolve_with_details(request).executable

    def resolve_with_details(self, request: ToolRequest) -> ProvisionResult:
        """
        Provision the requested version.

        Same as resolve() but also reports the cache root, the normalized
        version and whether the cache was hit.
        """
        logger.info(f"Checking cache for advinst tool with version: {request.version}")

        version = normalize_version(request.version)
        if version != request.version:
            logger.info(
                f"Normalized version {request.version} to {version} for tool-cache compatibility"
            )

        root = self.store.find(self.config.tool_name, version, self.config.arch)
        was_cached = root is not None

        if was_cached:
            logger.info("Tool found in cache")
        else:
            logger.info("Tool not found in cache")
            payload = self.fetcher.fetch(request)
            root = self.extractor.extract(payload, request)

        executable = self.config.executable_path(root)
        if not executable.exists():
            raise ToolNotFoundError(executable)

        self.registrar.register(executable, request.license)
        self.registrar.enable_automation_interface(executable, request.enable_com)

        self.exporter.export_variables(root)
        self.exporter.add_to_path(executable)

        logger.debug(f"advinst {version} ready at {executable}")
        return ProvisionResult(
            executable=executable,
            root=Path(root),
            version=version,
            was_cached=was_cached,
        )


def provision_tool(
    version: str,
    license: Optional[str] = None,
    enable_com: bool = False,
    config: Optional[ProvisionerConfig] = None,
) -> Path:
    """
    Convenience function to provision Advanced Installer in one call.

    Args:
        version: Requested version (e.g., "21", "21.1", "21.1.2")
        license: Optional license key
        enable_com: Whether to register the COM automation interface
        config: Optional provisioner configuration

    Returns:
        Path to the registered tool executable

    Example:
        >>> from advinstkit.provision.provisioner import provision_tool
        >>> exe = provision_tool("21.1", license="KEY")
    """
    provisioner = ToolProvisioner(config)
    return provisioner.resolve(
        ToolRequest(version=version, license=license, enable_com=enable_com)
    )
