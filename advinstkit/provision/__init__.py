"""
Tool provisioning for advinstkit.

This module provides:
- Installer payload download
- Payload extraction into the tool cache
- License and COM registration
- Environment export
- The ToolProvisioner orchestrator
"""

from advinstkit.provision.exporter import EnvironmentExporter
from advinstkit.provision.extractor import ArtifactExtractor
from advinstkit.provision.fetcher import ArtifactFetcher
from advinstkit.provision.provisioner import (
    ProvisionResult,
    ToolProvisioner,
    provision_tool,
)
from advinstkit.provision.registrar import Registrar

__all__ = [
    "ArtifactFetcher",
    "ArtifactExtractor",
    "Registrar",
    "EnvironmentExporter",
    "ProvisionResult",
    "ToolProvisioner",
    "provision_tool",
]
