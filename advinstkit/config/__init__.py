"""
Configuration for advinstkit.

Provides the immutable provisioner configuration and the per-invocation
tool request.
"""

from advinstkit.config.settings import (
    CONFIG_SECTION,
    ProvisionerConfig,
    ToolRequest,
    config_from_dict,
    load_provisioner_config,
)

__all__ = [
    "CONFIG_SECTION",
    "ProvisionerConfig",
    "ToolRequest",
    "config_from_dict",
    "load_provisioner_config",
]
