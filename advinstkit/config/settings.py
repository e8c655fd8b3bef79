"""YAML-backed configuration for advinstkit.

ProvisionerConfig holds every template and name the provisioning pipeline
uses. It is immutable and passed explicitly to each component, so tests and
alternate deployments can substitute values without patching globals.
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from advinstkit.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_SECTION = "advinst"


@dataclass(frozen=True)
class ToolRequest:
    """What the caller wants provisioned."""

    version: str
    license: Optional[str] = None  # None or "" skips registration
    enable_com: bool = False

    def __repr__(self) -> str:
        license_state = "<set>" if self.license else None
        return (
            f"ToolRequest(version={self.version!r}, license={license_state!r}, "
            f"enable_com={self.enable_com!r})"
        )


@dataclass(frozen=True)
class ProvisionerConfig:
    """Templates, names and locations used while provisioning."""

    tool_name: str = "advinst"
    arch: str = "x86"
    download_url_template: str = (
        "https://www.advancedinstaller.com/downloads/{version}/advinst.msi"
    )
    custom_url_variable: str = "advancedinstaller_url"
    executable_path_template: str = "bin/{arch}/advancedinstaller.com"
    msbuild_targets_path: str = "ProgramFilesFolder/MSBuild/Caphyon/Advanced Installer"
    root_variable: str = "AdvancedInstallerRoot"
    msbuild_targets_variable: str = "AdvancedInstallerMSBuildTargets"
    extract_dir_name: str = "advinst"
    installer_engine: str = "msiexec"
    register_switch: str = "/RegisterCI"
    com_switch: str = "/REGSERVER"
    command_timeout: Optional[float] = None
    download_timeout: int = 30
    cache_dir: Optional[Path] = None
    temp_dir: Optional[Path] = None

    def download_url(self, version: str) -> str:
        """Default payload URL for a version."""
        return self.download_url_template.format(version=version)

    def executable_path(self, root: Path) -> Path:
        """Location of the tool executable under a cache root."""
        return Path(root) / self.executable_path_template.format(arch=self.arch)

    def msbuild_targets_dir(self, root: Path) -> Path:
        """Location of the MSBuild integration targets under a cache root."""
        return Path(root) / self.msbuild_targets_path


_PATH_FIELDS = {"cache_dir", "temp_dir"}
_OPTIONAL_FIELDS = _PATH_FIELDS | {"command_timeout"}


def config_from_dict(data: Dict[str, Any]) -> ProvisionerConfig:
    """
    Build a ProvisionerConfig from a mapping of field overrides.

    Args:
        data: Field names mapped to values; unset fields keep their defaults

    Returns:
        ProvisionerConfig instance

    Raises:
        ConfigError: If a key is unknown or a value has the wrong type
    """
    if not isinstance(data, dict):
        raise ConfigError(
            f"'{CONFIG_SECTION}' section must be a mapping, got {type(data).__name__}"
        )

    known = {f.name for f in fields(ProvisionerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    overrides: Dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            if key not in _OPTIONAL_FIELDS:
                raise ConfigError(f"'{key}' must not be empty")
            overrides[key] = None
        elif key in _PATH_FIELDS:
            overrides[key] = Path(str(value)).expanduser()
        elif key == "command_timeout":
            overrides[key] = _number(key, value, float)
        elif key == "download_timeout":
            overrides[key] = _number(key, value, int)
        elif isinstance(value, str):
            overrides[key] = value
        else:
            raise ConfigError(f"'{key}' must be a string, got {type(value).__name__}")

    return replace(ProvisionerConfig(), **overrides)


def _number(key: str, value: Any, kind):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{key}' must be a number, got {value!r}")
    if value <= 0:
        raise ConfigError(f"'{key}' must be positive, got {value!r}")
    return kind(value)


def load_provisioner_config(
    config_file: Optional[Path] = None, required: bool = False
) -> ProvisionerConfig:
    """
    Load provisioner configuration from a YAML file.

    The file holds an ``advinst:`` mapping whose keys are ProvisionerConfig
    field names, for example::

        advinst:
          arch: x64
          download_url_template: https://mirror.example.com/{version}/advinst.msi

    Args:
        config_file: YAML file to read (None means defaults only)
        required: If True, a missing file is an error

    Returns:
        ProvisionerConfig instance

    Raises:
        ConfigError: If the file is missing (when required) or invalid
    """
    if config_file is None:
        return ProvisionerConfig()

    config_file = Path(config_file)
    if not config_file.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return ProvisionerConfig()

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {config_file} must be a mapping")

    return config_from_dict(data.get(CONFIG_SECTION) or {})
