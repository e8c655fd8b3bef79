"""
Content-addressed tool cache keyed by (name, version, arch).

Each cached installation lives at ``<cache_dir>/<name>/<version>/<arch>``. A
sibling ``<arch>.complete`` marker is written only after the copy finished, and
find() ignores entries without it, so a half-written entry is never reported
as a hit.

The cache stores whatever version string it is given. Callers normalize
versions before both find() and save().
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from filelock import FileLock, Timeout
from packaging.version import InvalidVersion, Version

from advinstkit.core.directory import get_tool_cache_dir
from advinstkit.core.exceptions import ArtifactStoreError, StoreLockTimeout
from advinstkit.core.filesystem import (
    FilesystemError,
    atomic_write,
    recursive_copy,
    safe_rmtree,
)

logger = logging.getLogger(__name__)

COMPLETE_SUFFIX = ".complete"


class ToolCache:
    """
    Directory-backed tool cache.

    Example:
        >>> cache = ToolCache(Path("/opt/hostedtoolcache"))
        >>> root = cache.find("advinst", "21.1.0", "x86")
        >>> if root is None:
        ...     root = cache.save(Path("/tmp/advinst"), "advinst", "21.1.0", "x86")
    """

    def __init__(self, cache_dir: Optional[Path] = None, lock_timeout: int = 300):
        """
        Initialize tool cache.

        Args:
            cache_dir: Cache root (default: runner tool cache or global cache)
            lock_timeout: Timeout in seconds for acquiring an entry lock
        """
        self.cache_dir = get_tool_cache_dir(cache_dir)
        self.lock_dir = self.cache_dir / ".locks"
        self.lock_timeout = lock_timeout

        logger.debug(f"Initialized tool cache at {self.cache_dir}")

    def entry_path(self, name: str, version: str, arch: str) -> Path:
        """Get the directory an entry occupies, whether or not it exists."""
        return self.cache_dir / name / version / arch

    def _marker_path(self, name: str, version: str, arch: str) -> Path:
        return self.cache_dir / name / version / f"{arch}{COMPLETE_SUFFIX}"

    @contextmanager
    def _lock(self, name: str, version: str, arch: str):
        """
        Acquire exclusive lock for a single cache entry.

        Raises:
            StoreLockTimeout: If lock cannot be acquired within timeout
        """
        self.lock_dir.mkdir(parents=True, exist_ok=True)
        safe_id = f"{name}-{version}-{arch}".replace("/", "-").replace("\\", "-")
        lock = FileLock(self.lock_dir / f"{safe_id}.lock", timeout=self.lock_timeout)

        try:
            with lock:
                logger.debug(f"Acquired cache lock: {safe_id}")
                yield
            logger.debug(f"Released cache lock: {safe_id}")
        except Timeout as e:
            raise StoreLockTimeout(
                f"Could not acquire cache lock for {safe_id} within {self.lock_timeout} seconds"
            ) from e

    def find(self, name: str, version: str, arch: str) -> Optional[Path]:
        """
        Look up a completed cache entry.

        Args:
            name: Tool name
            version: Version string, used verbatim
            arch: Architecture

        Returns:
            Entry root directory, or None if absent or incomplete
        """
        if not name or not version or not arch:
            return None

        entry = self.entry_path(name, version, arch)
        marker = self._marker_path(name, version, arch)

        if entry.is_dir() and marker.is_file():
            logger.debug(f"Found {name} {version} {arch} in tool cache: {entry}")
            return entry

        logger.debug(f"Tool cache miss: {name} {version} {arch}")
        return None

    def save(self, source_dir: Path, name: str, version: str, arch: str) -> Path:
        """
        Copy a directory into the cache as a new entry.

        Any stale entry for the same key is removed first.

        Args:
            source_dir: Directory holding the extracted tool
            name: Tool name
            version: Version string, used verbatim
            arch: Architecture

        Returns:
            Entry root directory

        Raises:
            ArtifactStoreError: If the copy fails
            StoreLockTimeout: If the entry lock cannot be acquired
        """
        if not name or not version or not arch:
            raise ArtifactStoreError(
                f"Invalid cache key: name={name!r} version={version!r} arch={arch!r}"
            )

        source_dir = Path(source_dir)
        entry = self.entry_path(name, version, arch)
        marker = self._marker_path(name, version, arch)

        logger.info(f"Caching tool {name} {version} {arch}")

        with self._lock(name, version, arch):
            try:
                marker.unlink(missing_ok=True)
                safe_rmtree(entry, require_prefix=self.cache_dir)
                recursive_copy(source_dir, entry)
                atomic_write(marker, datetime.now().isoformat())
            except (FilesystemError, OSError, ValueError) as e:
                raise ArtifactStoreError(
                    f"Failed to cache {name} {version} {arch} from {source_dir}: {e}"
                ) from e

        logger.debug(f"Cached {name} {version} {arch} at {entry}")
        return entry

    def find_all_versions(self, name: str, arch: str) -> List[str]:
        """
        List every completed version of a tool for one architecture.

        Args:
            name: Tool name
            arch: Architecture

        Returns:
            Versions in ascending order. Strings that are not valid versions
            sort after the valid ones.
        """
        tool_dir = self.cache_dir / name
        if not tool_dir.is_dir():
            return []

        versions = [
            child.name
            for child in tool_dir.iterdir()
            if child.is_dir() and self.find(name, child.name, arch) is not None
        ]

        return sorted(versions, key=_version_sort_key)


def _version_sort_key(version: str):
    try:
        return (0, Version(version), "")
    except InvalidVersion:
        return (1, Version("0"), version)
