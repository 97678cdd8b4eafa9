"""
Shared tool cache for installed JDKs.

The tool cache is a directory tree shared by every job on a runner:

    <root>/<tool>/<version>/<arch>/            installed tool
    <root>/<tool>/<version>/<arch>.complete    marker written after a full copy

An entry only counts as present once its marker exists, so a crashed copy is
never mistaken for an installation. Stores are serialised per key with a file
lock, which makes check-and-store atomic across concurrent jobs.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional, Union

from filelock import FileLock, Timeout

from jdkkit.core.directory import get_tool_cache_dir
from jdkkit.core.exceptions import ToolCacheError, ToolCacheLockTimeout
from jdkkit.core.filesystem import FilesystemError, copy_tree, safe_rmtree

logger = logging.getLogger(__name__)

COMPLETE_SUFFIX = ".complete"


class ToolCache:
    """
    Directory-backed key/value store keyed by (tool name, version, architecture).

    Example:
        >>> cache = ToolCache()
        >>> path = cache.find("Java_GraalVM_jdk", "17", "x64")
        >>> if path is None:
        ...     path = cache.cache_dir(extracted_jdk, "Java_GraalVM_jdk", "17", "x64")
    """

    def __init__(self, root: Optional[Union[str, Path]] = None, lock_timeout: int = 600):
        """
        Initialize tool cache.

        Args:
            root: Cache root (default: RUNNER_TOOL_CACHE)
            lock_timeout: Timeout in seconds for acquiring an entry lock
        """
        self.root = Path(root) if root is not None else get_tool_cache_dir()
        self.lock_timeout = lock_timeout

        logger.debug(f"Initialized tool cache at {self.root}")

    def entry_path(self, tool_name: str, version: str, architecture: str) -> Path:
        """Path an entry occupies, whether or not it exists."""
        if not tool_name or not version or not architecture:
            raise ToolCacheError(
                f"Tool cache key must be complete: "
                f"({tool_name!r}, {version!r}, {architecture!r})"
            )
        return self.root / tool_name / version / architecture

    def _marker_path(self, entry: Path) -> Path:
        return entry.parent / f"{entry.name}{COMPLETE_SUFFIX}"

    def _is_complete(self, entry: Path) -> bool:
        return entry.is_dir() and self._marker_path(entry).exists()

    @contextmanager
    def _lock(self, entry: Path):
        """
        Context manager for per-entry locking.

        Raises:
            ToolCacheLockTimeout: If lock cannot be acquired within timeout
        """
        entry.parent.mkdir(parents=True, exist_ok=True)
        lock_path = entry.parent / f"{entry.name}.lock"
        lock = FileLock(lock_path, timeout=self.lock_timeout)

        try:
            with lock:
                logger.debug(f"Acquired tool cache lock: {lock_path}")
                yield
            logger.debug(f"Released tool cache lock: {lock_path}")
        except Timeout as e:
            raise ToolCacheLockTimeout(
                f"Could not acquire tool cache lock {lock_path} "
                f"within {self.lock_timeout} seconds"
            ) from e

    def find(self, tool_name: str, version: str, architecture: str) -> Optional[Path]:
        """
        Look up a completed entry.

        Args:
            tool_name: Tool folder name
            version: Exact version folder name
            architecture: Architecture folder name

        Returns:
            Installed directory, or None if absent or incomplete
        """
        entry = self.entry_path(tool_name, version, architecture)
        if self._is_complete(entry):
            logger.debug(f"Tool cache hit: {entry}")
            return entry
        logger.debug(f"Tool cache miss: {entry}")
        return None

    # Alias for presence checks
    exists = find

    def find_all_versions(self, tool_name: str, architecture: str) -> List[str]:
        """
        List versions with a completed entry for the architecture.

        Returns:
            Version folder names, sorted
        """
        tool_dir = self.root / tool_name
        if not tool_dir.is_dir():
            return []

        versions = [
            child.name
            for child in tool_dir.iterdir()
            if child.is_dir() and self._is_complete(child / architecture)
        ]
        return sorted(versions)

    def cache_dir(
        self,
        source_dir: Union[str, Path],
        tool_name: str,
        version: str,
        architecture: str,
    ) -> Path:
        """
        Copy an installation into the cache and mark it complete.

        If another process completed the same entry first, that entry is
        returned and the source is left untouched.

        Args:
            source_dir: Directory holding the installation
            tool_name: Tool folder name
            version: Version folder name
            architecture: Architecture folder name

        Returns:
            Cache-owned path of the installation

        Raises:
            ToolCacheError: If the source is missing or the copy fails
        """
        source_dir = Path(source_dir)
        if not source_dir.is_dir():
            raise ToolCacheError(f"Source directory does not exist: {source_dir}")

        entry = self.entry_path(tool_name, version, architecture)

        with self._lock(entry):
            if self._is_complete(entry):
                logger.info(f"Tool cache entry completed by another process: {entry}")
                return entry

            marker = self._marker_path(entry)
            try:
                marker.unlink(missing_ok=True)
                safe_rmtree(entry, require_prefix=self.root)
                copy_tree(source_dir, entry)
                marker.touch()
            except (OSError, FilesystemError) as e:
                logger.error(f"Failed to store {entry}: {e}")
                self._discard(entry)
                raise ToolCacheError(f"Failed to store {entry} in tool cache: {e}") from e

        logger.info(f"Cached {tool_name} {version} ({architecture}) at {entry}")
        return entry

    # Alias for the write
    store = cache_dir

    def _discard(self, entry: Path):
        """Remove a partially copied entry."""
        try:
            safe_rmtree(entry, require_prefix=self.root)
        except (OSError, FilesystemError) as e:
            logger.warning(f"Failed to remove partial tool cache entry {entry}: {e}")


__all__ = ["ToolCache", "COMPLETE_SUFFIX"]
