"""
Tests for the tool cache.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from filelock import FileLock, Timeout

from jdkkit.core.exceptions import ToolCacheError, ToolCacheLockTimeout
from jdkkit.core.tool_cache import COMPLETE_SUFFIX, ToolCache

TOOL = "Java_GraalVM_jdk"


@pytest.fixture
def cache(tmp_path):
    return ToolCache(tmp_path / "cache")


class TestToolCacheLookup:
    """Test looking up entries."""

    def test_default_root_from_environment(self, runner_env):
        """Test the root defaults to RUNNER_TOOL_CACHE."""
        assert ToolCache().root == runner_env / "tool-cache"

    def test_entry_path_layout(self, cache):
        """Test entries live at <root>/<tool>/<version>/<arch>."""
        assert cache.entry_path(TOOL, "17", "x64") == cache.root / TOOL / "17" / "x64"

    @pytest.mark.parametrize("key", [("", "17", "x64"), (TOOL, "", "x64"), (TOOL, "17", "")])
    def test_incomplete_key(self, cache, key):
        """Test every key component is required."""
        with pytest.raises(ToolCacheError, match="must be complete"):
            cache.entry_path(*key)

    def test_find_miss(self, cache):
        """Test a missing entry is None."""
        assert cache.find(TOOL, "17", "x64") is None

    def test_find_ignores_incomplete_entry(self, cache):
        """Test a directory without its marker is not an installation."""
        (cache.root / TOOL / "17" / "x64" / "bin").mkdir(parents=True)

        assert cache.find(TOOL, "17", "x64") is None

    def test_exists_alias(self, cache, installed_jdk):
        """Test exists() behaves like find()."""
        cache.cache_dir(installed_jdk, TOOL, "17", "x64")

        assert cache.exists(TOOL, "17", "x64") == cache.find(TOOL, "17", "x64")

    def test_find_all_versions(self, cache, installed_jdk):
        """Test only completed entries for the architecture are listed."""
        cache.cache_dir(installed_jdk, TOOL, "21.0.2", "x64")
        cache.cache_dir(installed_jdk, TOOL, "17.0.12", "x64")
        cache.cache_dir(installed_jdk, TOOL, "17.0.11", "aarch64")
        (cache.root / TOOL / "17.0.10" / "x64").mkdir(parents=True)

        assert cache.find_all_versions(TOOL, "x64") == ["17.0.12", "21.0.2"]

    def test_find_all_versions_unknown_tool(self, cache):
        """Test unknown tools have no versions."""
        assert cache.find_all_versions("Java_Unknown_jdk", "x64") == []


class TestToolCacheStore:
    """Test storing entries."""

    def test_cache_dir_copies_and_marks_complete(self, cache, installed_jdk):
        """Test a store copies the tree and writes the marker."""
        path = cache.cache_dir(installed_jdk, TOOL, "17", "x64")

        assert path == cache.root / TOOL / "17" / "x64"
        assert (path / "bin" / "java").exists()
        assert (path.parent / f"x64{COMPLETE_SUFFIX}").exists()
        assert cache.find(TOOL, "17", "x64") == path

    def test_source_left_in_place(self, cache, installed_jdk):
        """Test the source directory is copied, not moved."""
        cache.cache_dir(installed_jdk, TOOL, "17", "x64")

        assert (installed_jdk / "bin" / "java").exists()

    def test_store_alias(self, cache, installed_jdk):
        """Test store() behaves like cache_dir()."""
        assert cache.store(installed_jdk, TOOL, "17", "x64") == cache.find(TOOL, "17", "x64")

    def test_completed_entry_is_not_overwritten(self, cache, installed_jdk):
        """Test a second store of the same key returns the existing entry."""
        first = cache.cache_dir(installed_jdk, TOOL, "17", "x64")
        (installed_jdk / "release").write_text("changed")

        second = cache.cache_dir(installed_jdk, TOOL, "17", "x64")

        assert second == first
        assert (second / "release").read_text() != "changed"

    def test_incomplete_entry_is_replaced(self, cache, installed_jdk):
        """Test leftovers of a crashed store are replaced."""
        stale = cache.root / TOOL / "17" / "x64"
        stale.mkdir(parents=True)
        (stale / "stale-file").write_text("x")

        path = cache.cache_dir(installed_jdk, TOOL, "17", "x64")

        assert not (path / "stale-file").exists()
        assert (path / "bin" / "java").exists()

    def test_missing_source(self, cache, tmp_path):
        """Test storing a missing directory."""
        with pytest.raises(ToolCacheError, match="does not exist"):
            cache.cache_dir(tmp_path / "missing", TOOL, "17", "x64")

    def test_failed_copy_leaves_no_entry(self, cache, installed_jdk):
        """Test a failing copy removes the partial entry and leaves no marker."""

        def partial_copy(source, destination):
            Path(destination).mkdir(parents=True)
            (Path(destination) / "half").write_text("x")
            raise OSError("No space left on device")

        with patch("jdkkit.core.tool_cache.copy_tree", side_effect=partial_copy):
            with pytest.raises(ToolCacheError, match="No space left"):
                cache.cache_dir(installed_jdk, TOOL, "17", "x64")

        entry = cache.root / TOOL / "17" / "x64"
        assert not entry.exists()
        assert not (entry.parent / f"x64{COMPLETE_SUFFIX}").exists()
        assert cache.find(TOOL, "17", "x64") is None

    def test_lock_timeout(self, cache, installed_jdk):
        """Test lock timeouts surface as ToolCacheLockTimeout."""
        lock = MagicMock()
        lock.__enter__.side_effect = Timeout("x64.lock")

        with patch("jdkkit.core.tool_cache.FileLock", return_value=lock):
            with pytest.raises(ToolCacheLockTimeout, match="Could not acquire"):
                cache.cache_dir(installed_jdk, TOOL, "17", "x64")

    def test_lock_is_per_key(self, cache, installed_jdk):
        """Test the lock file sits next to the entry it guards."""
        with patch("jdkkit.core.tool_cache.FileLock", wraps=FileLock) as mock_lock:
            cache.cache_dir(installed_jdk, TOOL, "17", "x64")

        lock_path = mock_lock.call_args[0][0]
        assert Path(lock_path) == cache.root / TOOL / "17" / "x64.lock"
