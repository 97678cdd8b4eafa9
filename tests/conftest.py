"""
Pytest configuration and shared fixtures for jdkkit tests.
"""

import io
import os
import tarfile
import zipfile
from pathlib import Path
from typing import Callable

import pytest

from jdkkit.core.platform import clear_platform_cache

JDK_WRAPPER_DIR = "graalvm-jdk-17.0.12+8.1"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires network access)",
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Runner Environment
# ============================================================================


@pytest.fixture(autouse=True)
def runner_env(tmp_path: Path, monkeypatch) -> Path:
    """
    Point every runner directory at a per-test location.

    Clears INPUT_* variables and the command files so tests never see the
    host's CI environment, and runs from an empty working directory so no
    jdkkit.yaml is picked up.
    """
    runner = tmp_path / "runner"
    temp = runner / "temp"
    tool_cache = runner / "tool-cache"
    workdir = runner / "work"
    for path in (temp, tool_cache, workdir):
        path.mkdir(parents=True)

    for name in list(os.environ):
        if name.startswith("INPUT_"):
            monkeypatch.delenv(name)
    for name in ("GITHUB_ENV", "GITHUB_PATH", "GITHUB_OUTPUT"):
        monkeypatch.delenv(name, raising=False)

    monkeypatch.setenv("RUNNER_TEMP", str(temp))
    monkeypatch.setenv("RUNNER_TOOL_CACHE", str(tool_cache))
    monkeypatch.chdir(workdir)

    # Installers export JAVA_HOME, JAVA_HOME_<major>_<ARCH> and PATH
    saved = {k: v for k, v in os.environ.items() if k.startswith("JAVA_HOME") or k == "PATH"}

    clear_platform_cache()
    yield runner
    clear_platform_cache()

    for name in [k for k in os.environ if k.startswith("JAVA_HOME")]:
        if name not in saved:
            del os.environ[name]
    os.environ.update(saved)


@pytest.fixture
def command_files(runner_env: Path, monkeypatch) -> dict:
    """Create GITHUB_ENV/GITHUB_PATH/GITHUB_OUTPUT files and export them."""
    files = {}
    for name in ("GITHUB_ENV", "GITHUB_PATH", "GITHUB_OUTPUT"):
        path = runner_env / name.lower()
        path.touch()
        monkeypatch.setenv(name, str(path))
        files[name] = path
    return files


# ============================================================================
# JDK Archive Builders
# ============================================================================

JDK_FILES = {
    "bin/java": "#!/bin/sh\necho java\n",
    "release": 'JAVA_VERSION="17.0.12"\n',
    "lib/modules": "modules",
}


def build_jdk_tar_gz(wrapper: str = JDK_WRAPPER_DIR) -> bytes:
    """Build an in-memory tar.gz laid out like a vendor JDK archive."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in JDK_FILES.items():
            data = content.encode()
            info = tarfile.TarInfo(f"{wrapper}/{name}")
            info.size = len(data)
            info.mode = 0o755 if name.startswith("bin/") else 0o644
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def build_jdk_zip(wrapper: str = JDK_WRAPPER_DIR) -> bytes:
    """Build an in-memory zip laid out like a vendor JDK archive."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in JDK_FILES.items():
            info = zipfile.ZipInfo(f"{wrapper}/{name}")
            mode = 0o755 if name.startswith("bin/") else 0o644
            info.external_attr = mode << 16
            zf.writestr(info, content)
    return buffer.getvalue()


@pytest.fixture
def jdk_tar_gz() -> bytes:
    return build_jdk_tar_gz()


@pytest.fixture
def jdk_zip() -> bytes:
    return build_jdk_zip()


@pytest.fixture
def write_archive(tmp_path: Path) -> Callable[[str, bytes], Path]:
    """Write archive bytes to a file under tmp_path."""

    def _write(name: str, data: bytes) -> Path:
        path = tmp_path / "archives" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def installed_jdk(tmp_path: Path) -> Path:
    """An extracted JDK directory ready to be stored in the tool cache."""
    root = tmp_path / "extracted" / JDK_WRAPPER_DIR
    for name, content in JDK_FILES.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root
