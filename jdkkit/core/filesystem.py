"""
File system utilities for jdkkit.

This module provides the archive and directory operations the installer
needs:
- Archive extraction (tar, tar.gz, zip, and a 7-Zip fallback for the rest)
- Windows archive renaming so extractors recognise downloaded files
- Locating the installation root inside an extracted archive
- Safe deletion and tree copying

All extraction validates member paths to block directory traversal.
"""

import logging
import os
import shutil
import subprocess
import sys
import tarfile
import uuid
import zipfile
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from jdkkit.core.directory import get_temp_dir
from jdkkit.core.exceptions import ExtractionFailure, UnsupportedArchiveFormat

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


class InsecureArchiveError(ExtractionFailure):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to (under) parent directory.

    Example:
        >>> is_relative_to(Path("/opt/cache/java/17"), Path("/opt/cache"))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


# ============================================================================
# Archive Formats
# ============================================================================


class ArchiveFormat(Enum):
    """Archive formats the extractor dispatches on."""

    TAR = "tar"
    TAR_GZ = "tar.gz"
    ZIP = "zip"
    OTHER = "other"

    @classmethod
    def from_extension(cls, extension: str) -> "ArchiveFormat":
        """
        Map an extension (without leading dot) to a format.

        Unknown extensions map to OTHER, which is handled by 7-Zip.

        Example:
            >>> ArchiveFormat.from_extension("tgz")
            <ArchiveFormat.TAR_GZ: 'tar.gz'>
            >>> ArchiveFormat.from_extension("7z")
            <ArchiveFormat.OTHER: 'other'>
        """
        ext = extension.lower().lstrip(".")
        if ext in ("tar.gz", "tgz"):
            return cls.TAR_GZ
        if ext == "tar":
            return cls.TAR
        if ext == "zip":
            return cls.ZIP
        return cls.OTHER


def archive_extension(archive_path: Union[str, Path]) -> str:
    """
    Infer the extension of an archive from its file name.

    Double extensions are only recognised for '.tar.gz'.

    Example:
        >>> archive_extension("graalvm-jdk-17_linux-x64_bin.tar.gz")
        'tar.gz'
        >>> archive_extension("graalvm-jdk-17_windows-x64_bin.zip")
        'zip'
    """
    name = Path(archive_path).name
    if name.endswith(".tar.gz"):
        return "tar.gz"
    return Path(name).suffix[1:]


def detect_archive_format(
    archive_path: Union[str, Path], extension: Optional[str] = None
) -> ArchiveFormat:
    """
    Select the archive format once, before extraction starts.

    Args:
        archive_path: Path to the archive
        extension: Explicit extension overriding the file name

    Returns:
        ArchiveFormat to dispatch on
    """
    return ArchiveFormat.from_extension(extension or archive_extension(archive_path))


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_jdk_file(
    archive_path: Union[str, Path],
    extension: Optional[str] = None,
    destination: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Extract a JDK archive.

    The format is inferred from the file name unless `extension` is given,
    which matters for downloads saved under extensionless temporary names.

    Args:
        archive_path: Path to the archive file
        extension: Optional extension override ('tar.gz', 'tar', 'zip', ...)
        destination: Directory to extract into (default: new dir under runner temp)

    Returns:
        Path to the directory the archive was extracted into

    Raises:
        UnsupportedArchiveFormat: If no extractor can handle the archive
        ExtractionFailure: If extraction fails

    Example:
        >>> extract_jdk_file('/tmp/3f2a...', 'tar.gz')
        PosixPath('/tmp/8c1d...')
    """
    archive_path = Path(archive_path)
    created = destination is None
    if created:
        destination = get_temp_dir() / str(uuid.uuid4())
    destination = Path(destination)

    if not archive_path.exists():
        raise ExtractionFailure(f"Archive not found: {archive_path}")

    archive_format = detect_archive_format(archive_path, extension)
    destination.mkdir(parents=True, exist_ok=True)
    logger.debug(f"Extracting {archive_path} as {archive_format.value} to {destination}")

    try:
        if archive_format is ArchiveFormat.TAR_GZ:
            _extract_tar(archive_path, destination, "r:gz")
        elif archive_format is ArchiveFormat.TAR:
            _extract_tar(archive_path, destination, "r:")
        elif archive_format is ArchiveFormat.ZIP:
            _extract_zip(archive_path, destination)
        else:
            _extract_7z(archive_path, destination)
    except Exception as e:
        if created:
            shutil.rmtree(destination, ignore_errors=True)
        if isinstance(e, ExtractionFailure):
            raise
        raise ExtractionFailure(f"Failed to extract {archive_path}: {e}") from e

    return destination


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive, restoring unix permission bits when present."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        members = zf.infolist()

        for member in members:
            _validate_archive_path(member.filename, destination)

        for member in members:
            extracted = zf.extract(member, destination)
            mode = (member.external_attr >> 16) & 0o777
            if mode:
                os.chmod(extracted, mode)


def _extract_tar(archive_path: Path, destination: Path, mode: str) -> None:
    """Extract a tar archive with specified compression."""
    with tarfile.open(archive_path, mode) as tar:
        for member in tar.getmembers():
            _validate_archive_path(member.name, destination)

        # Python 3.12+ applies its own sanitising filter
        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)


def _find_7zip() -> Optional[str]:
    """Locate a 7-Zip executable."""
    seven_zip = shutil.which("7z") or shutil.which("7za")
    if seven_zip:
        return seven_zip

    for path in (
        r"C:\Program Files\7-Zip\7z.exe",
        r"C:\Program Files (x86)\7-Zip\7z.exe",
    ):
        if Path(path).exists():
            return path

    return None


def _extract_7z(archive_path: Path, destination: Path) -> None:
    """Extract any other archive type with the 7-Zip command line tool."""
    seven_zip = _find_7zip()

    if not seven_zip:
        raise UnsupportedArchiveFormat(
            f"Unsupported archive format: {archive_path.name}. "
            "Extracting it requires 7-Zip (https://www.7-zip.org/)."
        )

    cmd = [seven_zip, "x", str(archive_path), f"-o{destination}", "-y"]
    try:
        subprocess.run(cmd, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as e:
        raise ExtractionFailure(f"7-Zip extraction failed: {e.stderr}") from e


# ============================================================================
# Layout Normalization
# ============================================================================


def rename_win_archive(archive_path: Union[str, Path]) -> Path:
    """
    Give a downloaded archive the '.zip' extension Windows extractors expect.

    Downloads are saved under extensionless temporary names; the built-in
    Windows extraction tooling refuses files without an extension.

    Args:
        archive_path: Path to the downloaded archive

    Returns:
        Path of the renamed archive
    """
    archive_path = Path(archive_path)
    renamed = archive_path.with_name(f"{archive_path.name}.zip")
    archive_path.rename(renamed)
    logger.debug(f"Renamed archive {archive_path} -> {renamed}")
    return renamed


def find_installation_root(extract_dir: Path) -> Path:
    """
    Locate the single nested directory holding the JDK.

    Vendor archives wrap the JDK in one top-level directory whose name varies
    by build (e.g. 'graalvm-jdk-17.0.12+8.1'), so it is found by listing.

    Args:
        extract_dir: Directory the archive was extracted into

    Returns:
        Path to the installation root; the extraction directory itself when
        the archive has no single wrapper directory
    """
    # macOS resource forks ('._name') are not part of the layout
    entries = [p for p in extract_dir.iterdir() if not p.name.startswith("._")]

    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]

    logger.debug(f"No single wrapper directory in {extract_dir}, using it as root")
    return extract_dir


# ============================================================================
# Safe File Operations
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except Exception as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def copy_tree(source: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Copy a directory tree, preserving symlinks.

    JDK images link files under legal/ to each other, so links are copied
    as links rather than followed.

    Args:
        source: Source directory
        destination: Destination directory (must not exist)
    """
    source = Path(source)
    destination = Path(destination)

    if not source.is_dir():
        raise FilesystemError(f"Source is not a directory: {source}")

    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(source, destination, symlinks=True)


__all__ = [
    "FilesystemError",
    "InsecureArchiveError",
    "ArchiveFormat",
    "archive_extension",
    "detect_archive_format",
    "extract_jdk_file",
    "rename_win_archive",
    "find_installation_root",
    "is_relative_to",
    "safe_rmtree",
    "copy_tree",
]
