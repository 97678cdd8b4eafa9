"""
HTTP client for jdkkit.

This module wraps a `requests.Session` with the three operations the
resolver and installer need:
- HEAD probes that report the status code of a download URL
- Streaming downloads to a local file with progress reporting
- JSON document fetches (GitHub contents API) with caller-supplied headers

Failures are raised immediately; retrying is left to the CI system.
"""

import logging
import platform
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import requests
from requests.exceptions import RequestException

from jdkkit import __version__
from jdkkit.core.directory import get_temp_dir
from jdkkit.core.exceptions import DownloadFailure, ProbeFailure

logger = logging.getLogger(__name__)

USER_AGENT = (
    f"jdkkit/{__version__} "
    f"{platform.python_implementation()}/{platform.python_version()}"
)

GITHUB_RAW_ACCEPT = "application/vnd.github.VERSION.raw"


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


def get_github_http_headers(token: Optional[str] = None) -> Dict[str, str]:
    """
    Build request headers for the GitHub contents API.

    Args:
        token: Optional access token; anonymous requests are rate limited

    Returns:
        Header dictionary asking for the raw file content

    Example:
        >>> get_github_http_headers("abc")
        {'Accept': 'application/vnd.github.VERSION.raw', 'Authorization': 'token abc'}
    """
    headers = {"Accept": GITHUB_RAW_ACCEPT}
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


class HttpClient:
    """
    Thin HTTP client used by the artifact locator and acquisition pipeline.

    Example:
        >>> http = HttpClient()
        >>> http.head("https://download.oracle.com/graalvm/17/latest/...")
        200
    """

    def __init__(self, timeout: int = 30, session: Optional[requests.Session] = None):
        """
        Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            session: Optional preconfigured session
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)

    def head(self, url: str) -> int:
        """
        Probe a URL without downloading it.

        Args:
            url: URL to probe

        Returns:
            HTTP status code (redirects are followed)

        Raises:
            ProbeFailure: If the request cannot be made at all
        """
        logger.debug(f"HEAD {url}")
        try:
            response = self.session.head(url, timeout=self.timeout, allow_redirects=True)
        except RequestException as e:
            raise ProbeFailure(f"HEAD request to {url} failed: {e}", url=url) from e
        return response.status_code

    def get_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Any:
        """
        Fetch and decode a JSON document.

        Args:
            url: Document URL
            headers: Extra request headers (e.g. from get_github_http_headers)

        Returns:
            Decoded JSON, or None when the server answers 404

        Raises:
            DownloadFailure: On network errors, other non-2xx statuses or bad JSON
        """
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
        except RequestException as e:
            raise DownloadFailure(f"GET {url} failed: {e}", url=url) from e

        if response.status_code == 404:
            return None
        if not response.ok:
            raise DownloadFailure(
                f"GET {url} failed with status code: {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise DownloadFailure(f"Invalid JSON returned by {url}: {e}", url=url) from e

    def download(
        self,
        url: str,
        destination: Optional[Path] = None,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ) -> Path:
        """
        Download a URL to a local file.

        Args:
            url: URL to download from
            destination: Local path (default: extensionless unique name in runner temp)
            progress_callback: Optional callback for progress updates

        Returns:
            Path to downloaded file

        Raises:
            DownloadFailure: On network errors or non-2xx statuses
            ValueError: If URL is empty
        """
        if not url:
            raise ValueError("URL cannot be empty")

        if destination is None:
            destination = get_temp_dir() / str(uuid.uuid4())
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        logger.debug(f"Downloading from {url} to {destination}")

        try:
            response = self.session.get(
                url, stream=True, timeout=self.timeout, allow_redirects=True
            )
        except RequestException as e:
            raise DownloadFailure(f"Download of {url} failed: {e}", url=url) from e

        if not response.ok:
            response.close()
            raise DownloadFailure(
                f"Download of {url} failed with status code: {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        try:
            self._write_stream(response, destination, progress_callback)
        except (RequestException, OSError) as e:
            destination.unlink(missing_ok=True)
            raise DownloadFailure(f"Download of {url} failed: {e}", url=url) from e
        finally:
            response.close()

        logger.debug(f"Download complete: {destination}")
        return destination

    def _write_stream(
        self,
        response: requests.Response,
        destination: Path,
        progress_callback: Optional[Callable[[DownloadProgress], None]],
    ) -> None:
        """Stream the response body to disk, reporting progress at most twice a second."""
        content_length = response.headers.get("content-length")
        total_size = int(content_length) if content_length else 0

        downloaded = 0
        start_time = time.time()
        last_progress_time = start_time

        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=65536):
                if not chunk:
                    continue
                f.write(chunk)
                downloaded += len(chunk)

                current_time = time.time()
                if progress_callback and (
                    current_time - last_progress_time >= 0.5 or downloaded == total_size
                ):
                    elapsed = current_time - start_time
                    progress_callback(
                        DownloadProgress(
                            bytes_downloaded=downloaded,
                            total_bytes=total_size if total_size > 0 else downloaded,
                            percentage=(downloaded / total_size * 100)
                            if total_size > 0
                            else 0,
                            speed_bps=downloaded / elapsed if elapsed > 0 else 0,
                        )
                    )
                    last_progress_time = current_time

    def close(self):
        self.session.close()


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s"
        )
    return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"


__all__ = [
    "DownloadProgress",
    "HttpClient",
    "USER_AGENT",
    "format_progress",
    "get_github_http_headers",
]
