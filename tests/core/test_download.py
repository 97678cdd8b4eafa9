"""
Unit tests for the HTTP client.

Tests probes, JSON fetches and downloads with mocked network requests.
"""

import pytest
import requests
import responses

from jdkkit.core.download import (
    DownloadProgress,
    HttpClient,
    format_progress,
    get_github_http_headers,
)
from jdkkit.core.exceptions import DownloadFailure, ProbeFailure

ARCHIVE_URL = "https://download.oracle.com/graalvm/17/latest/graalvm-jdk-17_linux-x64_bin.tar.gz"
JSON_URL = "https://api.github.com/repos/graalvm/oracle-graalvm-ea-builds/contents/versions/24-ea.json?ref=main"


class TestGitHubHeaders:
    """Test GitHub request headers."""

    def test_anonymous(self):
        """Test headers without a token."""
        assert get_github_http_headers() == {
            "Accept": "application/vnd.github.VERSION.raw"
        }

    def test_with_token(self):
        """Test the token is sent as an Authorization header."""
        headers = get_github_http_headers("abc123")
        assert headers["Authorization"] == "token abc123"
        assert headers["Accept"] == "application/vnd.github.VERSION.raw"


class TestHead:
    """Test HEAD probes."""

    @responses.activate
    def test_returns_status(self):
        """Test the status code is returned as-is."""
        responses.add(responses.HEAD, ARCHIVE_URL, status=200)

        assert HttpClient().head(ARCHIVE_URL) == 200

    @responses.activate
    def test_not_found_is_not_an_error(self):
        """Test 404 is reported, not raised."""
        responses.add(responses.HEAD, ARCHIVE_URL, status=404)

        assert HttpClient().head(ARCHIVE_URL) == 404

    @responses.activate
    def test_connection_error(self):
        """Test network failures raise ProbeFailure."""
        responses.add(
            responses.HEAD,
            ARCHIVE_URL,
            body=requests.exceptions.ConnectionError("Connection refused"),
        )

        with pytest.raises(ProbeFailure, match="Connection refused"):
            HttpClient().head(ARCHIVE_URL)


class TestGetJson:
    """Test JSON fetches."""

    @responses.activate
    def test_returns_document(self):
        """Test JSON is decoded and headers are sent."""
        responses.add(responses.GET, JSON_URL, json=[{"version": "24.0.0-ea.20"}])

        result = HttpClient().get_json(JSON_URL, headers=get_github_http_headers("t"))

        assert result == [{"version": "24.0.0-ea.20"}]
        assert responses.calls[0].request.headers["Authorization"] == "token t"

    @responses.activate
    def test_not_found_returns_none(self):
        """Test 404 yields None."""
        responses.add(responses.GET, JSON_URL, status=404)

        assert HttpClient().get_json(JSON_URL) is None

    @responses.activate
    def test_server_error(self):
        """Test other failures raise DownloadFailure with the status code."""
        responses.add(responses.GET, JSON_URL, status=403)

        with pytest.raises(DownloadFailure) as exc_info:
            HttpClient().get_json(JSON_URL)

        assert exc_info.value.status_code == 403

    @responses.activate
    def test_invalid_json(self):
        """Test undecodable bodies raise DownloadFailure."""
        responses.add(responses.GET, JSON_URL, body="<html>")

        with pytest.raises(DownloadFailure, match="Invalid JSON"):
            HttpClient().get_json(JSON_URL)


class TestDownload:
    """Test file downloads."""

    @responses.activate
    def test_download_to_destination(self, tmp_path):
        """Test downloading to an explicit path."""
        responses.add(responses.GET, ARCHIVE_URL, body=b"archive-bytes")
        dest = tmp_path / "jdk.tar.gz"

        result = HttpClient().download(ARCHIVE_URL, dest)

        assert result == dest
        assert dest.read_bytes() == b"archive-bytes"

    @responses.activate
    def test_default_destination_is_extensionless(self, runner_env):
        """Test downloads default to a unique extensionless file in RUNNER_TEMP."""
        responses.add(responses.GET, ARCHIVE_URL, body=b"archive-bytes")

        first = HttpClient().download(ARCHIVE_URL)
        second = HttpClient().download(ARCHIVE_URL)

        assert first.parent == runner_env / "temp"
        assert first.suffix == ""
        assert first != second

    @responses.activate
    def test_http_error(self, tmp_path):
        """Test non-2xx statuses raise DownloadFailure without writing a file."""
        responses.add(responses.GET, ARCHIVE_URL, status=500)
        dest = tmp_path / "jdk.tar.gz"

        with pytest.raises(DownloadFailure, match="status code: 500") as exc_info:
            HttpClient().download(ARCHIVE_URL, dest)

        assert exc_info.value.status_code == 500
        assert exc_info.value.url == ARCHIVE_URL
        assert not dest.exists()

    @responses.activate
    def test_no_retry(self, tmp_path):
        """Test a failed download is attempted exactly once."""
        responses.add(responses.GET, ARCHIVE_URL, status=503)

        with pytest.raises(DownloadFailure):
            HttpClient().download(ARCHIVE_URL, tmp_path / "jdk")

        assert len(responses.calls) == 1

    @responses.activate
    def test_connection_error(self, tmp_path):
        """Test network failures raise DownloadFailure."""
        responses.add(
            responses.GET,
            ARCHIVE_URL,
            body=requests.exceptions.ConnectionError("Connection reset"),
        )

        with pytest.raises(DownloadFailure, match="Connection reset"):
            HttpClient().download(ARCHIVE_URL, tmp_path / "jdk")

    @responses.activate
    def test_progress_callback(self, tmp_path):
        """Test progress is reported once the body is complete."""
        body = b"x" * 1024
        responses.add(
            responses.GET,
            ARCHIVE_URL,
            body=body,
            auto_calculate_content_length=True,
        )
        updates = []

        HttpClient().download(ARCHIVE_URL, tmp_path / "jdk", progress_callback=updates.append)

        assert updates
        assert updates[-1].bytes_downloaded == len(body)
        assert updates[-1].percentage == 100.0

    def test_empty_url(self, tmp_path):
        """Test empty URLs are rejected."""
        with pytest.raises(ValueError, match="URL cannot be empty"):
            HttpClient().download("", tmp_path / "jdk")


class TestFormatProgress:
    """Test progress formatting."""

    def test_with_total(self):
        progress = DownloadProgress(52428800, 104857600, 50.0, 1048576)
        assert format_progress(progress) == "50.0/100.0 MB (50.0%) at 1.0 MB/s"

    def test_without_total(self):
        progress = DownloadProgress(1048576, 1048576, 0, 1048576)
        assert str(progress) == "1.0 MB at 1.0 MB/s"
