"""
Tests for runner command files.
"""

import os
import re

import pytest

from jdkkit.core.actions import add_path, export_variable, set_output

DELIMITED = re.compile(r"^(?P<name>[^<]+)<<(?P<delim>ghadelimiter_[0-9a-f-]+)\n(?P<value>.*)\n(?P=delim)\n$", re.S)


class TestExportVariable:
    def test_sets_process_environment(self, monkeypatch):
        monkeypatch.delenv("JAVA_HOME", raising=False)

        export_variable("JAVA_HOME", "/opt/jdk")

        assert os.environ["JAVA_HOME"] == "/opt/jdk"

    def test_writes_env_file(self, command_files, monkeypatch):
        """Test the delimiter format is used in GITHUB_ENV."""
        monkeypatch.delenv("JAVA_HOME", raising=False)

        export_variable("JAVA_HOME", "/opt/jdk")

        match = DELIMITED.match(command_files["GITHUB_ENV"].read_text())
        assert match is not None
        assert match.group("name") == "JAVA_HOME"
        assert match.group("value") == "/opt/jdk"

    def test_without_runner(self, monkeypatch):
        """Test no file is written outside of a runner."""
        monkeypatch.delenv("JAVA_HOME", raising=False)

        export_variable("JAVA_HOME", "/opt/jdk")

        assert os.environ["JAVA_HOME"] == "/opt/jdk"


class TestAddPath:
    def test_prepends_path(self, command_files, monkeypatch):
        monkeypatch.setenv("PATH", "/usr/bin")

        add_path("/opt/jdk/bin")

        assert os.environ["PATH"] == f"/opt/jdk/bin{os.pathsep}/usr/bin"
        assert command_files["GITHUB_PATH"].read_text() == "/opt/jdk/bin\n"


class TestSetOutput:
    def test_writes_output_file(self, command_files):
        set_output("version", "17.0.12")

        match = DELIMITED.match(command_files["GITHUB_OUTPUT"].read_text())
        assert match.group("name") == "version"
        assert match.group("value") == "17.0.12"

    def test_rejects_delimiter_in_value(self, command_files, monkeypatch):
        monkeypatch.setattr("jdkkit.core.actions.uuid.uuid4", lambda: "fixed")

        with pytest.raises(ValueError, match="delimiter"):
            set_output("version", "ghadelimiter_fixed")
