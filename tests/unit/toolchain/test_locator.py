"""Tests for compiler executable and tools archive discovery."""

import logging
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from javacbridge.build.compiler import CompilerConfigurationError
from javacbridge.toolchain.locator import (
    TOOLS_ARCHIVE_NAME,
    _javac_command,
    default_tools_archive,
    find_javac_executable,
    get_javac_executable,
    resolve_tools_archive,
)


@pytest.fixture
def java_home(tmp_path):
    """Fake JDK layout with a bin/javac file."""
    home = tmp_path / "jdk"
    (home / "bin").mkdir(parents=True)
    javac = home / "bin" / _javac_command()
    javac.write_text("")
    return home


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("JAVACBRIDGE_EXECUTABLE", raising=False)
    monkeypatch.delenv("JAVACBRIDGE_TOOLS_ARCHIVE", raising=False)


class TestFindJavacExecutable:
    """Test JAVA_HOME and PATH lookup."""

    def test_java_home(self, java_home, monkeypatch):
        monkeypatch.setenv("JAVA_HOME", str(java_home))

        assert find_javac_executable() == str((java_home / "bin" / _javac_command()).resolve())

    def test_java_home_not_a_directory(self, tmp_path, monkeypatch):
        monkeypatch.setenv("JAVA_HOME", str(tmp_path / "missing"))

        with pytest.raises(CompilerConfigurationError, match="not a valid directory"):
            find_javac_executable()

    def test_java_home_without_javac(self, tmp_path, monkeypatch):
        monkeypatch.setenv("JAVA_HOME", str(tmp_path))

        with pytest.raises(CompilerConfigurationError, match="Verify the JAVA_HOME"):
            find_javac_executable()

    def test_path_lookup(self, java_home, monkeypatch):
        monkeypatch.delenv("JAVA_HOME", raising=False)
        javac = java_home / "bin" / _javac_command()

        with patch("javacbridge.toolchain.locator.shutil.which", return_value=str(javac)):
            assert find_javac_executable() == str(javac.resolve())

    def test_not_found(self, monkeypatch):
        monkeypatch.delenv("JAVA_HOME", raising=False)

        with patch("javacbridge.toolchain.locator.shutil.which", return_value=None):
            with pytest.raises(CompilerConfigurationError, match="JAVA_HOME is not correctly set"):
                find_javac_executable()


class TestGetJavacExecutable:
    """Test executable precedence."""

    def test_explicit_wins(self, monkeypatch):
        monkeypatch.setenv("JAVACBRIDGE_EXECUTABLE", "/env/javac")

        assert get_javac_executable("/opt/jdk/bin/javac") == "/opt/jdk/bin/javac"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("JAVACBRIDGE_EXECUTABLE", "/env/javac")

        assert get_javac_executable() == "/env/javac"

    def test_autodetect(self, java_home, monkeypatch):
        monkeypatch.setenv("JAVA_HOME", str(java_home))

        assert Path(get_javac_executable()).name == _javac_command()

    def test_fallback_to_bare_name(self, tmp_path, monkeypatch, caplog):
        monkeypatch.setenv("JAVA_HOME", str(tmp_path / "missing"))

        with caplog.at_level(logging.WARNING):
            assert get_javac_executable() == "javac"

        assert "Unable to autodetect 'javac' path" in caplog.text


class TestToolsArchive:
    """Test tools archive resolution."""

    def test_default_location(self):
        archive = default_tools_archive()

        assert archive.name == TOOLS_ARCHIVE_NAME
        assert archive.parent == Path(sys.base_prefix) / "lib"

    def test_configured_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv("JAVACBRIDGE_TOOLS_ARCHIVE", str(tmp_path / "env.zip"))

        assert resolve_tools_archive(str(tmp_path / "cfg.zip")) == tmp_path / "cfg.zip"

    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("JAVACBRIDGE_TOOLS_ARCHIVE", str(tmp_path / "env.zip"))

        assert resolve_tools_archive() == tmp_path / "env.zip"

    def test_default(self):
        assert resolve_tools_archive() == default_tools_archive()
