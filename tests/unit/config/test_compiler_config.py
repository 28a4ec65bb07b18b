"""
Unit tests for the compiler configuration.
"""

import json

import pytest

from javacbridge.build.compiler import CompilerConfigurationError
from javacbridge.config import (
    DEFAULT_ENTRY_POINT,
    CompilerConfiguration,
    CompilerReuseStrategy,
    load_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("JAVACBRIDGE_EXECUTABLE", "JAVACBRIDGE_TOOLS_ARCHIVE", "JAVACBRIDGE_REUSE_STRATEGY"):
        monkeypatch.delenv(name, raising=False)


class TestCompilerReuseStrategy:
    """Test parsing of reuse strategy names."""

    @pytest.mark.parametrize("value", ["reuse-same", "REUSE_SAME", "ReuseSame", " reuse_same "])
    def test_spellings(self, value):
        assert CompilerReuseStrategy.from_string(value) is CompilerReuseStrategy.REUSE_SAME

    def test_other_strategies(self):
        assert CompilerReuseStrategy.from_string("always-new") is CompilerReuseStrategy.ALWAYS_NEW
        assert CompilerReuseStrategy.from_string("ReuseCreated") is CompilerReuseStrategy.REUSE_CREATED

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown compiler reuse strategy"):
            CompilerReuseStrategy.from_string("sometimes")


class TestCompilerConfiguration:
    """Test suite for CompilerConfiguration."""

    def test_defaults(self):
        config = CompilerConfiguration()

        assert config.output_location == "target/classes"
        assert config.fork is False
        assert config.show_warnings is True
        assert config.use_arguments_file is True
        assert config.compiler_reuse_strategy is CompilerReuseStrategy.REUSE_SAME
        assert config.entry_point == DEFAULT_ENTRY_POINT

    def test_strategy_from_string(self):
        config = CompilerConfiguration(compiler_reuse_strategy="reuse-created")

        assert config.compiler_reuse_strategy is CompilerReuseStrategy.REUSE_CREATED

    def test_custom_runtime_flags(self):
        config = CompilerConfiguration()
        config.add_compiler_argument("-J-Xss8m")
        config.add_compiler_argument("-Xmaxerrs", "3")
        config.add_compiler_argument("-J-Dfile.encoding=UTF-8")

        assert config.custom_runtime_flags == ["-J-Xss8m", "-J-Dfile.encoding=UTF-8"]

    def test_to_dict_is_json_serializable(self):
        config = CompilerConfiguration(
            source_files=["A.java"],
            custom_compiler_arguments=[("-Xmaxerrs", "3")],
            compiler_reuse_strategy=CompilerReuseStrategy.ALWAYS_NEW,
        )

        data = json.loads(json.dumps(config.to_dict()))

        assert data["compiler_reuse_strategy"] == "always-new"
        assert data["custom_compiler_arguments"] == [["-Xmaxerrs", "3"]]
        assert CompilerConfiguration.from_dict(data) == config

    def test_from_dict_custom_arguments_mapping(self):
        config = CompilerConfiguration.from_dict({
            "custom_compiler_arguments": {"-Xlint:unchecked": None, "-Xmaxwarns": 50},
        })

        assert config.custom_compiler_arguments == [("-Xlint:unchecked", None), ("-Xmaxwarns", "50")]

    def test_from_dict_unknown_key(self):
        with pytest.raises(CompilerConfigurationError, match="Unknown configuration keys: optimise"):
            CompilerConfiguration.from_dict({"optimise": True})

    def test_from_dict_bad_strategy(self):
        with pytest.raises(CompilerConfigurationError, match="Invalid compiler configuration"):
            CompilerConfiguration.from_dict({"compiler_reuse_strategy": "sometimes"})

    def test_apply_environment(self, monkeypatch):
        monkeypatch.setenv("JAVACBRIDGE_EXECUTABLE", "/env/javac")
        monkeypatch.setenv("JAVACBRIDGE_TOOLS_ARCHIVE", "/env/tools.zip")
        monkeypatch.setenv("JAVACBRIDGE_REUSE_STRATEGY", "always-new")

        config = CompilerConfiguration().apply_environment()

        assert config.executable == "/env/javac"
        assert config.tools_archive == "/env/tools.zip"
        assert config.compiler_reuse_strategy is CompilerReuseStrategy.ALWAYS_NEW

    def test_apply_environment_keeps_configured_values(self, monkeypatch):
        monkeypatch.setenv("JAVACBRIDGE_EXECUTABLE", "/env/javac")

        config = CompilerConfiguration(executable="/opt/javac").apply_environment()

        assert config.executable == "/opt/javac"

    def test_apply_environment_bad_strategy(self, monkeypatch):
        monkeypatch.setenv("JAVACBRIDGE_REUSE_STRATEGY", "sometimes")

        with pytest.raises(CompilerConfigurationError):
            CompilerConfiguration().apply_environment()


class TestLoadConfig:
    """Test loading configuration files."""

    @pytest.fixture
    def config_file(self, tmp_path):
        return tmp_path / "javac.json"

    def test_load(self, config_file):
        config_file.write_text(json.dumps({
            "source_locations": ["src/main/java"],
            "release_version": "17",
            "fork": True,
            "maxmem": "1g",
        }))

        config = load_config(config_file)

        assert config.source_locations == ["src/main/java"]
        assert config.release_version == "17"
        assert config.fork is True
        assert config.maxmem == "1g"

    def test_load_applies_environment(self, config_file, monkeypatch):
        config_file.write_text("{}")
        monkeypatch.setenv("JAVACBRIDGE_EXECUTABLE", "/env/javac")

        assert load_config(config_file).executable == "/env/javac"

    def test_missing_file(self, tmp_path):
        with pytest.raises(CompilerConfigurationError, match="Configuration file not found"):
            load_config(tmp_path / "missing.json")

    def test_malformed_json(self, config_file):
        config_file.write_text("{not json")

        with pytest.raises(CompilerConfigurationError, match="Malformed configuration file"):
            load_config(config_file)

    def test_not_an_object(self, config_file):
        config_file.write_text("[1, 2]")

        with pytest.raises(CompilerConfigurationError, match="must contain a JSON object"):
            load_config(config_file)
