"""Compiler configuration.

This module defines the configuration object consumed by the flag builder,
the executors and the compiler facade, together with JSON loading and
environment variable overrides.

Environment overrides:
    JAVACBRIDGE_EXECUTABLE      Compiler executable for out-of-process runs
    JAVACBRIDGE_TOOLS_ARCHIVE   Archive holding the in-process entry point
    JAVACBRIDGE_REUSE_STRATEGY  Default reuse strategy for in-process handles
"""

import json
import os
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Tuple

from ..build.compiler import CompilerConfigurationError

DEFAULT_ENTRY_POINT = "javac_tools.main:compile"


class CompilerReuseStrategy(Enum):
    """How in-process compiler handles are shared between invocations."""

    ALWAYS_NEW = "always-new"
    REUSE_CREATED = "reuse-created"
    REUSE_SAME = "reuse-same"

    @classmethod
    def from_string(cls, value: str) -> "CompilerReuseStrategy":
        """Convert 'reuse-same', 'REUSE_SAME' or 'ReuseSame' to a strategy."""
        normalized = value.strip().replace("_", "-").lower()
        for strategy in cls:
            if normalized in (strategy.value, strategy.value.replace("-", "")):
                return strategy
        raise ValueError(f"Unknown compiler reuse strategy: {value}")


@dataclass
class CompilerConfiguration:
    """Options for one compiler invocation.

    Paths are kept as strings, matching what ends up on the compiler command
    line. custom_compiler_arguments holds (key, value) pairs; keys starting
    with '-J' are runtime flags for the out-of-process launcher.
    """

    output_location: str = "target/classes"
    source_locations: List[str] = field(default_factory=list)
    source_files: List[str] = field(default_factory=list)
    includes: List[str] = field(default_factory=list)
    excludes: List[str] = field(default_factory=list)
    classpath_entries: List[str] = field(default_factory=list)
    modulepath_entries: List[str] = field(default_factory=list)

    # annotation processing
    generated_sources_directory: Optional[str] = None
    proc: Optional[str] = None
    annotation_processors: Optional[List[str]] = None
    processor_path_entries: List[str] = field(default_factory=list)
    processor_module_path_entries: List[str] = field(default_factory=list)

    optimize: bool = False
    debug: bool = False
    debug_level: Optional[str] = None
    verbose: bool = False
    parameters: bool = False
    enable_preview: bool = False
    implicit_option: Optional[str] = None
    show_deprecation: bool = False
    show_warnings: bool = True
    show_lint: bool = False
    warnings: Optional[str] = None
    fail_on_warning: bool = False
    release_version: Optional[str] = None
    target_version: Optional[str] = None
    source_version: Optional[str] = None
    source_encoding: Optional[str] = None
    module_version: Optional[str] = None
    custom_compiler_arguments: List[Tuple[str, Optional[str]]] = field(default_factory=list)

    # out-of-process
    fork: bool = False
    executable: Optional[str] = None
    working_directory: Optional[str] = None
    build_directory: str = "target"
    maxmem: Optional[str] = None
    meminitial: Optional[str] = None
    debug_file_name: Optional[str] = None
    use_arguments_file: bool = True

    # in-process
    compiler_reuse_strategy: CompilerReuseStrategy = CompilerReuseStrategy.REUSE_SAME
    entry_point: str = DEFAULT_ENTRY_POINT
    tools_archive: Optional[str] = None
    compiler_version: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.compiler_reuse_strategy, str):
            self.compiler_reuse_strategy = CompilerReuseStrategy.from_string(self.compiler_reuse_strategy)
        self.custom_compiler_arguments = [
            (str(key), None if value is None else str(value))
            for key, value in self.custom_compiler_arguments
        ]

    @property
    def custom_runtime_flags(self) -> List[str]:
        """Custom argument keys addressed to the launcher (-J...)."""
        return [key for key, _ in self.custom_compiler_arguments if key and key.startswith("-J")]

    def add_compiler_argument(self, key: str, value: Optional[str] = None) -> None:
        self.custom_compiler_arguments.append((key, value))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["compiler_reuse_strategy"] = self.compiler_reuse_strategy.value
        data["custom_compiler_arguments"] = [list(pair) for pair in self.custom_compiler_arguments]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompilerConfiguration":
        """Create CompilerConfiguration from dictionary.

        Unknown keys are rejected so that typos in configuration files do not
        silently fall back to defaults.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise CompilerConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

        values = dict(data)
        custom = values.get("custom_compiler_arguments")
        if isinstance(custom, dict):
            values["custom_compiler_arguments"] = list(custom.items())
        elif custom is not None:
            values["custom_compiler_arguments"] = [tuple(pair) for pair in custom]
        try:
            return cls(**values)
        except (TypeError, ValueError) as e:
            raise CompilerConfigurationError(f"Invalid compiler configuration: {e}") from e

    def apply_environment(self) -> "CompilerConfiguration":
        """Fill unset options from JAVACBRIDGE_* environment variables."""
        executable = os.environ.get("JAVACBRIDGE_EXECUTABLE")
        if executable and not self.executable:
            self.executable = executable

        archive = os.environ.get("JAVACBRIDGE_TOOLS_ARCHIVE")
        if archive and not self.tools_archive:
            self.tools_archive = archive

        strategy = os.environ.get("JAVACBRIDGE_REUSE_STRATEGY")
        if strategy:
            try:
                self.compiler_reuse_strategy = CompilerReuseStrategy.from_string(strategy)
            except ValueError as e:
                raise CompilerConfigurationError(str(e)) from e
        return self


def load_config(path: Path) -> CompilerConfiguration:
    """Load a CompilerConfiguration from a JSON file.

    Args:
        path: Path to the JSON configuration file

    Returns:
        The configuration with environment overrides applied

    Raises:
        CompilerConfigurationError: If the file is missing or malformed
    """
    path = Path(path)
    if not path.exists():
        raise CompilerConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise CompilerConfigurationError(f"Malformed configuration file {path}: {e}") from e

    if not isinstance(data, dict):
        raise CompilerConfigurationError(f"Configuration file {path} must contain a JSON object")

    return CompilerConfiguration.from_dict(data).apply_environment()
