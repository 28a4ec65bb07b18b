"""Diagnostic records, compilation results and the compiler interface.

This module defines the data exchanged between the executors, the diagnostic
parser and callers, plus the exception taxonomy shared by every compiler
component.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple


class CompilerError(Exception):
    """Base exception for compiler invocation failures."""
    pass


class CompilerConfigurationError(CompilerError):
    """Raised when the compiler cannot be located, loaded or configured."""
    pass


class CompilerExecutionError(CompilerError):
    """Raised when the compiler process or entry point fails to run."""
    pass


class Severity(Enum):
    """Severity of a compiler diagnostic."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
    OTHER = "other"

    @classmethod
    def from_string(cls, value: str) -> "Severity":
        """Convert string to Severity, defaulting to OTHER if invalid."""
        try:
            return cls(value.lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class CompilerMessage:
    """A single diagnostic reported by the compiler.

    Attributes:
        message: Diagnostic text, may span several lines
        severity: Diagnostic severity
        file: Source file path, None for general or VM-level errors
        start_line: First line of the reported span (0 when unlocated)
        start_column: Caret offset in the source line (0 when unlocated)
        end_line: Last line of the reported span
        end_column: End offset of the reported span
    """

    message: str
    severity: Severity = Severity.ERROR
    file: Optional[str] = None
    start_line: int = 0
    start_column: int = 0
    end_line: int = 0
    end_column: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "message", self.message.rstrip())

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def has_location(self) -> bool:
        return self.file is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "message": self.message,
            "severity": self.severity.value,
            "file": self.file,
            "start_line": self.start_line,
            "start_column": self.start_column,
            "end_line": self.end_line,
            "end_column": self.end_column,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompilerMessage":
        """Create CompilerMessage from dictionary."""
        return cls(
            message=data["message"],
            severity=Severity.from_string(data.get("severity", "error")),
            file=data.get("file"),
            start_line=data.get("start_line", 0),
            start_column=data.get("start_column", 0),
            end_line=data.get("end_line", 0),
            end_column=data.get("end_column", 0),
        )

    def __str__(self) -> str:
        if self.file is None:
            return f"{self.severity.value}: {self.message}"
        return f"{self.file}:{self.start_line}:{self.start_column}: {self.severity.value}: {self.message}"


@dataclass(frozen=True)
class CompilerResult:
    """Outcome of one compiler invocation.

    Attributes:
        success: True when the compiler exited with code 0
        messages: Diagnostics in order of appearance in the compiler output
        exit_code: Raw exit code reported by the compiler
    """

    success: bool = True
    messages: Tuple[CompilerMessage, ...] = field(default_factory=tuple)
    exit_code: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "messages", tuple(self.messages))

    @classmethod
    def from_exit_code(cls, exit_code: int, messages: List[CompilerMessage]) -> "CompilerResult":
        """Pair an exit code with its parsed diagnostics."""
        return cls(success=exit_code == 0, messages=tuple(messages), exit_code=exit_code)

    @property
    def errors(self) -> List[CompilerMessage]:
        return [m for m in self.messages if m.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[CompilerMessage]:
        return [m for m in self.messages if m.severity is Severity.WARNING]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "exit_code": self.exit_code,
            "messages": [m.to_dict() for m in self.messages],
        }


class ICompiler(ABC):
    """Interface for compiler integrations.

    Implementations turn a CompilerConfiguration into a compiler run and
    report the parsed outcome.
    """

    @property
    @abstractmethod
    def compiler_id(self) -> str:
        """Short identifier of the compiler (e.g. 'javac')."""
        pass

    @abstractmethod
    def perform_compile(self, config: Any) -> CompilerResult:
        """Compile the sources described by the configuration.

        Args:
            config: CompilerConfiguration describing sources and options

        Returns:
            CompilerResult with success flag and diagnostics

        Raises:
            CompilerError: If the compiler cannot be located or executed
        """
        pass

    @abstractmethod
    def create_command_line(self, config: Any) -> List[str]:
        """Build the compiler argument vector without running the compiler.

        Args:
            config: CompilerConfiguration describing sources and options

        Returns:
            Ordered list of compiler arguments
        """
        pass
