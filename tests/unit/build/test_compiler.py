"""Tests for diagnostic records and compilation results."""

import json

from javacbridge.build.compiler import (
    CompilerConfigurationError,
    CompilerError,
    CompilerExecutionError,
    CompilerMessage,
    CompilerResult,
    Severity,
)


class TestCompilerMessage:
    """Test the diagnostic record."""

    def test_trailing_whitespace_trimmed(self):
        message = CompilerMessage("cannot find symbol\n\n", Severity.ERROR)

        assert message.message == "cannot find symbol"

    def test_unlocated(self):
        message = CompilerMessage("invalid flag: -foo")

        assert message.is_error
        assert message.has_location is False
        assert str(message) == "error: invalid flag: -foo"

    def test_located_str(self):
        message = CompilerMessage(
            "cannot find symbol", Severity.WARNING, "Foo.java", 10, 6, 10, 7
        )

        assert str(message) == "Foo.java:10:6: warning: cannot find symbol"

    def test_from_dict_unknown_severity(self):
        message = CompilerMessage.from_dict({"message": "x", "severity": "fatal"})

        assert message.severity is Severity.OTHER
        assert message.file is None

    def test_dict_roundtrip(self):
        message = CompilerMessage("boom", Severity.NOTE, "A.java", 1, 2, 1, 5)

        assert CompilerMessage.from_dict(json.loads(json.dumps(message.to_dict()))) == message


class TestCompilerResult:
    """Test result construction and filtering."""

    def test_default_is_success(self):
        result = CompilerResult()

        assert result.success
        assert result.messages == ()
        assert result.exit_code == 0

    def test_success_follows_exit_code(self):
        warning = CompilerMessage("w", Severity.WARNING)

        assert CompilerResult.from_exit_code(0, [warning]).success is True
        assert CompilerResult.from_exit_code(1, []).success is False

    def test_success_with_errors_in_output(self):
        """Test that exit code 0 wins even when error lines were parsed."""
        result = CompilerResult.from_exit_code(0, [CompilerMessage("odd", Severity.ERROR)])

        assert result.success is True
        assert len(result.errors) == 1

    def test_errors_and_warnings(self):
        messages = [
            CompilerMessage("e", Severity.ERROR),
            CompilerMessage("w", Severity.WARNING),
            CompilerMessage("n", Severity.NOTE),
            CompilerMessage("[loading]", Severity.OTHER),
        ]
        result = CompilerResult.from_exit_code(1, messages)

        assert [m.message for m in result.errors] == ["e"]
        assert [m.message for m in result.warnings] == ["w"]
        assert len(result.messages) == 4

    def test_to_dict(self):
        result = CompilerResult.from_exit_code(2, [CompilerMessage("e")])

        data = result.to_dict()

        assert data["success"] is False
        assert data["exit_code"] == 2
        assert data["messages"][0]["severity"] == "error"


class TestExceptions:
    def test_hierarchy(self):
        assert issubclass(CompilerConfigurationError, CompilerError)
        assert issubclass(CompilerExecutionError, CompilerError)
