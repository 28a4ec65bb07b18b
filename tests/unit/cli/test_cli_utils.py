"""Unit tests for CLI utilities."""

import json
import logging

import pytest

from javacbridge.build.compiler import CompilerMessage, CompilerResult, Severity
from javacbridge.cli_utils import DiagnosticFormatter, ErrorFormatter, setup_logging


class TestSetupLogging:
    """Tests for root logger configuration."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_verbose_enables_debug(self):
        setup_logging(verbose=True)

        assert logging.getLogger().isEnabledFor(logging.DEBUG)

    def test_default_is_warning(self):
        setup_logging()

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert not root.isEnabledFor(logging.INFO)


class TestDiagnosticFormatter:
    """Tests for diagnostic rendering."""

    def test_format_located_message(self):
        message = CompilerMessage("cannot find symbol", Severity.ERROR, "Foo.java", 10, 6, 10, 7)

        assert DiagnosticFormatter.format_message(message) == "Foo.java:10:6: error: cannot find symbol"

    def test_format_with_color(self):
        message = CompilerMessage("deprecated", Severity.WARNING)

        text = DiagnosticFormatter.format_message(message, color=True)

        assert text.startswith(ErrorFormatter.YELLOW)
        assert text.endswith(ErrorFormatter.RESET)

    def test_notes_are_never_colored(self):
        message = CompilerMessage("recompile", Severity.NOTE)

        assert DiagnosticFormatter.format_message(message, color=True) == "note: recompile"

    def test_format_messages(self):
        messages = [CompilerMessage("a"), CompilerMessage("b", Severity.NOTE)]

        assert DiagnosticFormatter.format_messages(messages) == "error: a\nnote: b"

    def test_format_json(self):
        result = CompilerResult.from_exit_code(1, [CompilerMessage("警告", Severity.WARNING)])

        data = json.loads(DiagnosticFormatter.format_json(result))

        assert data["success"] is False
        assert data["messages"][0]["message"] == "警告"

    @pytest.mark.parametrize("errors,warnings,expected", [
        (0, 0, "0 errors, 0 warnings"),
        (1, 0, "1 error, 0 warnings"),
        (2, 1, "2 errors, 1 warning"),
    ])
    def test_summary(self, errors, warnings, expected):
        messages = [CompilerMessage("e")] * errors + [CompilerMessage("w", Severity.WARNING)] * warnings
        result = CompilerResult.from_exit_code(1, messages)

        assert DiagnosticFormatter.summary(result) == expected


class TestErrorFormatter:
    """Tests for error output and exit codes."""

    def test_print_error(self, capsys):
        ErrorFormatter.print_error("Compilation failed!", "1 error")

        out = capsys.readouterr().out
        assert "✗ Compilation failed!" in out
        assert "1 error" in out

    def test_keyboard_interrupt_exit_code(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            ErrorFormatter.handle_keyboard_interrupt()

        assert exc_info.value.code == 130
        assert "Compilation interrupted" in capsys.readouterr().out

    def test_unexpected_error_shows_cause(self, capsys):
        try:
            try:
                raise FileNotFoundError("javac")
            except FileNotFoundError as cause:
                raise RuntimeError("Error while executing the compiler.") from cause
        except RuntimeError as error:
            with pytest.raises(SystemExit) as exc_info:
                ErrorFormatter.handle_unexpected_error(error)

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "RuntimeError: Error while executing the compiler." in out
        assert "Caused by: FileNotFoundError: javac" in out
