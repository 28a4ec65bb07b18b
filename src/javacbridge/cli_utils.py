"""CLI utility functions for javacbridge.

This module provides common utilities used across CLI commands including:
- Logging setup
- Diagnostic formatting
- Error handling and formatting
"""

import json
import logging
import sys
from typing import Iterable

from javacbridge.build.compiler import CompilerMessage, CompilerResult, Severity

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Attach a console handler to the root logger.

    Args:
        verbose: Log at DEBUG (also writes the debug script) instead of WARNING
    """
    logger = logging.getLogger()
    level = logging.DEBUG if verbose else logging.WARNING
    logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "Compilation failed")
            message: Error message details
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_success(message: str) -> None:
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        print()
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Compilation interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        if error.__cause__ is not None:
            message += f"\nCaused by: {type(error.__cause__).__name__}: {error.__cause__}"
        ErrorFormatter.print_error("Error", message)

        if verbose:
            import traceback

            print("Traceback:")
            print(traceback.format_exc())

        sys.exit(1)


class DiagnosticFormatter:
    """Renders compiler diagnostics for the terminal or as JSON."""

    COLORS = {
        Severity.ERROR: ErrorFormatter.RED,
        Severity.WARNING: ErrorFormatter.YELLOW,
    }

    @staticmethod
    def format_message(message: CompilerMessage, color: bool = False) -> str:
        """Format one diagnostic as 'file:line:column: severity: message'."""
        text = str(message)
        code = DiagnosticFormatter.COLORS.get(message.severity) if color else None
        if code is None:
            return text
        return f"{code}{text}{ErrorFormatter.RESET}"

    @staticmethod
    def format_messages(messages: Iterable[CompilerMessage], color: bool = False) -> str:
        return "\n".join(DiagnosticFormatter.format_message(m, color=color) for m in messages)

    @staticmethod
    def format_json(result: CompilerResult) -> str:
        return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)

    @staticmethod
    def summary(result: CompilerResult) -> str:
        errors = len(result.errors)
        warnings = len(result.warnings)
        return f"{errors} error{'s' if errors != 1 else ''}, {warnings} warning{'s' if warnings != 1 else ''}"
