"""Diagnostic Parser.

This module turns the textual output of a javac-style compiler into an ordered
list of CompilerMessage records.

Design:
    - Line-buffered state machine (idle, prefixed block, pointer block,
      stack trace) fed one line at a time
    - Positioned diagnostics are recognized by their caret line and located
      via parse_modern_error()
    - Localized keyword prefixes for warnings and notes
    - Trailing exception dumps are salvaged as one unlocated error
    - Malformed blocks degrade to unlocated diagnostics, never exceptions

Typical positioned block:

    Foo.java:10: error: cannot find symbol
      int x = y;
              ^
      symbol:   variable y
"""

import re
from enum import Enum
from typing import Iterable, List, Optional

from .compiler import CompilerMessage, Severity

# compiler.warn.warning in javac's compiler.properties (en, ja, zh_CN)
WARNING_PREFIXES = ("warning: ", "警告: ", "警告： ")

# compiler.note.note in javac's compiler.properties (en, ja, zh_CN)
NOTE_PREFIXES = ("Note: ", "注: ", "注意： ")

ERROR_PREFIXES = ("error: ",)

# compiler.misc.verbose
MISC_PREFIXES = ("[",)

# Substrings of the compiler crash header ("Please file a bug ..."), locale independent
BUG_REPORT_URLS = ("java.sun.com/webapps/bugreport", "bugreport.java.com")

# Typical JDK exception and error type names
STACK_TRACE_FIRST_LINE = re.compile(
    r"^\s*(?:[\w+.-]+\.)[\w$]*?(?:"
    r"Exception|Error|Throwable|Failure|Result|Abort|Fault|ThreadDeath|Overflow|Warning|"
    r"NotSupported|NotFound|BadArgs|BadClassFile|Illegal|Invalid|Unexpected|Unchecked|Unmatched\w+"
    r").*$",
    re.ASCII,
)

# Exception causes, stack frames and elided frames
STACK_TRACE_OTHER_LINE = re.compile(
    r"^\s*(?:Caused by:\s.*|\s*at .*|\s*\.\.\.\s\d+\smore)$",
    re.ASCII,
)

# Generic 'javac:' errors and VM / boot layer initialization failures
JAVAC_OR_JVM_ERROR = re.compile(
    r"^(?:javac:|Error occurred during initialization of (?:boot layer|VM)).*",
    re.DOTALL,
)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_COLON_TOKEN = re.compile(r"[^:]+")


class ParserState(Enum):
    """State of the block currently being accumulated."""

    IDLE = "idle"
    PREFIXED = "prefixed"
    POINTER = "pointer"
    STACK_TRACE = "stack_trace"


class _NoMoreTokens(Exception):
    pass


def _starts_with_prefix(line: str, prefixes: Iterable[str]) -> Optional[str]:
    for prefix in prefixes:
        if line.startswith(prefix):
            return prefix
    return None


def _is_indented(line: str) -> bool:
    return line.startswith((" ", "\t"))


class DiagnosticParser:
    """Incremental parser for javac output.

    Feed lines in order with feed() and call finish() once the stream is
    exhausted. A parser instance handles exactly one compiler run.
    """

    def __init__(self, exit_code: int):
        self.exit_code = exit_code
        self.messages: List[CompilerMessage] = []
        self._buffer: List[str] = []
        self._has_pointer = False
        self._working_severity: Optional[Severity] = None
        self._working_prefix = ""
        self._stack_trace_lines = 0
        self._finished = False

    @property
    def state(self) -> ParserState:
        if self._has_pointer:
            return ParserState.POINTER
        if self._working_severity is not None:
            return ParserState.PREFIXED
        if self._stack_trace_lines > 0:
            return ParserState.STACK_TRACE
        return ParserState.IDLE

    def feed(self, line: str) -> None:
        """Process one line of compiler output (without line terminator)."""
        if self._finished:
            raise RuntimeError("parser already finished")

        line = line.rstrip("\r\n")
        if not line:
            self._close_block()
            self._stack_trace_lines = 0
            return

        self._track_stack_trace(line)

        if not _is_indented(line) and self.state in (ParserState.POINTER, ParserState.PREFIXED):
            self._emit_block()

        prefix = _starts_with_prefix(line, ERROR_PREFIXES)
        if prefix is not None:
            self._start_prefixed(Severity.ERROR, prefix, line)
            return
        prefix = _starts_with_prefix(line, WARNING_PREFIXES)
        if prefix is not None:
            self._start_prefixed(Severity.WARNING, prefix, line)
            return
        prefix = _starts_with_prefix(line, NOTE_PREFIXES)
        if prefix is not None:
            self._start_prefixed(Severity.NOTE, prefix, line)
            return

        if not self._buffer and _starts_with_prefix(line, MISC_PREFIXES) is not None:
            # verbose output
            self.messages.append(CompilerMessage(line, Severity.OTHER))
            return

        self._buffer.append(line)
        if line.endswith("^"):
            self._has_pointer = True

    def finish(self) -> List[CompilerMessage]:
        """Finalize the pending block and return all diagnostics."""
        if not self._finished:
            self._close_block()
            self._finished = True
        return self.messages

    def _track_stack_trace(self, line: str) -> None:
        if (self._stack_trace_lines == 0 and STACK_TRACE_FIRST_LINE.fullmatch(line)) \
                or STACK_TRACE_OTHER_LINE.fullmatch(line):
            self._stack_trace_lines += 1
        else:
            self._stack_trace_lines = 0

    def _start_prefixed(self, severity: Severity, prefix: str, line: str) -> None:
        self._working_severity = severity
        self._working_prefix = prefix
        self._has_pointer = False
        self._buffer = [line]

    def _buffer_text(self) -> str:
        return "".join(f"{line}\n" for line in self._buffer)

    def _reset_block(self) -> None:
        self._buffer = []
        self._has_pointer = False
        self._working_severity = None
        self._working_prefix = ""

    def _emit_block(self) -> None:
        """Emit a pointer or prefixed block at a block boundary."""
        if self._has_pointer:
            self.messages.append(parse_modern_error(self.exit_code, self._buffer_text()))
        elif self._working_severity is not None:
            self.messages.append(self._prefixed_message())
        self._reset_block()

    def _prefixed_message(self) -> CompilerMessage:
        # the buffer always starts with the prefix line
        text = self._buffer_text()[len(self._working_prefix):].strip()
        return CompilerMessage(text, self._working_severity or Severity.OTHER)

    def _close_block(self) -> None:
        """Finalize the buffer at a blank line or end of stream."""
        if not self._buffer:
            self._reset_block()
            return

        text = self._buffer_text()
        state = self.state
        if JAVAC_OR_JVM_ERROR.fullmatch(text):
            self.messages.append(CompilerMessage(text, Severity.ERROR))
        elif state is ParserState.POINTER:
            self.messages.append(parse_modern_error(self.exit_code, text))
        elif state is ParserState.PREFIXED:
            self.messages.append(self._prefixed_message())
        elif state is ParserState.STACK_TRACE:
            self.messages.append(self._stack_trace_message())
        # anything else is narrative output, e.g. the "1 error" summary
        self._reset_block()

    def _stack_trace_message(self) -> CompilerMessage:
        lines = self._buffer
        first_line = max(0, len(lines) - self._stack_trace_lines)

        # Fold in the compiler's "please file a bug" header
        if first_line > 0:
            line_before = lines[first_line - 1]
            if any(url in line_before for url in BUG_REPORT_URLS):
                first_line -= 1

        # The annotation processor "uncaught exception" header has no locale
        # independent marker and stays discarded.
        text = "".join(f"{line}\n" for line in lines[first_line:])
        return CompilerMessage(text, Severity.ERROR)


def split_lines(text: str) -> List[str]:
    """Split compiler output on any line terminator, dropping a trailing one."""
    if not text:
        return []
    lines = _LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def parse_modern_stream(exit_code: int, lines: Iterable[str]) -> List[CompilerMessage]:
    """Parse compiler output lines into diagnostics.

    Args:
        exit_code: Exit code of the compiler run
        lines: Output lines in order of appearance

    Returns:
        Diagnostics in order of appearance
    """
    parser = DiagnosticParser(exit_code)
    for line in lines:
        parser.feed(line)
    return parser.finish()


def parse_output(exit_code: int, text: str) -> List[CompilerMessage]:
    """Parse the complete captured compiler output."""
    return parse_modern_stream(exit_code, split_lines(text))


def _warning_prefix(message: str) -> Optional[str]:
    return _starts_with_prefix(message, WARNING_PREFIXES)


def parse_modern_error(exit_code: int, error: str) -> CompilerMessage:
    """Build a positioned diagnostic from one caret-terminated block.

    The block starts with "<file>:<line>: <message>", followed by the source
    context line and the caret line. Lines after the caret continue the
    message. File paths may contain colons (drive letters), so every token
    before the first integer token belongs to the path.

    Args:
        exit_code: Exit code of the compiler run
        error: The accumulated block, lines separated by newlines

    Returns:
        A positioned CompilerMessage, or an unlocated one if the block
        could not be parsed
    """
    is_error = exit_code != 0

    try:
        file_tokens: List[str] = []
        line_number: Optional[int] = None
        rest = ""
        for match in _COLON_TOKEN.finditer(error):
            token = match.group()
            if _INTEGER.fullmatch(token):
                line_number = int(token)
                rest = error[match.end():]
                break
            file_tokens.append(token)
        if line_number is None:
            raise _NoMoreTokens()
        if not file_tokens:
            raise ValueError("missing file name")

        file = ":".join(file_tokens)
        # annotation processing round marker, e.g. "[parsing started ...]"
        start_of_file_name = file.rfind("]")
        if start_of_file_name > -1:
            file = file[start_of_file_name + 1:].lstrip("\r\n")

        remaining = [line for line in rest.split("\n") if line]
        if len(remaining) < 3:
            raise _NoMoreTokens()
        if len(remaining[0]) < 2:
            raise ValueError("truncated message line")

        msg = remaining[0][2:]
        warn_prefix = _warning_prefix(msg)
        if warn_prefix is not None:
            is_error = False
            msg = msg[len(warn_prefix):]
        else:
            is_error = exit_code != 0

        message_lines = [msg]
        context: Optional[str] = remaining[1]
        pointer: Optional[str] = None
        for msg_line in remaining[2:]:
            if pointer is not None:
                message_lines.append(msg_line)
            elif msg_line.endswith("^"):
                pointer = msg_line
            else:
                message_lines.append(context)
                context = msg_line

        if pointer is None or context is None:
            raise ValueError("no pointer line")

        start_column = pointer.index("^")
        end_column = context.find(" ", start_column)
        if end_column == -1:
            end_column = len(context)

        return CompilerMessage(
            message="\n".join(message_lines).strip(),
            severity=Severity.ERROR if is_error else Severity.WARNING,
            file=file,
            start_line=line_number,
            start_column=start_column,
            end_line=line_number,
            end_column=end_column,
        )
    except _NoMoreTokens:
        return CompilerMessage(
            f"no more tokens - could not parse error message: {error}",
            Severity.ERROR if is_error else Severity.WARNING,
        )
    except Exception:
        return CompilerMessage(
            f"could not parse error message: {error}",
            Severity.ERROR if is_error else Severity.WARNING,
        )
