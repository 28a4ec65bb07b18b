"""
Command-line interface for javacbridge.

This module provides the `javacbridge` CLI tool for compiling Java sources and
inspecting compiler output.
"""

import argparse
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from javacbridge.build.compiler import CompilerResult
from javacbridge.build.diagnostic_parser import parse_output
from javacbridge.build.javac_compiler import JavacCompiler
from javacbridge.cli_utils import DiagnosticFormatter, ErrorFormatter, setup_logging
from javacbridge.config.compiler_config import (
    CompilerConfiguration,
    CompilerReuseStrategy,
    load_config,
)
from javacbridge.toolchain.version import get_default_version_cache


@dataclass
class CompileArgs:
    """Arguments for the compile command."""

    sources: List[str] = field(default_factory=list)
    config_file: Optional[Path] = None
    output_dir: Optional[str] = None
    classpath: Optional[str] = None
    sourcepath: Optional[str] = None
    release: Optional[str] = None
    fork: bool = False
    executable: Optional[str] = None
    reuse: Optional[str] = None
    entry_point: Optional[str] = None
    json_output: bool = False
    verbose: bool = False


@dataclass
class ParseArgs:
    """Arguments for the parse command."""

    log_file: Path
    exit_code: int = 1
    json_output: bool = False
    verbose: bool = False


def _split_path(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [entry for entry in value.split(os.pathsep) if entry]


def build_configuration(args: CompileArgs) -> CompilerConfiguration:
    """Merge the config file (if any) with command-line overrides."""
    if args.config_file is not None:
        config = load_config(args.config_file)
    else:
        config = CompilerConfiguration().apply_environment()

    if args.sources:
        config.source_files = list(args.sources)
    if args.output_dir:
        config.output_location = args.output_dir
    if args.classpath:
        config.classpath_entries = _split_path(args.classpath)
    if args.sourcepath:
        config.source_locations = _split_path(args.sourcepath)
    if args.release:
        config.release_version = args.release
    if args.fork:
        config.fork = True
    if args.executable:
        config.executable = args.executable
        config.fork = True
    if args.reuse:
        config.compiler_reuse_strategy = CompilerReuseStrategy.from_string(args.reuse)
    if args.entry_point:
        config.entry_point = args.entry_point
    return config


def report_result(result: CompilerResult, json_output: bool) -> None:
    if json_output:
        print(DiagnosticFormatter.format_json(result))
        return
    if result.messages:
        print(DiagnosticFormatter.format_messages(result.messages, color=sys.stdout.isatty()))


def compile_command(args: CompileArgs) -> None:
    """Compile Java sources.

    Examples:
        javacbridge compile src/Foo.java -d out
        javacbridge compile --config javac.json
        javacbridge compile --fork --executable /opt/jdk/bin/javac Foo.java
        javacbridge compile --reuse reuse-created Foo.java
    """
    try:
        config = build_configuration(args)
        result = JavacCompiler().perform_compile(config)
        report_result(result, args.json_output)

        if result.success:
            if not args.json_output:
                ErrorFormatter.print_success(f"Compilation successful ({DiagnosticFormatter.summary(result)})")
            sys.exit(0)
        else:
            if not args.json_output:
                ErrorFormatter.print_error(
                    "Compilation failed!",
                    f"{DiagnosticFormatter.summary(result)} (exit code {result.exit_code})",
                )
            sys.exit(1)

    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def parse_command(args: ParseArgs) -> None:
    """Parse captured compiler output into diagnostics.

    Examples:
        javacbridge parse build.log
        javacbridge parse build.log --exit-code 0 --json
    """
    try:
        text = args.log_file.read_text(encoding="utf-8", errors="replace")
        result = CompilerResult.from_exit_code(args.exit_code, parse_output(args.exit_code, text))
        report_result(result, args.json_output)
        if not args.json_output:
            print(DiagnosticFormatter.summary(result))
        sys.exit(0)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def version_command(executable: str, verbose: bool = False) -> None:
    """Print the detected version of a compiler executable."""
    try:
        print(get_default_version_cache().get(executable))
        sys.exit(0)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, verbose)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="javacbridge",
        description="Run javac-style compilers and report structured diagnostics",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="javacbridge 0.1.0",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Compile command
    compile_parser = subparsers.add_parser(
        "compile",
        help="Compile Java sources",
    )
    compile_parser.add_argument(
        "sources",
        nargs="*",
        help="Source files (default: scan the configured source path)",
    )
    compile_parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="JSON compiler configuration file",
    )
    compile_parser.add_argument(
        "-d",
        "--output-dir",
        default=None,
        help="Destination directory for class files",
    )
    compile_parser.add_argument(
        "-cp",
        "--classpath",
        default=None,
        help="Class path entries",
    )
    compile_parser.add_argument(
        "--sourcepath",
        default=None,
        help="Source locations to scan and pass as -sourcepath",
    )
    compile_parser.add_argument(
        "--release",
        default=None,
        help="Target release (--release)",
    )
    compile_parser.add_argument(
        "--fork",
        action="store_true",
        help="Run the compiler executable in a separate process",
    )
    compile_parser.add_argument(
        "--executable",
        default=None,
        help="Compiler executable (implies --fork)",
    )
    compile_parser.add_argument(
        "--reuse",
        choices=[s.value for s in CompilerReuseStrategy],
        default=None,
        help="In-process compiler reuse strategy",
    )
    compile_parser.add_argument(
        "--entry-point",
        default=None,
        help="In-process entry point as 'package.module:callable'",
    )
    compile_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    compile_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    # Parse command
    parse_parser = subparsers.add_parser(
        "parse",
        help="Parse captured compiler output",
    )
    parse_parser.add_argument(
        "log_file",
        type=Path,
        help="File containing the compiler output",
    )
    parse_parser.add_argument(
        "--exit-code",
        type=int,
        default=1,
        help="Exit code of the compiler run (default: 1)",
    )
    parse_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    parse_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    # Version command
    version_parser = subparsers.add_parser(
        "version",
        help="Detect the version of a compiler executable",
    )
    version_parser.add_argument(
        "executable",
        help="Compiler executable",
    )
    version_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """javacbridge - run javac-style compilers and report diagnostics."""
    parser = create_parser()
    parsed_args = parser.parse_args(argv)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    setup_logging(parsed_args.verbose)

    if parsed_args.command == "compile":
        compile_args = CompileArgs(
            sources=parsed_args.sources,
            config_file=parsed_args.config,
            output_dir=parsed_args.output_dir,
            classpath=parsed_args.classpath,
            sourcepath=parsed_args.sourcepath,
            release=parsed_args.release,
            fork=parsed_args.fork,
            executable=parsed_args.executable,
            reuse=parsed_args.reuse,
            entry_point=parsed_args.entry_point,
            json_output=parsed_args.json,
            verbose=parsed_args.verbose,
        )
        compile_command(compile_args)
    elif parsed_args.command == "parse":
        parse_args = ParseArgs(
            log_file=parsed_args.log_file,
            exit_code=parsed_args.exit_code,
            json_output=parsed_args.json,
            verbose=parsed_args.verbose,
        )
        parse_command(parse_args)
    elif parsed_args.command == "version":
        version_command(parsed_args.executable, parsed_args.verbose)


if __name__ == "__main__":
    main()
