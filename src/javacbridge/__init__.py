"""
javacbridge - run javac-style compilers and parse their diagnostics.

Import order matters: the configuration module depends on the shared
compiler types, and the build components depend on the configuration.
"""

from .build.compiler import (
    CompilerConfigurationError,
    CompilerError,
    CompilerExecutionError,
    CompilerMessage,
    CompilerResult,
    ICompiler,
    Severity,
)
from .config import CompilerConfiguration, CompilerReuseStrategy, load_config
from .toolchain import JavaVersion, VersionCache, extract_major_and_minor_version
from .build.diagnostic_parser import (
    DiagnosticParser,
    parse_modern_error,
    parse_modern_stream,
    parse_output,
)
from .build.compiler_pool import CompilerHandle, CompilerInstancePool, LoadingContext
from .build.compilation_executor import InProcessExecutor, OutOfProcessExecutor
from .build.flag_builder import build_compiler_arguments
from .build.source_scanner import SourceScanner
from .build.javac_compiler import JavacCompiler

__version__ = "0.1.0"

__all__ = [
    'CompilerConfigurationError',
    'CompilerError',
    'CompilerExecutionError',
    'CompilerMessage',
    'CompilerResult',
    'ICompiler',
    'Severity',
    'CompilerConfiguration',
    'CompilerReuseStrategy',
    'load_config',
    'JavaVersion',
    'VersionCache',
    'extract_major_and_minor_version',
    'DiagnosticParser',
    'parse_modern_error',
    'parse_modern_stream',
    'parse_output',
    'CompilerHandle',
    'CompilerInstancePool',
    'LoadingContext',
    'InProcessExecutor',
    'OutOfProcessExecutor',
    'build_compiler_arguments',
    'SourceScanner',
    'JavacCompiler',
]
