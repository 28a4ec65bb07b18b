"""Javac compiler integration.

This module ties the pieces together: source discovery, version detection,
argument building, execution (forked or in-process) and diagnostic parsing.
"""

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..config.compiler_config import CompilerConfiguration
from ..toolchain.locator import get_javac_executable, resolve_tools_archive
from ..toolchain.version import VersionCache, get_default_version_cache
from .compilation_executor import InProcessExecutor, OutOfProcessExecutor
from .compiler import CompilerResult, ICompiler
from .compiler_pool import CompilerHandle, CompilerInstancePool
from .diagnostic_parser import parse_output
from .flag_builder import build_compiler_arguments
from .source_scanner import SourceScanner


class JavacCompiler(ICompiler):
    """Compiles Java sources with javac, forked or in-process.

    In-process handle pools are kept per (entry point, tools archive) for the
    life of this object, so reuse strategies apply across calls.
    """

    def __init__(self, version_cache: Optional[VersionCache] = None):
        self.version_cache = version_cache or get_default_version_cache()
        self._pools: Dict[Tuple[str, str], CompilerInstancePool] = {}
        self._pools_lock = threading.Lock()

    @property
    def compiler_id(self) -> str:
        return "javac"

    def get_pool(self, config: CompilerConfiguration) -> CompilerInstancePool:
        """Get the handle pool for the configured entry point."""
        archive = resolve_tools_archive(config.tools_archive)
        key = (config.entry_point, str(archive))
        with self._pools_lock:
            pool = self._pools.get(key)
            if pool is None:
                pool = CompilerInstancePool(config.entry_point, archive)
                self._pools[key] = pool
        return pool

    def get_in_process_version(self, config: CompilerConfiguration, handle: Optional[CompilerHandle] = None) -> str:
        """Version of the in-process compiler.

        Uses config.compiler_version, then the entry module's __version__.
        An unknown version is treated as the newest release. A handle the
        caller already holds is used instead of leasing another one.
        """
        if config.compiler_version:
            return config.compiler_version
        if handle is not None:
            return handle.version or ""
        pool = self.get_pool(config)
        with pool.lease(config.compiler_reuse_strategy) as leased:
            return leased.version or ""

    def resolve_version(self, config: CompilerConfiguration) -> Tuple[Optional[str], str]:
        """Get (executable, version) for the configured mode."""
        if config.fork:
            executable = get_javac_executable(config.executable)
            return executable, self.version_cache.get(executable)
        return None, self.get_in_process_version(config)

    def create_command_line(self, config: CompilerConfiguration) -> List[str]:
        _, version = self.resolve_version(config)
        sources = SourceScanner.from_config(config).get_source_files(config)
        return build_compiler_arguments(config, sources, version)

    def perform_compile(self, config: CompilerConfiguration) -> CompilerResult:
        """Compile the configured sources.

        Args:
            config: Compiler configuration

        Returns:
            CompilerResult; successful and empty when there is nothing to compile

        Raises:
            CompilerError: If the compiler cannot be located, loaded or run
        """
        destination = Path(config.output_location)
        destination.mkdir(parents=True, exist_ok=True)

        sources = SourceScanner.from_config(config).get_source_files(config)
        if not sources:
            logging.info("No sources to compile")
            return CompilerResult()

        logging.info(
            f"Compiling {len(sources)} source file{'s' if len(sources) != 1 else ''} "
            f"with {self.compiler_id} [{'forked' if config.fork else 'in-process'}] "
            f"to {destination}"
        )

        if config.fork:
            executable = get_javac_executable(config.executable)
            args = build_compiler_arguments(config, sources, self.version_cache.get(executable))
            exit_code, output = OutOfProcessExecutor(config).invoke(executable, args)
        else:
            # one lease covers both the version lookup and the run
            executor = InProcessExecutor(self.get_pool(config))
            with executor.pool.lease(config.compiler_reuse_strategy) as handle:
                args = build_compiler_arguments(config, sources, self.get_in_process_version(config, handle))
                exit_code, output = executor.run(handle, args)

        messages = parse_output(exit_code, output)
        logging.debug(f"Compiler exited with code {exit_code}, {len(messages)} diagnostics")
        return CompilerResult.from_exit_code(exit_code, messages)
