"""Compilation Executor.

This module runs the compiler and captures its raw output.

Design:
    - OutOfProcessExecutor spawns the compiler executable with an argument
      file (avoids command line length limits); -J runtime flags stay on the
      command line
    - stdout and stderr are merged into one ordered capture
    - No timeout: the call blocks until the compiler exits
    - Ctrl-C kills the whole compiler process tree
    - With debug logging, the equivalent shell/batch script is written to the
      build directory for inspection
    - InProcessExecutor leases a handle from the CompilerInstancePool and
      captures the entry point's output in memory
"""

import io
import logging
import os
import platform
import stat
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

import psutil

from ..config.compiler_config import CompilerConfiguration, CompilerReuseStrategy
from .compiler import CompilerExecutionError
from .compiler_pool import CompilerHandle, CompilerInstancePool


def _debug_enabled() -> bool:
    return logging.getLogger().isEnabledFor(logging.DEBUG)


def write_arguments_file(args: List[str], directory: Optional[Path] = None) -> Path:
    """Write compiler arguments to a file for the '@argfile' syntax.

    Each argument goes on its own line, double-quoted, with backslashes
    replaced by forward slashes.

    Args:
        args: Compiler arguments
        directory: Directory for the file, system temp directory if None

    Returns:
        Path to the written arguments file
    """
    if directory is not None:
        directory.mkdir(parents=True, exist_ok=True)

    fd, name = tempfile.mkstemp(prefix="javacbridge-", suffix=".arguments", dir=directory)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        for arg in args:
            value = arg.replace("\\", "/")
            f.write(f'"{value}"\n')
    return Path(name)


def kill_process_tree(pid: int) -> int:
    """Terminate a process and all of its children.

    Returns:
        Number of processes signalled
    """
    try:
        root = psutil.Process(pid)
        processes = root.children(recursive=True) + [root]
    except psutil.NoSuchProcess:
        return 0

    killed = 0
    for proc in processes:
        try:
            proc.terminate()
            killed += 1
        except psutil.NoSuchProcess:
            pass  # Already dead

    _gone, alive = psutil.wait_procs(processes, timeout=3)
    for proc in alive:
        try:
            proc.kill()
            logging.warning(f"Force killed stubborn compiler process {proc.pid}")
        except psutil.NoSuchProcess:
            pass
    return killed


class OutOfProcessExecutor:
    """Runs a compiler executable in a separate process."""

    def __init__(self, config: CompilerConfiguration):
        """Initialize the executor.

        Args:
            config: Compiler configuration (working/build directories,
                memory settings, custom -J flags, debug file name)
        """
        self.config = config
        self.build_dir = Path(config.build_directory)

    def build_command(self, executable: str, args: List[str], arguments_file: Optional[Path]) -> List[str]:
        """Assemble the launcher command line."""
        cmd = [executable]
        if arguments_file is not None:
            cmd.append("@" + arguments_file.resolve().as_posix())
        else:
            cmd.extend(args)

        if self.config.maxmem:
            cmd.append(f"-J-Xmx{self.config.maxmem}")
        if self.config.meminitial:
            cmd.append(f"-J-Xms{self.config.meminitial}")
        cmd.extend(self.config.custom_runtime_flags)
        return cmd

    def invoke(self, executable: str, args: List[str]) -> Tuple[int, str]:
        """Run the compiler and capture its merged output.

        Args:
            executable: Compiler executable
            args: Compiler arguments

        Returns:
            Tuple of (exit_code, output_text)

        Raises:
            CompilerExecutionError: If the arguments file cannot be written or
                the process cannot be spawned
        """
        debug = _debug_enabled()
        arguments_file: Optional[Path] = None
        if self.config.use_arguments_file:
            try:
                arguments_file = write_arguments_file(args, self.build_dir if debug else None)
            except OSError as e:
                raise CompilerExecutionError("Error creating file with javac arguments") from e

        cmd = self.build_command(executable, args, arguments_file)
        if debug:
            self.write_debug_script(cmd)

        try:
            return self._run(cmd)
        finally:
            if arguments_file is not None and not debug:
                try:
                    arguments_file.unlink()
                except OSError as e:
                    logging.debug(f"Failed to remove arguments file {arguments_file}: {e}")

    def _run(self, cmd: List[str]) -> Tuple[int, str]:
        cwd = self.config.working_directory or None
        logging.debug(f"Executing: {' '.join(cmd)}")
        try:
            process = subprocess.Popen(
                cmd,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise CompilerExecutionError(f"Error while executing the external compiler {cmd[0]}: {e}") from e

        try:
            output, _ = process.communicate()
        except KeyboardInterrupt:
            killed = kill_process_tree(process.pid)
            logging.warning(f"Compilation interrupted, killed {killed} compiler processes")
            raise
        except OSError as e:
            kill_process_tree(process.pid)
            raise CompilerExecutionError(f"Error while waiting for the external compiler: {e}") from e

        return process.returncode, output or ""

    def debug_script_path(self) -> Path:
        name = (self.config.debug_file_name or "javac").strip() or "javac"
        extension = "bat" if platform.system() == "Windows" else "sh"
        return self.build_dir / f"{name}.{extension}"

    def write_debug_script(self, cmd: List[str]) -> Optional[Path]:
        """Persist the command line as an executable script.

        Failures are logged and never raised.
        """
        script = self.debug_script_path()
        try:
            script.parent.mkdir(parents=True, exist_ok=True)
            script.write_text(" ".join(cmd).replace("'", "") + "\n", encoding="utf-8")
            if platform.system() != "Windows":
                mode = script.stat().st_mode
                script.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except OSError as e:
            logging.warning(f"Unable to write '{script.name}' debug script file: {e}")
            return None
        logging.debug(f"Wrote compiler command line to {script}")
        return script


class InProcessExecutor:
    """Runs a compiler entry point inside the current interpreter."""

    def __init__(self, pool: CompilerInstancePool):
        self.pool = pool

    def invoke(self, args: List[str], strategy: CompilerReuseStrategy) -> Tuple[int, str]:
        """Run the entry point on a leased handle.

        Args:
            args: Compiler arguments
            strategy: Reuse strategy for the handle

        Returns:
            Tuple of (exit_code, output_text)

        Raises:
            CompilerConfigurationError: If no handle can be created
            CompilerExecutionError: If the entry point fails
        """
        with self.pool.lease(strategy) as handle:
            return self.run(handle, args)

    def run(self, handle: CompilerHandle, args: List[str]) -> Tuple[int, str]:
        """Run the entry point on a handle the caller already holds.

        Returns:
            Tuple of (exit_code, output_text)
        """
        sink = io.StringIO()
        logging.debug(f"Running {handle.symbol} in process ({handle.context})")
        exit_code = handle.invoke(args, sink)
        return exit_code, sink.getvalue()
