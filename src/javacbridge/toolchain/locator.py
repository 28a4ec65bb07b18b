"""Compiler executable and tools archive discovery.

Search order for the out-of-process compiler:
    1. config.executable
    2. JAVACBRIDGE_EXECUTABLE environment variable
    3. $JAVA_HOME/bin/javac (javac.exe on Windows)
    4. javac on PATH

The tools archive holding the in-process entry point lives next to the
running interpreter's installation unless configured otherwise.
"""

import logging
import os
import platform
import shutil
import sys
from pathlib import Path
from typing import Optional

from ..build.compiler import CompilerConfigurationError

TOOLS_ARCHIVE_NAME = "javac-tools.zip"


def _javac_command() -> str:
    return "javac.exe" if platform.system() == "Windows" else "javac"


def find_javac_executable() -> str:
    """Locate the javac executable from JAVA_HOME or PATH.

    Returns:
        Absolute path of the javac executable

    Raises:
        CompilerConfigurationError: If JAVA_HOME is invalid or no javac exists
    """
    command = _javac_command()
    java_home = os.environ.get("JAVA_HOME")

    if java_home:
        home = Path(java_home)
        if not home.is_dir():
            raise CompilerConfigurationError(
                f"The environment variable JAVA_HOME={java_home} doesn't exist or is not a valid directory."
            )
        javac = home / "bin" / command
        if not javac.is_file():
            raise CompilerConfigurationError(
                f"The javac executable '{javac}' doesn't exist or is not a file. "
                "Verify the JAVA_HOME environment variable."
            )
        return str(javac.resolve())

    on_path = shutil.which(command)
    if on_path:
        return str(Path(on_path).resolve())

    raise CompilerConfigurationError("The environment variable JAVA_HOME is not correctly set.")


def get_javac_executable(executable: Optional[str] = None) -> str:
    """Get the compiler executable to launch.

    Args:
        executable: Explicitly configured executable, if any

    Returns:
        Executable path, or the bare 'javac' name when autodetection fails
    """
    if executable:
        return executable

    from_env = os.environ.get("JAVACBRIDGE_EXECUTABLE")
    if from_env:
        return from_env

    try:
        return find_javac_executable()
    except CompilerConfigurationError as e:
        logging.warning(f"Unable to autodetect 'javac' path, using 'javac' from the environment. ({e})")
        return "javac"


def default_tools_archive() -> Path:
    """Tools archive adjacent to the running interpreter's installation."""
    return Path(sys.base_prefix) / "lib" / TOOLS_ARCHIVE_NAME


def resolve_tools_archive(tools_archive: Optional[str] = None) -> Path:
    """Resolve the configured tools archive, falling back to the default."""
    if tools_archive:
        return Path(tools_archive)
    from_env = os.environ.get("JAVACBRIDGE_TOOLS_ARCHIVE")
    if from_env:
        return Path(from_env)
    return default_tools_archive()
