"""Compiler version detection and comparison.

The argument vector depends on the compiler release (e.g. --release needs 9+,
-parameters needs 1.8+). Out-of-process compilers are probed with -version
once per executable and the answer is cached for the life of the process.
"""

import logging
import os
import re
import shutil
import subprocess
import threading
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from ..build.compiler import CompilerConfigurationError

JAVA_MAJOR_AND_MINOR_VERSION_PATTERN = re.compile(r"\d+(\.\d+)?")


class JavaVersion(Enum):
    """Compiler releases, identified by their version string prefixes.

    Since Java 9 the version scheme dropped the leading '1.'.
    """

    JAVA_1_3_OR_OLDER = ("1.3", "1.2", "1.1", "1.0")
    JAVA_1_4 = ("1.4",)
    JAVA_1_5 = ("1.5",)
    JAVA_1_6 = ("1.6",)
    JAVA_1_7 = ("1.7",)
    JAVA_1_8 = ("1.8",)
    JAVA_9 = ("9",)

    @property
    def version_prefixes(self) -> Tuple[str, ...]:
        return self.value

    def is_older_or_equal_to(self, version: str) -> bool:
        """Check whether this release is older than or equal to a version.

        The version is compared against the prefixes of every preceding
        release; an unrecognized version counts as newer than all of them.
        """
        members = list(JavaVersion)
        for older in members[:members.index(self)]:
            if any(version.startswith(prefix) for prefix in older.version_prefixes):
                return False
        return True


def extract_major_and_minor_version(text: str) -> str:
    """Extract the 'major[.minor]' version from -version output.

    Args:
        text: Output of '<javac> -version', e.g. 'javac 1.8.0_392'

    Returns:
        Normalized version string such as '1.8' or '17'

    Raises:
        ValueError: If the text contains no version number
    """
    match = JAVA_MAJOR_AND_MINOR_VERSION_PATTERN.search(text)
    if match is None:
        raise ValueError(f'Could not extract version from "{text}"')
    return match.group()


def _run_version_probe(executable: str) -> Tuple[int, str]:
    result = subprocess.run(
        [executable, "-version"],
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        errors="replace",
    )
    return result.returncode, result.stdout or ""


class VersionCache:
    """Thread-safe cache of compiler versions keyed by executable path.

    Entries are never invalidated: a given executable path is assumed to keep
    its version for the life of the process.
    """

    def __init__(self, probe: Optional[Callable[[str], Tuple[int, str]]] = None):
        """Initialize the cache.

        Args:
            probe: Callable running '<executable> -version' and returning
                (exit_code, merged_output). Defaults to a subprocess probe.
        """
        self._probe = probe or _run_version_probe
        self._versions: Dict[str, str] = {}
        self.lock = threading.Lock()

    @staticmethod
    def cache_key(executable: str) -> str:
        """Absolute path of the executable, resolving bare names via PATH."""
        resolved = shutil.which(executable) or executable
        return os.path.abspath(resolved)

    def get(self, executable: str) -> str:
        """Return the version of an executable, probing it on first use.

        Raises:
            CompilerConfigurationError: If the probe fails or its output has
                no version number
        """
        key = self.cache_key(executable)
        with self.lock:
            version = self._versions.get(key)
            if version is None:
                version = self._probe_version(executable)
                self._versions[key] = version
        return version

    def _probe_version(self, executable: str) -> str:
        logging.debug(f"Probing compiler version: {executable} -version")
        try:
            exit_code, output = self._probe(executable)
        except KeyboardInterrupt:
            raise
        except OSError as e:
            raise CompilerConfigurationError(f"Error while executing the external compiler {executable}") from e

        if exit_code != 0:
            raise CompilerConfigurationError(
                f"Could not retrieve version from {executable}. Exit code {exit_code}, Output: {output}"
            )
        try:
            version = extract_major_and_minor_version(output)
        except ValueError as e:
            raise CompilerConfigurationError(str(e)) from e

        logging.info(f"Detected compiler version {version} for {executable}")
        return version

    def __contains__(self, executable: str) -> bool:
        with self.lock:
            return self.cache_key(executable) in self._versions

    def clear(self) -> None:
        with self.lock:
            self._versions.clear()


_default_cache = VersionCache()


def get_default_version_cache() -> VersionCache:
    """Process-wide version cache."""
    return _default_cache
