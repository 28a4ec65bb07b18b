"""
Compiler toolchain discovery for javacbridge.

This module provides:
- Compiler version detection and comparison
- Per-executable version caching
- Compiler executable and tools archive location
"""

from .locator import (
    TOOLS_ARCHIVE_NAME,
    default_tools_archive,
    find_javac_executable,
    get_javac_executable,
    resolve_tools_archive,
)
from .version import (
    JavaVersion,
    VersionCache,
    extract_major_and_minor_version,
    get_default_version_cache,
)

__all__ = [
    'TOOLS_ARCHIVE_NAME',
    'JavaVersion',
    'VersionCache',
    'default_tools_archive',
    'extract_major_and_minor_version',
    'find_javac_executable',
    'get_default_version_cache',
    'get_javac_executable',
    'resolve_tools_archive',
]
