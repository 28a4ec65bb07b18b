"""
Source file discovery.

Explicitly configured source files win. Otherwise every source location is
scanned with the include patterns (default: all .java files), minus the
exclude patterns.
"""

from pathlib import Path
from typing import List, Optional

from ..config.compiler_config import CompilerConfiguration

DEFAULT_INCLUDES = ['**/*.java']

# Directories never scanned for sources
EXCLUDED_DIRS = {'.git', '.svn', '__pycache__', 'node_modules'}


class SourceScanner:
    """Collects the source files to hand to the compiler."""

    def __init__(self, includes: Optional[List[str]] = None, excludes: Optional[List[str]] = None):
        """
        Initialize source scanner.

        Args:
            includes: Glob patterns relative to each source location
            excludes: Glob patterns of files to skip
        """
        self.includes = includes or list(DEFAULT_INCLUDES)
        self.excludes = excludes or []

    @classmethod
    def from_config(cls, config: CompilerConfiguration) -> 'SourceScanner':
        return cls(includes=config.includes, excludes=config.excludes)

    def get_source_files(self, config: CompilerConfiguration) -> List[str]:
        """
        Get the source files for a compilation.

        Args:
            config: Compiler configuration

        Returns:
            Sorted, de-duplicated absolute source file paths
        """
        if config.source_files:
            files = [Path(f).absolute() for f in config.source_files]
        else:
            files = []
            for location in config.source_locations:
                files.extend(self.scan(Path(location)))

        return sorted({str(f) for f in files})

    def scan(self, source_dir: Path) -> List[Path]:
        """
        Scan one source location.

        Args:
            source_dir: Source root directory

        Returns:
            Matching files (absolute paths)
        """
        if not source_dir.is_dir():
            return []

        source_dir = source_dir.absolute()
        excluded = set()
        for pattern in self.excludes:
            excluded.update(source_dir.glob(pattern))

        sources = []
        for pattern in self.includes:
            for path in sorted(source_dir.glob(pattern)):
                if not path.is_file() or path in excluded:
                    continue
                relative_parts = path.relative_to(source_dir).parts[:-1]
                if any(part in EXCLUDED_DIRS for part in relative_parts):
                    continue
                sources.append(path)
        return sources
