"""Configuration for javacbridge."""

from .compiler_config import (
    DEFAULT_ENTRY_POINT,
    CompilerConfiguration,
    CompilerReuseStrategy,
    load_config,
)

__all__ = [
    'DEFAULT_ENTRY_POINT',
    'CompilerConfiguration',
    'CompilerReuseStrategy',
    'load_config',
]
