"""Compiler Instance Pool.

This module owns the lifecycle of in-process compiler handles.

Design:
    - A handle is a loaded entry point `compile(argv, out) -> int` plus the
      LoadingContext it was resolved from
    - Entry points are found on the default import path first, then in an
      isolated context built over the tools archive
    - An isolated context is active while its entry point runs, so imports
      made during invocation resolve against the archive
    - Reuse strategies:
        ALWAYS_NEW     fresh handle per invocation, never pooled
        REUSE_CREATED  free list of idle handles, returned after use
        REUSE_SAME     one shared handle, created once (double-checked lock)
    - lease() guarantees release even when the invocation raises
"""

import importlib
import importlib.abc
import importlib.machinery
import logging
import os
import sys
import threading
from collections import deque
from contextlib import contextmanager
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional, TextIO, Tuple

from ..config.compiler_config import CompilerReuseStrategy
from .compiler import CompilerConfigurationError, CompilerExecutionError

# Held while an isolated context is active; reentrant so nested invocations work
_ACTIVATION_LOCK = threading.RLock()


class _IsolatedFinder(importlib.abc.MetaPathFinder):
    """Finds top-level modules in a context's search path.

    Installed after the default finders, so the caller's import path always
    wins and only names it cannot resolve come from the archive.
    """

    def __init__(self, search_path: Tuple[str, ...]):
        self.search_path = list(search_path)

    def find_spec(self, fullname, path=None, target=None):
        if path is not None:
            # submodules are found through their package's __path__
            return None
        return importlib.machinery.PathFinder.find_spec(fullname, self.search_path, target)


class LoadingContext:
    """Where a compiler entry point was loaded from.

    An empty search_path is the default import machinery. A non-empty one is
    an isolated context: modules found there are private to the context and
    live outside sys.modules, while the modules they import still resolve
    through the caller's import path.

    An isolated context has to be active whenever its code runs, including
    imports performed lazily by the entry point. Activation puts the
    context's modules into sys.modules and installs a private finder for the
    search path. Both are removed again on exit. Activations of isolated
    contexts are serialized process-wide, and while one is active its module
    names are visible to every thread of the process.
    """

    def __init__(self, search_path: Tuple[str, ...] = ()):
        self.search_path = tuple(search_path)
        self._modules: Dict[str, ModuleType] = {}

    @property
    def is_isolated(self) -> bool:
        return bool(self.search_path)

    @property
    def modules(self) -> Dict[str, ModuleType]:
        """Modules loaded from the search path, by name."""
        return dict(self._modules)

    def owns(self, module: ModuleType) -> bool:
        """True if the module was loaded from this context's search path."""
        spec = getattr(module, "__spec__", None)
        origin = getattr(spec, "origin", None) or getattr(module, "__file__", None)
        if not isinstance(origin, str):
            return False
        for entry in self.search_path:
            if origin == entry or origin.startswith(entry.rstrip(os.sep) + os.sep):
                return True
        return False

    @contextmanager
    def activate(self) -> Iterator["LoadingContext"]:
        """Make this context's modules importable for the duration of the block."""
        if not self.is_isolated:
            yield self
            return

        with _ACTIVATION_LOCK:
            before = dict(sys.modules)
            sys.modules.update(self._modules)
            finder = _IsolatedFinder(self.search_path)
            sys.meta_path.append(finder)
            try:
                yield self
            finally:
                sys.meta_path.remove(finder)
                for name, module in list(sys.modules.items()):
                    if before.get(name) is not module and self.owns(module):
                        self._modules[name] = module
                for name in self._modules:
                    if name in before:
                        sys.modules[name] = before[name]
                    else:
                        sys.modules.pop(name, None)

    def load_module(self, name: str) -> ModuleType:
        """Import a (dotted) module within this context.

        Raises:
            ModuleNotFoundError: If the module is not found
        """
        if not self.is_isolated:
            return importlib.import_module(name)
        with self.activate():
            return importlib.import_module(name)

    def __str__(self) -> str:
        if not self.is_isolated:
            return "<default>"
        return "<isolated " + ", ".join(self.search_path) + ">"


class CompilerHandle:
    """A loaded, invocable compiler entry point."""

    def __init__(
        self,
        symbol: str,
        entry_point: Callable[[List[str], TextIO], Any],
        context: LoadingContext,
        version: Optional[str] = None,
    ):
        self.symbol = symbol
        self.entry_point = entry_point
        self.context = context
        self.version = version

    def invoke(self, args: List[str], sink: TextIO) -> int:
        """Run the compiler entry point.

        Args:
            args: Compiler argument vector
            sink: Text stream receiving the compiler output

        Returns:
            Compiler exit code

        Raises:
            CompilerExecutionError: If the entry point raises or returns a
                non-integer result
        """
        try:
            with self.context.activate():
                result = self.entry_point(list(args), sink)
        except KeyboardInterrupt:
            raise
        except Exception as e:
            raise CompilerExecutionError("Error while executing the compiler.") from e

        if isinstance(result, bool) or not isinstance(result, int):
            raise CompilerExecutionError(
                f"Error while executing the compiler: {self.symbol} returned {result!r} instead of an exit code"
            )
        return result

    def __repr__(self) -> str:
        return f"CompilerHandle({self.symbol!r}, context={self.context})"


def split_symbol(symbol: str) -> Tuple[str, str]:
    """Split 'package.module:callable' into module and attribute names."""
    module_name, sep, attribute = symbol.partition(":")
    if not sep:
        module_name, _, attribute = symbol.rpartition(".")
    if not module_name or not attribute:
        raise CompilerConfigurationError(f"Invalid compiler entry point: {symbol!r}")
    return module_name, attribute


def _missing_module_is_target(error: ModuleNotFoundError, module_name: str) -> bool:
    # A missing dependency of the entry module is a real failure, not a miss.
    if error.name is None:
        return True
    return module_name == error.name or module_name.startswith(error.name + ".")


def create_handle(symbol: str, tools_archive: Path) -> CompilerHandle:
    """Load the compiler entry point into a new handle.

    Args:
        symbol: Entry point as 'package.module:callable'
        tools_archive: Archive searched when the default import path fails

    Returns:
        A new CompilerHandle

    Raises:
        CompilerConfigurationError: If the archive or entry point is missing
    """
    module_name, attribute = split_symbol(symbol)

    try:
        module = importlib.import_module(module_name)
        context = LoadingContext()
    except ModuleNotFoundError as e:
        if not _missing_module_is_target(e, module_name):
            raise CompilerConfigurationError(f"Unable to load compiler module {module_name}: {e}") from e
        module, context = _load_from_archive(module_name, tools_archive)

    entry_point = getattr(module, attribute, None)
    if entry_point is None or not callable(entry_point):
        raise CompilerConfigurationError(
            f"Compiler entry point '{attribute}' not found in module {module_name} ({context})"
        )

    version = getattr(module, "__version__", None)
    logging.debug(f"Created compiler handle for {symbol} from {context}")
    return CompilerHandle(symbol, entry_point, context, None if version is None else str(version))


def _load_from_archive(module_name: str, tools_archive: Path) -> Tuple[ModuleType, LoadingContext]:
    if not tools_archive.exists():
        raise CompilerConfigurationError(f"Compiler tools archive not found: {tools_archive}")

    context = LoadingContext((str(tools_archive.resolve()),))
    try:
        return context.load_module(module_name), context
    except ModuleNotFoundError as e:
        raise CompilerConfigurationError(
            f"Unable to locate the compiler module {module_name} in:\n"
            f"  {tools_archive}\n"
            "Make sure the archive contains the compiler entry point, or set\n"
            "JAVACBRIDGE_TOOLS_ARCHIVE to the archive location."
        ) from e
    except KeyboardInterrupt:
        raise
    except Exception as e:
        raise CompilerConfigurationError(f"Failed to load {module_name} from {tools_archive}: {e}") from e


class CompilerInstancePool:
    """Thread-safe owner of in-process compiler handles for one entry point.

    The free list is a deque: popleft() and append() are atomic, so callers
    under REUSE_CREATED never wait on one another (each may pay for a new
    handle when the list is empty). REUSE_SAME constructs its single handle
    under a lock, after an unlocked fast-path check.
    """

    def __init__(
        self,
        symbol: str,
        tools_archive: Path,
        factory: Optional[Callable[[], CompilerHandle]] = None,
    ):
        """Initialize the pool.

        Args:
            symbol: Entry point as 'package.module:callable'
            tools_archive: Fallback archive containing the entry point
            factory: Handle constructor, defaults to create_handle()
        """
        self.symbol = symbol
        self.tools_archive = Path(tools_archive)
        self._factory = factory or (lambda: create_handle(self.symbol, self.tools_archive))
        self._free: Deque[CompilerHandle] = deque()
        self._shared: Optional[CompilerHandle] = None
        self.lock = threading.Lock()

    def create_handle(self) -> CompilerHandle:
        return self._factory()

    def acquire(self, strategy: CompilerReuseStrategy) -> CompilerHandle:
        """Get a handle according to the reuse strategy."""
        if strategy is CompilerReuseStrategy.ALWAYS_NEW:
            return self.create_handle()

        if strategy is CompilerReuseStrategy.REUSE_CREATED:
            try:
                return self._free.popleft()
            except IndexError:
                return self.create_handle()

        handle = self._shared
        if handle is None:
            with self.lock:
                handle = self._shared
                if handle is None:
                    handle = self.create_handle()
                    self._shared = handle
        return handle

    def release(self, handle: CompilerHandle, strategy: CompilerReuseStrategy) -> None:
        """Return a handle after use; only REUSE_CREATED keeps it."""
        if strategy is CompilerReuseStrategy.REUSE_CREATED:
            self._free.append(handle)

    @contextmanager
    def lease(self, strategy: CompilerReuseStrategy) -> Iterator[CompilerHandle]:
        """Acquire a handle for the duration of a with-block."""
        handle = self.acquire(strategy)
        try:
            yield handle
        finally:
            self.release(handle, strategy)

    @property
    def idle_count(self) -> int:
        return len(self._free)
