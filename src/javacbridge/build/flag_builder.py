"""Compiler Flag Builder.

This module maps a CompilerConfiguration to the compiler argument vector.

Design:
    - Deterministic: same configuration and version, same arguments
    - Options introduced by later compiler releases are only emitted when
      the detected version supports them
    - Custom arguments keyed '-J...' are launcher flags and are skipped here
"""

import os
from pathlib import Path
from typing import List

from ..config.compiler_config import CompilerConfiguration
from ..toolchain.version import JavaVersion


def get_path_string(entries: List[str]) -> str:
    """Join path entries with the platform path separator."""
    return os.pathsep.join(entries)


def build_compiler_arguments(
    config: CompilerConfiguration,
    source_files: List[str],
    compiler_version: str
) -> List[str]:
    """Build the compiler arguments.

    Args:
        config: Compiler configuration
        source_files: Source files to compile
        compiler_version: Detected compiler version (e.g. '1.8', '17')

    Returns:
        Ordered list of compiler arguments
    """
    args: List[str] = []

    args.extend(["-d", str(Path(config.output_location).absolute())])

    if config.classpath_entries:
        args.extend(["-classpath", get_path_string(config.classpath_entries)])

    if config.modulepath_entries:
        args.extend(["--module-path", get_path_string(config.modulepath_entries)])

    # Always pass the source path, annotation processing needs it
    if config.source_locations:
        args.extend(["-sourcepath", get_path_string(config.source_locations)])

    args.extend(source_files)

    if JavaVersion.JAVA_1_6.is_older_or_equal_to(compiler_version):
        if config.generated_sources_directory is not None:
            generated = Path(config.generated_sources_directory)
            generated.mkdir(parents=True, exist_ok=True)
            args.extend(["-s", str(generated.absolute())])
        if config.proc is not None:
            args.append(f"-proc:{config.proc}")
        if config.annotation_processors is not None:
            args.extend(["-processor", ",".join(config.annotation_processors)])
        if config.processor_path_entries:
            args.extend(["-processorpath", get_path_string(config.processor_path_entries)])
        if config.processor_module_path_entries:
            args.extend(["--processor-module-path", get_path_string(config.processor_module_path_entries)])

    if config.optimize:
        args.append("-O")

    if config.debug:
        if config.debug_level:
            args.append(f"-g:{config.debug_level}")
        else:
            args.append("-g")

    if config.verbose:
        args.append("-verbose")

    if JavaVersion.JAVA_1_8.is_older_or_equal_to(compiler_version) and config.parameters:
        args.append("-parameters")

    if config.enable_preview:
        args.append("--enable-preview")

    if config.implicit_option is not None:
        args.append(f"-implicit:{config.implicit_option}")

    show_warnings = config.show_warnings
    if config.show_deprecation:
        args.append("-deprecation")
        # deprecation messages are only displayed with warnings on
        show_warnings = True

    if not show_warnings:
        args.append("-nowarn")
    elif config.show_lint:
        if config.warnings:
            args.append(f"-Xlint:{config.warnings}")
        else:
            args.append("-Xlint")

    if config.fail_on_warning:
        args.append("-Werror")

    if JavaVersion.JAVA_9.is_older_or_equal_to(compiler_version) and config.release_version:
        args.extend(["--release", config.release_version])
    else:
        # Without an explicit target the compiler defaults to its own release
        args.extend(["-target", config.target_version or "1.1"])

        if JavaVersion.JAVA_1_4.is_older_or_equal_to(compiler_version):
            # later compilers reject a 1.1 target without a matching source level
            args.extend(["-source", config.source_version or "1.3"])

    if JavaVersion.JAVA_1_4.is_older_or_equal_to(compiler_version) and config.source_encoding:
        args.extend(["-encoding", config.source_encoding])

    if config.module_version:
        args.extend(["--module-version", config.module_version])

    for key, value in config.custom_compiler_arguments:
        if not key or key.startswith("-J"):
            continue
        args.append(key)
        if value:
            args.append(value)

    if not config.fork and "-XDuseUnsharedTable=false" not in args:
        args.append("-XDuseUnsharedTable=true")

    return args
