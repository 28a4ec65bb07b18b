"""
Build components for javacbridge.

This package provides:
- Diagnostic records and compilation results (compiler)
- Compiler output parsing (diagnostic_parser)
- In-process compiler handle pooling (compiler_pool)
- Forked and in-process execution (compilation_executor)
- Argument building (flag_builder)
- Source discovery (source_scanner)
- The javac facade (javac_compiler)

Public names are re-exported from the top-level javacbridge package.
"""
