"""
Static code generation.

Compiles canonical IR into React source and packages it as export bundles.
"""

from mirkit.codegen.export import compile_document, export_document, write_bundle
from mirkit.codegen.react_compiler import (
    CompiledComponent,
    CompileOptions,
    MountedCssFile,
    ReactComponentCompiler,
    to_identifier,
)
from mirkit.codegen.scaffold import ViteProjectGenerator

__all__ = [
    "CompileOptions",
    "CompiledComponent",
    "MountedCssFile",
    "ReactComponentCompiler",
    "ViteProjectGenerator",
    "compile_document",
    "export_document",
    "to_identifier",
    "write_bundle",
]
