"""
Compiler layer.

The pipeline treats the TypeScript compiler as a black box reached through
the `CompilerBackend`/`Program` protocols. `VirtualProject` owns the source
files and configuration; `TscBackend` drives the `tsc` command line.
"""

from .backend import DEFAULT_TSC_COMMAND, TscBackend, TscProgram
from .diagnostics import Diagnostic, format_diagnostics, output_diagnostics, parse_tsc_output
from .options import CompilerOptions, JsxEmit, ModuleKind, ScriptTarget, create_base_options
from .project import CompilerBackend, EmitResult, Program, VirtualProject, WriteFileCallback
from .transforms import IMPORT_META_REPLACEMENT, SourceTransformer, transform_import_meta

__all__ = [
    "DEFAULT_TSC_COMMAND",
    "IMPORT_META_REPLACEMENT",
    "CompilerBackend",
    "CompilerOptions",
    "Diagnostic",
    "EmitResult",
    "JsxEmit",
    "ModuleKind",
    "Program",
    "ScriptTarget",
    "SourceTransformer",
    "TscBackend",
    "TscProgram",
    "VirtualProject",
    "WriteFileCallback",
    "create_base_options",
    "format_diagnostics",
    "output_diagnostics",
    "parse_tsc_output",
    "transform_import_meta",
]
