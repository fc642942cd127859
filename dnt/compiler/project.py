"""
Virtual compilation project.

Holds the compiler configuration and an in-memory set of source files keyed
by path. The project is recompiled once per emission pass: callers
`reconfigure` it and then `compile` a fresh program. A compiled program is a
snapshot; later reconfiguration does not affect it.

Example:
    project = VirtualProject(TscBackend(), create_base_options(out_dir, declaration=True))
    project.add_source_file(f"{out_dir}/src/mod.ts", text)
    program = project.compile()

    project.reconfigure(declaration=False, out_dir=f"{out_dir}/esm")
    program = project.compile()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from .diagnostics import Diagnostic
from .options import CompilerOptions
from .transforms import SourceTransformer

logger = logging.getLogger(__name__)

WriteFileCallback = Callable[[str, str, bool], None]
"""`(file_path, data, write_byte_order_mark)` called once per emitted file."""


@dataclass
class EmitResult:
    """Result of one `Program.emit` call."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    """Diagnostics produced while emitting."""

    emitted_files: list[str] = field(default_factory=list)
    """Paths handed to the write callback, in order."""


class Program(Protocol):
    """A compiled program over a fixed configuration and file set."""

    options: CompilerOptions
    source_files: Mapping[str, str]

    def get_pre_emit_diagnostics(self) -> list[Diagnostic]:
        """Return syntactic and semantic diagnostics for the whole program."""
        ...

    def emit(
        self,
        write_file: WriteFileCallback,
        *,
        only_dts: bool = False,
        transformers: Sequence[SourceTransformer] = (),
    ) -> EmitResult:
        """Emit every output file through `write_file`."""
        ...


class CompilerBackend(Protocol):
    """Creates programs. The compiler's internals are opaque to the pipeline."""

    def create_program(self, options: CompilerOptions, files: Mapping[str, str]) -> Program:
        """Materialize a program for `options` over `files`."""
        ...


class VirtualProject:
    """
    An owned, mutable compiler workspace.

    File identity is stable across recompiles; only the configuration varies
    between emission passes. The project must not be shared between builds.
    """

    def __init__(self, backend: CompilerBackend, base_options: CompilerOptions) -> None:
        self.backend = backend
        self.options = base_options
        self._files: dict[str, str] = {}

    @property
    def file_paths(self) -> list[str]:
        """Sorted paths of every source file in the project."""
        return sorted(self._files)

    def add_source_file(self, path: str, text: str) -> None:
        """Insert or replace the source file at `path`."""
        if path in self._files:
            logger.debug(f"Replacing source file {path}")
        self._files[path] = text

    def reconfigure(self, **overrides: Any) -> CompilerOptions:
        """Merge option overrides into the live configuration."""
        self.options = self.options.merge(**overrides)
        return self.options

    def compile(self) -> Program:
        """Create a program from the current configuration and file set."""
        logger.debug(f"Compiling {len(self._files)} file(s) into {self.options.out_dir}")
        return self.backend.create_program(self.options, dict(self._files))
