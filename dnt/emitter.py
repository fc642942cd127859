"""
Diagnostic gate and multi-target emission.

Emission runs up to three passes over one `VirtualProject`, strictly in order:

1. Declarations: `.d.ts` files into `<out>/types`
2. ESM: ES2015 modules into `<out>/esm` plus a `{"type": "module"}` stub
3. UMD: UMD modules into `<out>/umd` plus a `{"type": "commonjs"}` stub,
   with `import.meta` rewritten

Each pass reconfigures the project, compiles a fresh program and emits it
through the writer. Any emit diagnostic aborts the build.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any

from .compiler.diagnostics import output_diagnostics
from .compiler.options import ModuleKind
from .compiler.project import EmitResult, Program, VirtualProject
from .compiler.transforms import SourceTransformer, transform_import_meta
from .errors import DiagnosticsError, EmitError
from .fs import ScopedFileWriter

logger = logging.getLogger(__name__)


class EmissionTarget(Enum):
    """One emission pass."""

    DECLARATIONS = "types"
    ESM = "esm"
    UMD = "umd"

    @property
    def dir_name(self) -> str:
        return self.value

    @property
    def option_overrides(self) -> dict[str, Any]:
        return _OVERRIDES[self]

    @property
    def manifest_stub(self) -> dict[str, str] | None:
        return _STUBS[self]

    @property
    def transformers(self) -> tuple[SourceTransformer, ...]:
        return (transform_import_meta,) if self is EmissionTarget.UMD else ()

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_OVERRIDES: dict[EmissionTarget, dict[str, Any]] = {
    EmissionTarget.DECLARATIONS: {"declaration": True},
    EmissionTarget.ESM: {"declaration": False, "module": ModuleKind.ES2015},
    EmissionTarget.UMD: {"declaration": False, "es_module_interop": True, "module": ModuleKind.UMD},
}

_STUBS: dict[EmissionTarget, dict[str, str] | None] = {
    EmissionTarget.DECLARATIONS: None,
    EmissionTarget.ESM: {"type": "module"},
    EmissionTarget.UMD: {"type": "commonjs"},
}

_DESCRIPTIONS = {
    EmissionTarget.DECLARATIONS: "declaration files",
    EmissionTarget.ESM: "ESM package",
    EmissionTarget.UMD: "CommonJs package",
}


def run_diagnostic_gate(program: Program) -> None:
    """
    Fail the build when the program has pre-emit diagnostics.

    Raises:
        DiagnosticsError: After logging every diagnostic
    """
    diagnostics = program.get_pre_emit_diagnostics()
    if diagnostics:
        output_diagnostics(diagnostics)
        raise DiagnosticsError(
            f"Type checking failed with {len(diagnostics)} diagnostic(s)",
            diagnostics=diagnostics,
        )


def format_manifest_stub(stub: dict[str, str]) -> str:
    return json.dumps(stub, indent=2) + "\n"


class MultiTargetEmitter:
    """Drain one project into the declaration, ESM and UMD outputs."""

    def __init__(self, project: VirtualProject, writer: ScopedFileWriter, out_dir: Path) -> None:
        self.project = project
        self.writer = writer
        self.out_dir = Path(out_dir)

    def targets(self, *, declaration: bool) -> list[EmissionTarget]:
        targets = [EmissionTarget.ESM, EmissionTarget.UMD]
        if declaration:
            targets.insert(0, EmissionTarget.DECLARATIONS)
        return targets

    def emit_target(self, target: EmissionTarget) -> EmitResult:
        """
        Reconfigure, compile and emit one pass, then write its manifest stub.

        Raises:
            EmitError: If the emit produced diagnostics
        """
        logger.info(f"Emitting {target.description}...")
        target_dir = self.out_dir / target.dir_name
        self.project.reconfigure(out_dir=str(target_dir), **target.option_overrides)
        program = self.project.compile()

        result = program.emit(
            self.writer.write_callback,
            only_dts=target is EmissionTarget.DECLARATIONS,
            transformers=target.transformers,
        )
        if result.diagnostics:
            output_diagnostics(result.diagnostics)
            raise EmitError(
                f"Emitting {target.description} failed with {len(result.diagnostics)} diagnostic(s)",
                target=target.dir_name,
                diagnostics=result.diagnostics,
            )

        stub = target.manifest_stub
        if stub is not None:
            self.writer.write(target_dir / "package.json", format_manifest_stub(stub))
        logger.debug(f"Emitted {len(result.emitted_files)} file(s) into {target_dir}")
        return result

    def emit_all(self, *, declaration: bool) -> dict[EmissionTarget, EmitResult]:
        """Run every pass in order; the first failure aborts the rest."""
        return {target: self.emit_target(target) for target in self.targets(declaration=declaration)}
