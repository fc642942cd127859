"""
TypeScript compiler backend.

Drives the `tsc` command line. Each program call stages the in-memory files
into a temporary directory inside the package output directory, so that
bare specifiers resolve against the `node_modules` installed there, writes a
`tsconfig.json` for the program's options and runs tsc once.
"""

from __future__ import annotations

import json
import logging
import subprocess
import tempfile
from collections.abc import Mapping, Sequence
from functools import reduce
from pathlib import Path
from types import MappingProxyType
from typing import Any

from ..capabilities import CapabilityPolicy
from ..errors import CompilerError
from ..fs import BYTE_ORDER_MARK
from ..process import get_platform_command
from .diagnostics import Diagnostic, parse_tsc_output
from .options import CompilerOptions
from .project import EmitResult, WriteFileCallback
from .transforms import SourceTransformer

logger = logging.getLogger(__name__)

DEFAULT_TSC_COMMAND: tuple[str, ...] = ("npx", "--yes", "-p", "typescript", "tsc")


class TscBackend:
    """
    Compiler backend running the `tsc` CLI.

    Example:
        backend = TscBackend()
        program = backend.create_program(options, {"/out/src/mod.ts": "export const a = 1;"})
        diagnostics = program.get_pre_emit_diagnostics()
    """

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_TSC_COMMAND,
        capabilities: CapabilityPolicy | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize the backend.

        Args:
            command: Command line that starts tsc
            capabilities: Policy consulted before launching tsc
            timeout: Seconds to wait for a single tsc run (None waits forever)
        """
        self.command = tuple(command)
        self.capabilities = capabilities or CapabilityPolicy()
        self.timeout = timeout

    def create_program(self, options: CompilerOptions, files: Mapping[str, str]) -> TscProgram:
        return TscProgram(self, options, files)

    def run(
        self,
        options: CompilerOptions,
        files: Mapping[str, str],
        *,
        emit: bool,
        only_dts: bool = False,
        emit_dir: Path | None = None,
    ) -> list[Diagnostic]:
        """
        Run tsc once over `files`.

        Args:
            options: Compiler options of the program
            files: Source files keyed by path under `options.root_dir`
            emit: Whether tsc should write output
            only_dts: Emit declaration files only
            emit_dir: Directory tsc writes output to (required when emitting)

        Returns:
            Every diagnostic tsc printed
        """
        project_root = Path(options.root_dir).parent
        project_root.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory(prefix=".dnt-staging-", dir=project_root) as staging:
            staging_dir = Path(staging).resolve()
            path_map = _stage_files(staging_dir, Path(options.root_dir), files)

            tsconfig = _build_tsconfig(
                options,
                staged_files=sorted(path_map),
                emit=emit,
                only_dts=only_dts,
                emit_dir=emit_dir,
            )
            tsconfig_path = staging_dir / "tsconfig.json"
            tsconfig_path.write_text(json.dumps(tsconfig, indent=2), encoding="utf-8")

            cmd = get_platform_command([*self.command, "-p", str(tsconfig_path), "--pretty", "false"])
            self.capabilities.check_run(cmd[0])
            logger.debug(f"Running {' '.join(cmd)}")
            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    cwd=staging_dir,
                    check=False,
                    timeout=self.timeout,
                )
            except FileNotFoundError as e:
                raise CompilerError(f"TypeScript compiler not found: {e}", command=cmd) from e
            except subprocess.TimeoutExpired as e:
                raise CompilerError(f"TypeScript compiler timed out after {self.timeout}s", command=cmd) from e

        output = "\n".join(part for part in (result.stdout, result.stderr) if part)
        diagnostics = parse_tsc_output(output, path_map)
        if result.returncode != 0 and not diagnostics:
            raise CompilerError(
                f"TypeScript compiler failed with exit code {result.returncode}",
                command=cmd,
                exit_code=result.returncode,
                output=output,
            )
        return diagnostics


class TscProgram:
    """A program snapshot compiled by `TscBackend`."""

    def __init__(self, backend: TscBackend, options: CompilerOptions, files: Mapping[str, str]) -> None:
        self._backend = backend
        self.options = options
        self.source_files: Mapping[str, str] = MappingProxyType(dict(files))

    def get_pre_emit_diagnostics(self) -> list[Diagnostic]:
        return self._backend.run(self.options, self.source_files, emit=False)

    def emit(
        self,
        write_file: WriteFileCallback,
        *,
        only_dts: bool = False,
        transformers: Sequence[SourceTransformer] = (),
    ) -> EmitResult:
        """
        Emit through `write_file`.

        tsc writes into a scratch directory first; each emitted file is then
        handed to `write_file` at its path under `options.out_dir`. Only
        declaration-emit diagnostics are reported here since semantic
        diagnostics belong to `get_pre_emit_diagnostics`.
        """
        files = {
            path: reduce(lambda text, transform: transform(path, text), transformers, text)
            for path, text in self.source_files.items()
        }

        result = EmitResult()
        with tempfile.TemporaryDirectory(prefix="dnt-emit-") as scratch:
            emit_dir = Path(scratch)
            diagnostics = self._backend.run(
                self.options,
                files,
                emit=True,
                only_dts=only_dts,
                emit_dir=emit_dir,
            )
            result.diagnostics = [d for d in diagnostics if d.is_declaration_emit]

            out_dir = Path(self.options.out_dir)
            for emitted in sorted(emit_dir.rglob("*")):
                if not emitted.is_file():
                    continue
                data = emitted.read_text(encoding="utf-8")
                write_bom = data.startswith(BYTE_ORDER_MARK)
                if write_bom:
                    data = data[len(BYTE_ORDER_MARK):]
                target = str(out_dir / emitted.relative_to(emit_dir))
                write_file(target, data, write_bom)
                result.emitted_files.append(target)
        return result


def _stage_files(staging_dir: Path, root_dir: Path, files: Mapping[str, str]) -> dict[str, str]:
    """Write `files` below `staging_dir`; return staged relative path -> virtual path."""
    path_map: dict[str, str] = {}
    for path, text in files.items():
        try:
            relative = Path(path).relative_to(root_dir)
        except ValueError as e:
            raise CompilerError(f"Source file {path} is outside the project root {root_dir}") from e
        target = staging_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        path_map[relative.as_posix()] = path
    return path_map


def _build_tsconfig(
    options: CompilerOptions,
    *,
    staged_files: list[str],
    emit: bool,
    only_dts: bool,
    emit_dir: Path | None,
) -> dict[str, Any]:
    compiler_options = options.to_tsconfig()
    compiler_options["rootDir"] = "."
    compiler_options["noEmitOnError"] = False
    if emit:
        if emit_dir is None:
            raise CompilerError("An emit directory is required when emitting")
        compiler_options["outDir"] = str(emit_dir)
        if only_dts:
            compiler_options["declaration"] = True
            compiler_options["emitDeclarationOnly"] = True
    else:
        compiler_options.pop("outDir")
        compiler_options["declaration"] = False
        compiler_options["noEmit"] = True
    return {"compilerOptions": compiler_options, "files": staged_files}
