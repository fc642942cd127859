"""Shared pytest fixtures and fake collaborators for dnt tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from functools import reduce
from pathlib import Path

import pytest

from dnt.compiler import CompilerOptions, Diagnostic, EmitResult, SourceTransformer, WriteFileCallback
from dnt.errors import ProcessError
from dnt.logging_utils import LOGGER_NAME
from dnt.transform import TransformedFile, TransformOptions, TransformOutput, TransformOutputEnvironment


class FakeProgram:
    """Program that "compiles" by renaming files."""

    def __init__(self, backend: FakeBackend, options: CompilerOptions, files: Mapping[str, str]) -> None:
        self.backend = backend
        self.options = options
        self.source_files = dict(files)
        self.emit_calls: list[dict] = []

    def get_pre_emit_diagnostics(self) -> list[Diagnostic]:
        self.backend.pre_emit_calls += 1
        return list(self.backend.pre_emit_diagnostics)

    def emit(
        self,
        write_file: WriteFileCallback,
        *,
        only_dts: bool = False,
        transformers: Sequence[SourceTransformer] = (),
    ) -> EmitResult:
        self.emit_calls.append({"only_dts": only_dts, "transformers": tuple(transformers)})
        target = Path(self.options.out_dir).name
        result = EmitResult(diagnostics=list(self.backend.emit_diagnostics.get(target, [])))
        for path, text in sorted(self.source_files.items()):
            relative = Path(path).relative_to(self.options.root_dir)
            if only_dts:
                out_name = relative.with_suffix(".d.ts")
                data = "export {};\n"
            else:
                out_name = relative.with_suffix(".js")
                data = reduce(lambda acc, transform: transform(path, acc), transformers, text)
            out_path = str(Path(self.options.out_dir) / out_name)
            write_file(out_path, data, False)
            result.emitted_files.append(out_path)
        return result


class FakeBackend:
    """CompilerBackend recording every program it creates."""

    def __init__(self) -> None:
        self.programs: list[FakeProgram] = []
        self.pre_emit_diagnostics: list[Diagnostic] = []
        self.emit_diagnostics: dict[str, list[Diagnostic]] = {}
        self.pre_emit_calls = 0

    def create_program(self, options: CompilerOptions, files: Mapping[str, str]) -> FakeProgram:
        program = FakeProgram(self, options, files)
        self.programs.append(program)
        return program


class FakeTransformer:
    """Transformer returning a fixed output."""

    def __init__(self, output: TransformOutput) -> None:
        self.output = output
        self.calls: list[TransformOptions] = []

    def transform(self, options: TransformOptions) -> TransformOutput:
        self.calls.append(options)
        return self.output


class FakeRunner:
    """npm runner recording commands; fails for commands listed in `failures`."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.failures: dict[str, int] = {}

    async def run(self, args: Sequence[str]) -> None:
        self.calls.append(list(args))
        exit_code = self.failures.get(args[0])
        if exit_code:
            raise ProcessError(
                f"npm {' '.join(args)} failed with exit code {exit_code}",
                args=list(args),
                exit_code=exit_code,
            )


def make_transform_output(
    main_files: dict[str, str],
    test_files: dict[str, str] | None = None,
    *,
    entry_points: list[str] | None = None,
    test_entry_points: list[str] | None = None,
    main_shim_used: bool = False,
    test_shim_used: bool = False,
) -> TransformOutput:
    test_files = test_files or {}
    return TransformOutput(
        main=TransformOutputEnvironment(
            files=[TransformedFile(file_path=p, file_text=t) for p, t in main_files.items()],
            entry_points=entry_points or list(main_files)[:1],
            shim_used=main_shim_used,
        ),
        test=TransformOutputEnvironment(
            files=[TransformedFile(file_path=p, file_text=t) for p, t in test_files.items()],
            entry_points=test_entry_points if test_entry_points is not None else list(test_files),
            shim_used=test_shim_used,
        ),
    )


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def transform_output_factory():
    """Build TransformOutput objects from {path: text} dicts."""
    return make_transform_output


@pytest.fixture
def fake_transformer_factory():
    return FakeTransformer


@pytest.fixture(autouse=True)
def restore_dnt_logger() -> Iterator[None]:
    """Undo configure_logging() so caplog keeps receiving records."""
    logger = logging.getLogger(LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate
