"""
Build pipeline driver.

Runs one Deno-to-npm build:

1. Normalize and validate entry points (no I/O)
2. Transform the module graph and the discovered tests
3. Write package.json/.npmignore and start `npm install`
4. Join the install, then create the compilation project
5. Type check (optional), then emit declarations, ESM and UMD
6. Run the tests against the emitted output (optional)

Every failure aborts the remaining steps. Nothing is retried.

Example:
    options = BuildOptions(
        entry_points=("./mod.ts",),
        out_dir=Path("./npm"),
        package={"name": "my-package", "version": "0.1.0"},
    )
    result = await build(options)
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from .capabilities import CapabilityPolicy
from .compiler.backend import TscBackend
from .compiler.options import create_base_options
from .compiler.project import CompilerBackend, Program, VirtualProject
from .emitter import MultiTargetEmitter, run_diagnostic_gate
from .entry_points import normalize_entry_points
from .fs import ScopedFileWriter
from .package_json import ensure_unique_entry_points, get_npm_ignore_text, get_package_json
from .process import NpmRunner
from .test_runner import (
    TEST_RUNNER_FILE_NAME,
    delete_test_files,
    get_test_file_names,
    get_test_runner_code,
)
from .transform import LocalTransformer, TransformOptions, TransformOutput, Transformer, discover_test_files
from .types import BuildOptions, EntryPoint, ShimPackage

logger = logging.getLogger(__name__)


@dataclass
class BuildSession:
    """State owned by a single build."""

    options: BuildOptions
    entry_points: list[EntryPoint]
    shim_package: ShimPackage
    writer: ScopedFileWriter
    transform_output: TransformOutput = field(default_factory=TransformOutput)
    project: VirtualProject | None = None
    program: Program | None = None

    @property
    def out_dir(self) -> Path:
        return self.options.out_dir

    @property
    def src_dir(self) -> Path:
        return self.out_dir / "src"

    @property
    def test_file_names(self) -> list[str]:
        return get_test_file_names(self.transform_output) if self.options.test else []


@dataclass
class BuildResult:
    """Outcome of a successful build."""

    out_dir: Path
    written_files: list[Path] = field(default_factory=list)
    """Every file written during the build, including removed test artifacts."""

    warnings: list[str] = field(default_factory=list)


def _transform(session: BuildSession, transformer: Transformer) -> TransformOutput:
    options = session.options
    test_entry_points: list[str] = []
    if options.test:
        root_test_dir = options.root_test_dir or Path.cwd()
        test_entry_points = [
            str(path)
            for path in discover_test_files(root_test_dir, options.test_pattern, exclude_dirs=[options.out_dir])
        ]
        logger.debug(f"Discovered {len(test_entry_points)} test file(s)")

    output = transformer.transform(
        TransformOptions(
            entry_points=[entry.path for entry in session.entry_points],
            test_entry_points=test_entry_points,
            shim_package_name=session.shim_package.name,
            mappings=dict(options.mappings),
        )
    )
    for warning in output.warnings:
        logger.warning(warning)
    return output


def _write_package_files(session: BuildSession) -> None:
    options = session.options
    package_json = get_package_json(
        entry_points=session.entry_points,
        shim_package=session.shim_package,
        transform_output=session.transform_output,
        package=options.package,
        test_enabled=options.test,
        declaration=options.declaration,
    )
    session.writer.write(session.out_dir / "package.json", json.dumps(package_json, indent=2) + "\n")

    npm_ignore = get_npm_ignore_text(
        keep_source_files=options.keep_source_files,
        test_file_names=session.test_file_names,
    )
    if npm_ignore is not None:
        session.writer.write(session.out_dir / ".npmignore", npm_ignore)


def _all_files(session: BuildSession):
    yield from session.transform_output.main.files
    yield from session.transform_output.test.files


def _write_source_files(session: BuildSession) -> None:
    for file in _all_files(session):
        session.writer.write(session.src_dir / file.file_path, file.file_text)


def _create_project(session: BuildSession, backend: CompilerBackend) -> VirtualProject:
    options = session.options
    project = VirtualProject(
        backend,
        create_base_options(
            session.out_dir,
            declaration=options.declaration,
            target=options.compiler_options.target,
        ),
    )
    for file in _all_files(session):
        project.add_source_file(str(session.src_dir / file.file_path), file.file_text)
    return project


async def _run_tests(session: BuildSession, runner: NpmRunner) -> None:
    test = session.transform_output.test
    session.writer.write(
        session.out_dir / TEST_RUNNER_FILE_NAME,
        get_test_runner_code(
            shim_package_name=session.shim_package.name,
            test_entry_points=test.entry_points,
            test_shim_used=test.shim_used,
        ),
    )
    await runner.run(["run", "test"])
    if not session.options.keep_test_files:
        await delete_test_files(session.writer, session.out_dir, session.test_file_names)


async def build(
    options: BuildOptions,
    *,
    transformer: Transformer | None = None,
    compiler_backend: CompilerBackend | None = None,
    runner: NpmRunner | None = None,
    capabilities: CapabilityPolicy | None = None,
) -> BuildResult:
    """
    Build an npm package from a Deno module graph.

    Args:
        options: Build options
        transformer: Module graph transformer (default: LocalTransformer)
        compiler_backend: Compiler backend (default: TscBackend)
        runner: npm runner (default: NpmRunner in the output directory)
        capabilities: Write/run permissions (default: unrestricted)

    Returns:
        BuildResult for the written package

    Raises:
        ConfigurationError: For invalid options or a denied capability
        DiagnosticsError: If type checking or emission reports diagnostics
        ProcessError: If `npm install` or the tests fail
    """
    entry_points = normalize_entry_points(options.entry_points)
    ensure_unique_entry_points(entry_points)

    capabilities = capabilities or CapabilityPolicy()
    capabilities.check_write(options.out_dir)
    transformer = transformer or LocalTransformer()
    compiler_backend = compiler_backend or TscBackend(capabilities=capabilities)
    runner = runner or NpmRunner(options.out_dir, capabilities=capabilities)

    session = BuildSession(
        options=options,
        entry_points=entry_points,
        shim_package=options.shim_package or ShimPackage(),
        writer=ScopedFileWriter(capabilities),
    )

    logger.info("Transforming...")
    session.transform_output = _transform(session, transformer)
    _write_package_files(session)

    logger.info("Running npm install...")
    install = asyncio.create_task(runner.run(["install"]))
    try:
        # let the install process start before the source mirror is written
        await asyncio.sleep(0)
        if options.keep_source_files:
            _write_source_files(session)
    except BaseException:
        install.cancel()
        raise
    await install

    logger.info("Building project...")
    session.project = _create_project(session, compiler_backend)
    session.program = session.project.compile()

    if options.type_check:
        logger.info("Type checking...")
        run_diagnostic_gate(session.program)

    MultiTargetEmitter(session.project, session.writer, session.out_dir).emit_all(
        declaration=options.declaration
    )

    if options.test:
        logger.info("Running tests...")
        await _run_tests(session, runner)

    logger.info("Complete!")
    return BuildResult(
        out_dir=session.out_dir,
        written_files=list(session.writer.written_files),
        warnings=list(session.transform_output.warnings),
    )


def build_sync(options: BuildOptions, **kwargs) -> BuildResult:
    """Run `build` on a new event loop."""
    return asyncio.run(build(options, **kwargs))
