"""
Build configuration types.

`BuildOptions` is the immutable input of one build. It can be created
directly or from the camelCase JSON shape used by configuration files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .compiler.options import ScriptTarget
from .errors import ConfigurationError

DEFAULT_SHIM_NAME = "deno.ns"
DEFAULT_SHIM_VERSION = "0.6.4"


@dataclass(frozen=True)
class EntryPoint:
    """A source file exposed as a package export."""

    name: str
    """Export key ("." for the package root)."""

    path: str
    """Path to the entry point source."""


@dataclass(frozen=True)
class ShimPackage:
    """Package substituted for the Deno namespace in the output."""

    name: str = DEFAULT_SHIM_NAME
    version: str = DEFAULT_SHIM_VERSION


@dataclass(frozen=True)
class MappedSpecifier:
    """npm package a remote specifier is mapped to."""

    name: str
    version: str | None = None


@dataclass(frozen=True)
class BuildCompilerOptions:
    """User-facing compiler options."""

    target: ScriptTarget | None = None


@dataclass(frozen=True)
class BuildOptions:
    """Options for one build."""

    entry_points: tuple[str | EntryPoint, ...]
    """Entry point(s) of the module. The first is the package root export."""

    out_dir: Path
    """Directory to output to."""

    package: dict[str, Any] = field(default_factory=dict)
    """package.json fields. These win over derived fields."""

    type_check: bool = True
    test: bool = True
    declaration: bool = True

    keep_source_files: bool = False
    """Write the transformed TypeScript to `<out_dir>/src`."""

    keep_test_files: bool = False
    """Keep compiled tests and the launcher after the test run."""

    root_test_dir: Path | None = None
    """Directory to search for tests (default: the current directory)."""

    test_pattern: str | None = None
    """Glob for test files (default: Deno's test file pattern)."""

    shim_package: ShimPackage | None = None
    mappings: dict[str, MappedSpecifier] = field(default_factory=dict)
    compiler_options: BuildCompilerOptions = field(default_factory=BuildCompilerOptions)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entry_points", tuple(self.entry_points))
        object.__setattr__(self, "out_dir", Path(self.out_dir))
        if self.root_test_dir is not None:
            object.__setattr__(self, "root_test_dir", Path(self.root_test_dir))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BuildOptions:
        """Create options from a dictionary (camelCase keys)."""
        for key in ("entryPoints", "outDir", "package"):
            if key not in data:
                raise ConfigurationError(f"Missing required option: {key}", details={"option": key})

        entry_points: list[str | EntryPoint] = []
        for entry in data["entryPoints"]:
            if isinstance(entry, str):
                entry_points.append(entry)
            elif isinstance(entry, dict) and "name" in entry and "path" in entry:
                entry_points.append(EntryPoint(name=entry["name"], path=entry["path"]))
            else:
                raise ConfigurationError(f"Invalid entry point: {entry!r}")

        shim = data.get("shimPackage")
        compiler_options = data.get("compilerOptions") or {}
        mappings = {
            specifier: MappedSpecifier(name=value["name"], version=value.get("version"))
            for specifier, value in (data.get("mappings") or {}).items()
        }
        return cls(
            entry_points=tuple(entry_points),
            out_dir=Path(data["outDir"]),
            package=dict(data["package"]),
            type_check=data.get("typeCheck", True),
            test=data.get("test", True),
            declaration=data.get("declaration", True),
            keep_source_files=data.get("keepSourceFiles", False),
            keep_test_files=data.get("keepTestFiles", False),
            root_test_dir=Path(data["rootTestDir"]) if data.get("rootTestDir") else None,
            test_pattern=data.get("testPattern"),
            shim_package=ShimPackage(name=shim["name"], version=shim["version"]) if shim else None,
            mappings=mappings,
            compiler_options=BuildCompilerOptions(
                target=ScriptTarget.parse(compiler_options["target"]) if compiler_options.get("target") else None,
            ),
        )
