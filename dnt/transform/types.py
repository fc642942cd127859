"""Transform collaborator contract."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from ..types import MappedSpecifier


@dataclass(frozen=True)
class TransformedFile:
    """A rewritten source file."""

    file_path: str
    """Output-relative path (POSIX separators)."""

    file_text: str


@dataclass(frozen=True)
class Dependency:
    """npm package introduced by a specifier mapping."""

    name: str
    version: str | None = None


@dataclass
class TransformOutputEnvironment:
    """Transformed files of one group (main or test)."""

    files: list[TransformedFile] = field(default_factory=list)
    entry_points: list[str] = field(default_factory=list)
    """Output-relative paths of the group's entry points, in input order."""

    shim_used: bool = False
    """Whether any file of the group references the Deno namespace."""

    dependencies: list[Dependency] = field(default_factory=list)


@dataclass
class TransformOutput:
    """Result of transforming the entry points and test files."""

    main: TransformOutputEnvironment = field(default_factory=TransformOutputEnvironment)
    test: TransformOutputEnvironment = field(default_factory=TransformOutputEnvironment)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TransformOptions:
    """Input of a transform."""

    entry_points: list[str]
    test_entry_points: list[str]
    shim_package_name: str
    mappings: dict[str, MappedSpecifier] = field(default_factory=dict)


class Transformer(Protocol):
    """Rewrites a Deno module graph into output-relative, Node-shaped files."""

    def transform(self, options: TransformOptions) -> TransformOutput:
        """Transform the entry points and test entry points."""
        ...
