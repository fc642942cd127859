"""
Compiler configuration for the virtual compilation project.

Options are an immutable dataclass. Each emission pass derives its own
configuration from the base options with `dataclasses.replace`, so a
compiled program always holds the exact options it was created with.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any

from ..errors import ConfigurationError


class ScriptTarget(Enum):
    """Output language level."""

    ES3 = "ES3"
    ES5 = "ES5"
    ES2015 = "ES2015"
    ES2016 = "ES2016"
    ES2017 = "ES2017"
    ES2018 = "ES2018"
    ES2019 = "ES2019"
    ES2020 = "ES2020"
    ES2021 = "ES2021"
    ES2022 = "ES2022"
    LATEST = "Latest"

    @classmethod
    def parse(cls, value: str | ScriptTarget | None) -> ScriptTarget:
        """Resolve a target name (case-insensitive), defaulting to ES2021."""
        if value is None:
            return DEFAULT_SCRIPT_TARGET
        if isinstance(value, ScriptTarget):
            return value
        for target in cls:
            if target.value.lower() == value.lower():
                return target
        raise ConfigurationError(
            f"Unknown script target: {value}",
            details={"allowed": [t.value for t in cls]},
        )

    @property
    def tsconfig_name(self) -> str:
        """Name accepted by tsconfig `target` (`Latest` is spelled `ESNext`)."""
        return "ESNext" if self is ScriptTarget.LATEST else self.value


DEFAULT_SCRIPT_TARGET = ScriptTarget.ES2021


class ModuleKind(Enum):
    """Module format of emitted JavaScript."""

    ES2015 = "ES2015"
    COMMONJS = "CommonJS"
    UMD = "UMD"


class JsxEmit(Enum):
    """JSX handling."""

    PRESERVE = "preserve"
    REACT = "react"


@dataclass(frozen=True)
class CompilerOptions:
    """Compiler configuration rendered into a tsconfig `compilerOptions` block."""

    root_dir: str
    """Directory the source files are laid out under (`<outDir>/src`)."""

    out_dir: str
    """Directory emitted files are written to."""

    target: ScriptTarget = DEFAULT_SCRIPT_TARGET
    module: ModuleKind = ModuleKind.ES2015
    module_resolution: str = "node"
    declaration: bool = True
    es_module_interop: bool = False
    allow_js: bool = True
    strip_internal: bool = True
    strict_bind_call_apply: bool = True
    strict_function_types: bool = True
    strict_null_checks: bool = True
    strict_property_initialization: bool = True
    no_implicit_any: bool = True
    no_implicit_returns: bool = False
    no_implicit_this: bool = True
    no_unchecked_indexed_access: bool = False
    isolated_modules: bool = True
    use_define_for_class_fields: bool = True
    experimental_decorators: bool = True
    jsx: JsxEmit = JsxEmit.REACT
    jsx_factory: str = "React.createElement"
    jsx_fragment_factory: str = "React.Fragment"
    allow_synthetic_default_imports: bool = True
    emit_bom: bool = False

    def merge(self, **overrides: Any) -> CompilerOptions:
        """Return a copy with `overrides` applied."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown compiler option(s): {', '.join(unknown)}",
                details={"options": unknown},
            )
        return replace(self, **overrides)

    def to_tsconfig(self) -> dict[str, Any]:
        """Render as camelCase `compilerOptions` JSON."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, ScriptTarget):
                value = value.tsconfig_name
            elif isinstance(value, Enum):
                value = value.value
            result[_camel_case(f.name)] = value
        # tsc spells this one differently from the mechanical conversion
        result["emitBOM"] = result.pop("emitBom")
        return result


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def create_base_options(
    out_dir: str | Path,
    *,
    declaration: bool,
    target: ScriptTarget | None = None,
) -> CompilerOptions:
    """
    Build the base configuration shared by every emission pass.

    Sources live under `<out_dir>/src`; the initial output directory is the
    declarations tree.
    """
    return CompilerOptions(
        root_dir=str(Path(out_dir) / "src"),
        out_dir=str(Path(out_dir) / "types"),
        target=target or DEFAULT_SCRIPT_TARGET,
        declaration=declaration,
    )
