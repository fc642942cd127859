"""dnt - Deno-to-npm build pipeline.

This package turns a Deno module graph into an npm package:
- Declaration files (`types/`)
- An ES-module build (`esm/`)
- A CommonJS/UMD build (`umd/`)
- A generated `package.json` and an optional test run against the output
"""

from __future__ import annotations

from .build import BuildResult, BuildSession, build, build_sync
from .capabilities import CapabilityPolicy
from .entry_points import normalize_entry_points
from .errors import (
    ConfigurationError,
    DiagnosticsError,
    DntError,
    EmitError,
    ProcessError,
)
from .types import BuildCompilerOptions, BuildOptions, EntryPoint, MappedSpecifier, ShimPackage

__version__ = "0.1.0"

__all__ = [
    "BuildCompilerOptions",
    "BuildOptions",
    "BuildResult",
    "BuildSession",
    "CapabilityPolicy",
    "ConfigurationError",
    "DiagnosticsError",
    "DntError",
    "EmitError",
    "EntryPoint",
    "MappedSpecifier",
    "ProcessError",
    "ShimPackage",
    "build",
    "build_sync",
    "normalize_entry_points",
]
