"""
Package metadata builder.

Derives the root package.json and the .npmignore listing. Derived fields
are defaults: anything in the caller's package fragment wins.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from .entry_points import ROOT_EXPORT
from .errors import ConfigurationError, DuplicateEntryPointError
from .transform.types import Dependency, TransformOutput
from .types import EntryPoint, ShimPackage

TEST_SCRIPT = "node test_runner.js"

_MERGED_KEYS = ("exports", "scripts", "dependencies", "devDependencies")
_TS_EXTENSION_RE = re.compile(r"\.tsx?$", re.IGNORECASE)


def ensure_unique_entry_points(entry_points: Sequence[EntryPoint]) -> None:
    """
    Validate normalized entry points.

    Raises:
        ConfigurationError: If there are no entry points or none is named "."
        DuplicateEntryPointError: If two entry points share a name
    """
    if not entry_points:
        raise ConfigurationError("At least one entry point is required")

    seen: dict[str, str] = {}
    for entry in entry_points:
        if entry.name in seen:
            raise DuplicateEntryPointError(
                f"Duplicate entry point name: {entry.name}",
                name=entry.name,
                paths=[seen[entry.name], entry.path],
            )
        seen[entry.name] = entry.path

    if ROOT_EXPORT not in seen:
        raise ConfigurationError(f'One entry point must be named "{ROOT_EXPORT}"')


def _to_js_path(path: str) -> str:
    return _TS_EXTENSION_RE.sub(".js", path)


def _version_range(dependency: Dependency) -> str:
    return f"^{dependency.version}" if dependency.version else "*"


def get_package_json(
    *,
    entry_points: Sequence[EntryPoint],
    shim_package: ShimPackage,
    transform_output: TransformOutput,
    package: dict[str, Any],
    test_enabled: bool,
    declaration: bool = True,
) -> dict[str, Any]:
    """
    Build the root package.json object.

    Args:
        entry_points: Normalized entry points
        shim_package: Shim package identity
        transform_output: Output of the transform step
        package: Caller-supplied package.json fields
        test_enabled: Whether tests are run (adds the test script)
        declaration: Whether declaration files are emitted

    Returns:
        package.json as a dict
    """
    ensure_unique_entry_points(entry_points)
    out_paths = transform_output.main.entry_points
    if len(out_paths) != len(entry_points):
        raise ConfigurationError(
            "Transform output does not match the entry points",
            details={"entry_points": len(entry_points), "transformed": len(out_paths)},
        )

    exports: dict[str, Any] = {}
    for entry, out_path in zip(entry_points, out_paths):
        js_path = _to_js_path(out_path)
        conditions: dict[str, str] = {}
        if declaration:
            conditions["types"] = f"./types/{js_path[: -len('.js')]}.d.ts"
        conditions["import"] = f"./esm/{js_path}"
        conditions["require"] = f"./umd/{js_path}"
        exports[entry.name] = conditions

    dependencies: dict[str, str] = {}
    if transform_output.main.shim_used:
        dependencies[shim_package.name] = f"^{shim_package.version}"
    for dependency in transform_output.main.dependencies:
        dependencies[dependency.name] = _version_range(dependency)

    dev_dependencies: dict[str, str] = {}
    if test_enabled:
        if transform_output.test.shim_used and shim_package.name not in dependencies:
            dev_dependencies[shim_package.name] = f"^{shim_package.version}"
        for dependency in transform_output.test.dependencies:
            if dependency.name not in dependencies:
                dev_dependencies[dependency.name] = _version_range(dependency)

    derived: dict[str, Any] = {
        "exports": exports,
        "scripts": {"test": TEST_SCRIPT} if test_enabled else {},
        "dependencies": dependencies,
        "devDependencies": dev_dependencies,
    }

    result = dict(package)
    root = exports.get(ROOT_EXPORT, {})
    result.setdefault("main", root.get("require"))
    result.setdefault("module", root.get("import"))
    if "types" in root:
        result.setdefault("types", root["types"])

    for key in _MERGED_KEYS:
        override = package.get(key)
        if override is not None and not isinstance(override, Mapping):
            # e.g. the `"exports": "./mod.js"` shorthand
            result[key] = override
            continue
        merged = {**derived[key], **(override or {})}
        if merged:
            result[key] = merged
        else:
            result.pop(key, None)
    return result


def get_npm_ignore_text(*, keep_source_files: bool, test_file_names: Sequence[str]) -> str | None:
    """
    Build the .npmignore content.

    Args:
        keep_source_files: Whether `src/` is written to the output
        test_file_names: Test artifact paths (`./esm/...`, `./umd/...`, launcher)

    Returns:
        File text, or None when nothing needs ignoring
    """
    lines: list[str] = []
    if keep_source_files:
        lines.append("src/")
    for file_name in test_file_names:
        lines.append(file_name.removeprefix("./"))
    if not lines:
        return None
    return "\n".join(lines) + "\n"
