"""
Local module graph transformer.

Follows import/export specifiers from the entry points and test files and
rewrites each reachable local file into a Node-shaped module:

- relative `.ts`/`.tsx` specifiers become relative `.js` specifiers between
  output-relative paths,
- remote specifiers listed in the mappings become npm package names,
- references to the `Deno` namespace are routed through the shim package.

Remote specifiers without a mapping are left untouched and reported as
warnings. This is not a full module resolver: it does not fetch remote
modules, resolve import maps or process comment directives.
"""

from __future__ import annotations

import logging
import os
import posixpath
import re
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ..compiler.transforms import split_code_segments
from ..types import MappedSpecifier
from .types import (
    Dependency,
    TransformedFile,
    TransformOptions,
    TransformOutput,
    TransformOutputEnvironment,
)

logger = logging.getLogger(__name__)

SHIM_IDENTIFIER = "denoShim"

_SPECIFIER_RE = re.compile(
    r"""(?P<prefix>\bfrom\s*|\bimport\s*\(\s*|\bimport\s*)(?P<quote>["'])(?P<specifier>[^"'\n]+)(?P=quote)"""
)
_DENO_RE = re.compile(r"(?<![.\w$])Deno\.")
_REMOTE_PREFIXES = ("http://", "https://")
_SCRIPT_SUFFIXES = {".ts", ".tsx", ".js", ".mjs", ".jsx"}


@dataclass
class _ModuleInfo:
    path: Path
    text: str
    local_imports: dict[str, Path] = field(default_factory=dict)


class LocalTransformer:
    """
    Transform a local Deno module graph.

    Example:
        transformer = LocalTransformer()
        output = transformer.transform(
            TransformOptions(
                entry_points=["./mod.ts"],
                test_entry_points=["./mod.test.ts"],
                shim_package_name="deno.ns",
            )
        )
    """

    def __init__(self, cwd: Path | None = None) -> None:
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()

    def transform(self, options: TransformOptions) -> TransformOutput:
        output = TransformOutput()
        main_entries = [self._resolve_input(p) for p in options.entry_points]
        test_entries = [self._resolve_input(p) for p in options.test_entry_points]

        modules: dict[Path, _ModuleInfo] = {}
        main_set = self._collect(main_entries, modules, output.warnings)
        test_set = self._collect(test_entries, modules, output.warnings) - main_set

        root = _common_root(modules)
        out_paths = {path: path.relative_to(root).as_posix() for path in modules}

        output.main = self._build_environment(
            sorted(main_set), main_entries, modules, out_paths, options, output.warnings
        )
        output.test = self._build_environment(
            sorted(test_set), test_entries, modules, out_paths, options, output.warnings
        )
        logger.debug(f"Transformed {len(output.main.files)} main and {len(output.test.files)} test file(s)")
        return output

    def _resolve_input(self, path: str) -> Path:
        resolved = Path(path)
        if not resolved.is_absolute():
            resolved = self.cwd / resolved
        return Path(os.path.normpath(resolved))

    def _collect(self, entries: Iterable[Path], modules: dict[Path, _ModuleInfo], warnings: list[str]) -> set[Path]:
        """Breadth-first walk over local imports; return every reachable path."""
        reachable: set[Path] = set()
        queue = deque(entries)
        while queue:
            path = queue.popleft()
            if path in reachable:
                continue
            reachable.add(path)
            if path not in modules:
                modules[path] = self._load(path)
            for target in modules[path].local_imports.values():
                if target not in reachable:
                    if target.is_file():
                        queue.append(target)
                    else:
                        message = f"Could not find module {target} imported from {path}"
                        if message not in warnings:
                            warnings.append(message)
        return reachable

    def _load(self, path: Path) -> _ModuleInfo:
        text = path.read_text(encoding="utf-8")
        info = _ModuleInfo(path=path, text=text)
        for match in _SPECIFIER_RE.finditer(text):
            specifier = match["specifier"]
            if _is_relative(specifier):
                info.local_imports[specifier] = Path(os.path.normpath(path.parent / specifier))
        return info

    def _build_environment(
        self,
        paths: list[Path],
        entries: list[Path],
        modules: dict[Path, _ModuleInfo],
        out_paths: dict[Path, str],
        options: TransformOptions,
        warnings: list[str],
    ) -> TransformOutputEnvironment:
        env = TransformOutputEnvironment(entry_points=[out_paths[e] for e in entries])
        for path in paths:
            info = modules[path]
            text, dependencies = _rewrite_specifiers(info, out_paths, options.mappings, warnings)
            for dependency in dependencies:
                if dependency not in env.dependencies:
                    env.dependencies.append(dependency)
            text, shim_used = _rewrite_deno_namespace(text, options.shim_package_name)
            env.shim_used = env.shim_used or shim_used
            env.files.append(TransformedFile(file_path=out_paths[path], file_text=text))
        return env


def _is_relative(specifier: str) -> bool:
    return specifier.startswith(("./", "../"))


def _common_root(modules: dict[Path, _ModuleInfo]) -> Path:
    if not modules:
        return Path.cwd()
    return Path(os.path.commonpath([str(p.parent) for p in modules]))


def get_relative_specifier(from_path: str, to_path: str) -> str:
    """
    Specifier that imports output file `to_path` from output file `from_path`.

    Script extensions become `.js`; the result always starts with `./` or `../`.
    """
    relative = posixpath.relpath(to_path, posixpath.dirname(from_path) or ".")
    stem, ext = posixpath.splitext(relative)
    if ext.lower() in _SCRIPT_SUFFIXES:
        relative = stem + ".js"
    if not relative.startswith(("./", "../")):
        relative = "./" + relative
    return relative


def _rewrite_specifiers(
    info: _ModuleInfo,
    out_paths: dict[Path, str],
    mappings: dict[str, MappedSpecifier],
    warnings: list[str],
) -> tuple[str, list[Dependency]]:
    dependencies: list[Dependency] = []
    from_path = out_paths[info.path]

    def replace(match: re.Match[str]) -> str:
        specifier = match["specifier"]
        replacement = specifier
        if specifier in mappings:
            mapped = mappings[specifier]
            replacement = mapped.name
            dependencies.append(Dependency(name=mapped.name, version=mapped.version))
        elif _is_relative(specifier):
            target = info.local_imports[specifier]
            if target in out_paths:
                replacement = get_relative_specifier(from_path, out_paths[target])
        elif specifier.startswith(_REMOTE_PREFIXES):
            message = f"Remote specifier is not mapped and was left as is: {specifier}"
            if message not in warnings:
                warnings.append(message)
        quote = match["quote"]
        return f"{match['prefix']}{quote}{replacement}{quote}"

    return _SPECIFIER_RE.sub(replace, info.text), dependencies


def _rewrite_deno_namespace(text: str, shim_package_name: str) -> tuple[str, bool]:
    """Route `Deno.` references through the shim; return (text, shim_used)."""
    used = False
    parts = []
    for is_code, chunk in split_code_segments(text):
        if is_code and _DENO_RE.search(chunk):
            used = True
            chunk = _DENO_RE.sub(f"{SHIM_IDENTIFIER}.Deno.", chunk)
        parts.append(chunk)
    if not used:
        return text, False
    return f'import * as {SHIM_IDENTIFIER} from "{shim_package_name}";\n' + "".join(parts), True
