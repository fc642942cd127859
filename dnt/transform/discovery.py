"""Test file discovery."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

# Files named `test.{ts,tsx,js,mjs,jsx}`, or ending with `.test.{...}` or `_test.{...}`
DEFAULT_TEST_PATTERN = (
    "**/{test.{ts,tsx,js,mjs,jsx},*.test.{ts,tsx,js,mjs,jsx},*_test.{ts,tsx,js,mjs,jsx}}"
)

_IGNORED_DIRS = {"node_modules", ".git"}


def expand_braces(pattern: str) -> list[str]:
    """
    Expand `{a,b}` alternatives (nested allowed) into plain glob patterns.

    Example:
        expand_braces("*.{ts,js}") == ["*.ts", "*.js"]
    """
    depth = 0
    start = -1
    for i, ch in enumerate(pattern):
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth:
            depth -= 1
            if depth == 0:
                prefix, body, suffix = pattern[:start], pattern[start + 1 : i], pattern[i + 1 :]
                results: list[str] = []
                for alternative in _split_alternatives(body):
                    for expanded in expand_braces(prefix + alternative + suffix):
                        if expanded not in results:
                            results.append(expanded)
                return results
    return [pattern]


def _split_alternatives(body: str) -> list[str]:
    parts = []
    depth = 0
    current = ""
    for ch in body:
        if ch == "," and depth == 0:
            parts.append(current)
            current = ""
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        current += ch
    parts.append(current)
    return parts


def discover_test_files(
    root_dir: Path,
    pattern: str | None = None,
    exclude_dirs: Iterable[Path] = (),
) -> list[Path]:
    """
    Find test files below `root_dir`.

    Args:
        root_dir: Directory to search
        pattern: Glob pattern, brace alternatives allowed (default: Deno's test pattern)
        exclude_dirs: Directories to skip (e.g. the package output directory)

    Returns:
        Sorted absolute paths
    """
    root = Path(root_dir).resolve()
    excluded = [Path(d).resolve() for d in exclude_dirs]
    found: set[Path] = set()

    for expanded in expand_braces(pattern or DEFAULT_TEST_PATTERN):
        expanded = expanded.removeprefix("./")
        for path in root.glob(expanded):
            if not path.is_file():
                continue
            if _IGNORED_DIRS.intersection(path.relative_to(root).parts):
                continue
            if any(path == ex or ex in path.parents for ex in excluded):
                continue
            found.add(path)

    logger.debug(f"Found {len(found)} test file(s) in {root}")
    return sorted(found)
