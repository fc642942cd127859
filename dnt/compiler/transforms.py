"""
Source transformers applied before emission.

A transformer takes `(file_path, text)` and returns the rewritten text. They
run on the compiler input of a single emission pass and never touch the
project's file set.
"""

from __future__ import annotations

import re
from collections.abc import Callable

SourceTransformer = Callable[[str, str], str]

IMPORT_META_REPLACEMENT = (
    '({ url: require("url").pathToFileURL(__filename).href, main: require.main === module })'
)

_IMPORT_META_RE = re.compile(r"(?<![.\w$])import\s*\.\s*meta(?![\w$])")


def transform_import_meta(file_path: str, text: str) -> str:
    """
    Rewrite `import.meta` for UMD output.

    `import.meta` only exists in ES modules, so the UMD pass replaces it with
    an object exposing the same `url` and `main` members built from
    `__filename` and `require.main`. Occurrences inside strings, template
    literal text and comments are left alone.
    """
    if "meta" not in text:
        return text
    parts = []
    for is_code, chunk in split_code_segments(text):
        parts.append(_IMPORT_META_RE.sub(IMPORT_META_REPLACEMENT, chunk) if is_code else chunk)
    return "".join(parts)


def split_code_segments(text: str) -> list[tuple[bool, str]]:
    """
    Split JavaScript/TypeScript source into code and non-code segments.

    Non-code segments are string literals, template literal text and
    comments. Template substitutions (`${...}`) are code. Regular expression
    literals are treated as code.
    """
    segments: list[tuple[bool, str]] = []
    # brace depth inside each open template substitution
    depths: list[int] = []
    n = len(text)
    start = i = 0
    while i < n:
        ch = text[i]
        if ch in "'\"":
            end = _scan_string(text, i + 1, ch)
        elif text.startswith("//", i):
            end = text.find("\n", i)
            end = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
        elif ch == "`" or (ch == "}" and depths and depths[-1] == 0):
            if ch == "}":
                depths.pop()
            end, entered = _scan_template(text, i + 1)
            if entered:
                depths.append(0)
        else:
            if ch == "{" and depths:
                depths[-1] += 1
            elif ch == "}" and depths:
                depths[-1] -= 1
            i += 1
            continue

        if i > start:
            segments.append((True, text[start:i]))
        segments.append((False, text[i:end]))
        start = i = end

    if start < n:
        segments.append((True, text[start:]))
    return segments


def _scan_string(text: str, i: int, quote: str) -> int:
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n":
            # unterminated
            return i
        i += 1
    return n


def _scan_template(text: str, i: int) -> tuple[int, bool]:
    """Return the index after the closing backtick, or after `${` with True."""
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "`":
            return i + 1, False
        if text.startswith("${", i):
            return i + 2, True
        i += 1
    return n, False
