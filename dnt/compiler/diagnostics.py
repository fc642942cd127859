"""
Compiler diagnostics.

A diagnostic is a message plus an optional file position. `parse_tsc_output`
reads the `--pretty false` output format of tsc:

    src/mod.ts(3,7): error TS2322: Type 'string' is not assignable to type 'number'.
    error TS5023: Unknown compiler option 'foo'.

Indented lines following a diagnostic continue its message.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)

_LOCATED_RE = re.compile(
    r"^(?P<file>.+?)\((?P<line>\d+),(?P<column>\d+)\): "
    r"(?P<category>error|warning|message) TS(?P<code>\d+): (?P<message>.*)$"
)
_GLOBAL_RE = re.compile(r"^(?P<category>error|warning|message) TS(?P<code>\d+): (?P<message>.*)$")


@dataclass(frozen=True)
class Diagnostic:
    """A compiler-reported problem."""

    message: str
    code: int | None = None
    category: str = "error"
    file: str | None = None
    line: int | None = None
    column: int | None = None

    @property
    def is_declaration_emit(self) -> bool:
        """Whether this diagnostic is produced by declaration emit (TS4xxx/TS9xxx)."""
        return self.code is not None and (4000 <= self.code < 5000 or 9000 <= self.code < 10000)

    def format(self) -> str:
        """Render as `file:line:col - error TSxxxx: message`."""
        code = f" TS{self.code}" if self.code is not None else ""
        prefix = ""
        if self.file:
            prefix = self.file
            if self.line is not None:
                prefix += f":{self.line}:{self.column or 1}"
            prefix += " - "
        return f"{prefix}{self.category}{code}: {self.message}"

    def to_dict(self) -> dict[str, object]:
        return {
            "message": self.message,
            "code": self.code,
            "category": self.category,
            "file": self.file,
            "line": self.line,
            "column": self.column,
        }


def parse_tsc_output(output: str, path_map: Mapping[str, str] | None = None) -> list[Diagnostic]:
    """
    Parse tsc diagnostics.

    Args:
        output: Combined stdout/stderr of a `tsc --pretty false` run
        path_map: Optional mapping from the file names tsc reports to the
            paths that should appear in the diagnostics

    Returns:
        Diagnostics in the order tsc printed them
    """
    path_map = path_map or {}
    diagnostics: list[Diagnostic] = []
    for raw_line in output.splitlines():
        if not raw_line.strip():
            continue
        if raw_line[:1].isspace() and diagnostics:
            last = diagnostics[-1]
            diagnostics[-1] = replace(last, message=f"{last.message}\n{raw_line.strip()}")
            continue

        match = _LOCATED_RE.match(raw_line)
        if match:
            file = match["file"]
            diagnostics.append(
                Diagnostic(
                    message=match["message"],
                    code=int(match["code"]),
                    category=match["category"],
                    file=path_map.get(file, file),
                    line=int(match["line"]),
                    column=int(match["column"]),
                )
            )
            continue

        match = _GLOBAL_RE.match(raw_line)
        if match:
            diagnostics.append(
                Diagnostic(
                    message=match["message"],
                    code=int(match["code"]),
                    category=match["category"],
                )
            )
        else:
            logger.debug(f"Ignoring unrecognised compiler output: {raw_line}")
    return diagnostics


def format_diagnostics(diagnostics: Iterable[Diagnostic]) -> str:
    """Format diagnostics one per line, with a trailing count."""
    items = list(diagnostics)
    lines = [d.format() for d in items]
    noun = "diagnostic" if len(items) == 1 else "diagnostics"
    lines.append(f"Found {len(items)} {noun}.")
    return "\n".join(lines)


def output_diagnostics(diagnostics: Iterable[Diagnostic]) -> None:
    """Log every diagnostic at ERROR level."""
    logger.error(format_diagnostics(diagnostics))
