"""Entry point normalization."""

from __future__ import annotations

import re
from collections.abc import Sequence

from .types import EntryPoint

ROOT_EXPORT = "."

_TS_EXTENSION_RE = re.compile(r"\.tsx?$", re.IGNORECASE)


def normalize_entry_points(entries: Sequence[str | EntryPoint]) -> list[EntryPoint]:
    """
    Turn entry descriptors into (name, path) pairs.

    The first bare path is the package root export ("."). Later bare paths
    are exported under their own path with the TypeScript extension replaced
    by `.js`. Explicit `EntryPoint`s are kept as given.

    Example:
        normalize_entry_points(["./mod.ts", "./util.ts"])
        # [EntryPoint(".", "./mod.ts"), EntryPoint("./util.js", "./util.ts")]
    """
    result: list[EntryPoint] = []
    for i, entry in enumerate(entries):
        if isinstance(entry, EntryPoint):
            result.append(entry)
            continue
        name = ROOT_EXPORT if i == 0 else _TS_EXTENSION_RE.sub(".js", entry)
        result.append(EntryPoint(name=name, path=entry))
    return result
