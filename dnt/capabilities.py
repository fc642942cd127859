"""
Capability checks performed before filesystem writes and process launches.

A policy lists what the pipeline may touch. `None` means unrestricted. Every
check fails closed by raising `CapabilityDeniedError`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .errors import CapabilityDeniedError

logger = logging.getLogger(__name__)

WRITE = "write"
RUN = "run"


@dataclass(frozen=True)
class CapabilityPolicy:
    """Allowed write roots and runnable commands."""

    write_roots: tuple[Path, ...] | None = None
    """Directories (and their descendants) that may be written. None allows any path."""

    run_commands: frozenset[str] | None = None
    """Executable names that may be launched. None allows any command."""

    @classmethod
    def deny_all(cls) -> CapabilityPolicy:
        """Create a policy that allows no writes and no processes."""
        return cls(write_roots=(), run_commands=frozenset())

    @classmethod
    def for_output_dir(cls, out_dir: Path, commands: list[str] | None = None) -> CapabilityPolicy:
        """Create a policy confined to `out_dir`, optionally limiting commands."""
        return cls(
            write_roots=(Path(out_dir),),
            run_commands=frozenset(commands) if commands is not None else None,
        )

    def check_write(self, path: str | Path) -> None:
        """Raise if writing to `path` is not allowed."""
        if self.write_roots is None:
            return
        target = Path(os.path.abspath(path))
        for root in self.write_roots:
            if target == Path(os.path.abspath(root)) or Path(os.path.abspath(root)) in target.parents:
                return
        logger.debug(f"Denied write to {target}")
        raise CapabilityDeniedError(
            f"Write access denied: {path}",
            capability=WRITE,
            target=str(path),
        )

    def check_run(self, command: str) -> None:
        """Raise if launching `command` is not allowed."""
        if self.run_commands is None:
            return
        if command in self.run_commands or Path(command).name in self.run_commands:
            return
        logger.debug(f"Denied run of {command}")
        raise CapabilityDeniedError(
            f"Run access denied: {command}",
            capability=RUN,
            target=command,
        )
