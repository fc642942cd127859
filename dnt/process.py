"""
External package-manager process runner.

Runs npm with inherited standard streams in the package output directory.
A non-zero exit status is fatal to the build.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from .capabilities import CapabilityPolicy
from .errors import ProcessError

logger = logging.getLogger(__name__)


def get_platform_command(cmd: Sequence[str]) -> list[str]:
    """
    Adapt a command line to the host platform.

    On Windows npm and npx are batch scripts, so they are started through
    `cmd /c`.
    """
    if sys.platform == "win32":
        return ["cmd", "/c", *cmd]
    return list(cmd)


class NpmRunner:
    """
    Run npm commands in the package output directory.

    Example:
        runner = NpmRunner(Path("npm"))
        await runner.run(["install"])
        await runner.run(["run", "test"])
    """

    def __init__(
        self,
        cwd: Path,
        capabilities: CapabilityPolicy | None = None,
        npm: str = "npm",
    ) -> None:
        """
        Initialize the runner.

        Args:
            cwd: Working directory for every command
            capabilities: Policy consulted before launching a process
            npm: Package manager executable
        """
        self.cwd = Path(cwd)
        self.capabilities = capabilities or CapabilityPolicy()
        self.npm = npm

    def get_command(self, args: Sequence[str]) -> list[str]:
        return get_platform_command([self.npm, *args])

    async def run(self, args: Sequence[str]) -> None:
        """
        Run `npm <args>` and wait for it to exit.

        Args:
            args: Arguments passed to npm

        Raises:
            ProcessError: If npm cannot be started or exits non-zero
            CapabilityDeniedError: If the policy forbids running npm
        """
        cmd = self.get_command(args)
        self.capabilities.check_run(cmd[0])
        logger.debug(f"Running {' '.join(cmd)} in {self.cwd}")

        try:
            process = await asyncio.create_subprocess_exec(*cmd, cwd=self.cwd)
        except FileNotFoundError as e:
            raise ProcessError(
                f"{self.npm} {' '.join(args)} failed: {cmd[0]} not found",
                args=list(args),
                exit_code=127,
            ) from e

        try:
            returncode = await process.wait()
        except asyncio.CancelledError:
            logger.debug(f"Killing {' '.join(cmd)}")
            process.kill()
            raise

        if returncode != 0:
            raise ProcessError(
                f"{self.npm} {' '.join(args)} failed with exit code {returncode}",
                args=list(args),
                exit_code=returncode,
            )
