"""Compilation and process errors raised while the pipeline runs."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from .base import DntError

if TYPE_CHECKING:
    from ..compiler.diagnostics import Diagnostic


class CompilationError(DntError):
    """Base exception for compiler-reported failures."""

    pass


class DiagnosticsError(CompilationError):
    """
    Raised by the pre-emission diagnostic gate.

    Carries every diagnostic the compiler reported. No emission pass runs
    after this error.
    """

    def __init__(
        self,
        message: str,
        diagnostics: Sequence[Diagnostic] = (),
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["diagnostic_count"] = len(diagnostics)
        super().__init__(message, details)
        self.diagnostics = list(diagnostics)


class EmitError(DiagnosticsError):
    """Raised when an emission pass reports diagnostics."""

    def __init__(
        self,
        message: str,
        target: str,
        diagnostics: Sequence[Diagnostic] = (),
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["target"] = target
        super().__init__(message, diagnostics, details)
        self.target = target


class CompilerError(CompilationError):
    """Raised when the compiler backend itself fails (not a source problem)."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        exit_code: int | None = None,
        output: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if command:
            details["command"] = command
        if exit_code is not None:
            details["exit_code"] = exit_code
        if output:
            details["output"] = output
        super().__init__(message, details)


class ProcessError(DntError):
    """Raised when an external package-manager process exits non-zero."""

    def __init__(
        self,
        message: str,
        args: Sequence[str],
        exit_code: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["args"] = list(args)
        details["exit_code"] = exit_code
        super().__init__(message, details)
        self.command_args = list(args)
        self.returncode = exit_code
