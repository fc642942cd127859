"""Configuration errors, raised before any output is written."""

from __future__ import annotations

from typing import Any

from .base import DntError


class ConfigurationError(DntError):
    """Base exception for malformed build options."""

    pass


class DuplicateEntryPointError(ConfigurationError):
    """Raised when two entry points normalize to the same export name."""

    def __init__(
        self,
        message: str,
        name: str | None = None,
        paths: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if name is not None:
            details["name"] = name
        if paths:
            details["paths"] = paths
        super().__init__(message, details)


class CapabilityDeniedError(ConfigurationError):
    """
    Raised when the capability policy refuses a write or a process launch.

    The policy fails closed: a denied capability aborts the build before the
    action is attempted.
    """

    def __init__(
        self,
        message: str,
        capability: str | None = None,
        target: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if capability:
            details["capability"] = capability
        if target:
            details["target"] = target
        super().__init__(message, details)
