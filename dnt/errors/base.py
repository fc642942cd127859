"""Base exception classes for the build pipeline."""

from __future__ import annotations

from typing import Any


class DntError(Exception):
    """Base exception for all build pipeline errors."""

    exit_code: int = 1
    """Process exit status reported by the CLI for this error."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize build error.

        Args:
            message: Human-readable error message.
            details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }
