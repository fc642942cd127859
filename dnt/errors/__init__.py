"""
Build Pipeline Error Definitions

Every failure in the pipeline is fatal to the build. The hierarchy separates
configuration problems (raised before any I/O), compiler-reported problems,
and external process failures.

Example:
    from dnt.errors import DiagnosticsError, ProcessError

    try:
        await build(options)
    except DiagnosticsError as e:
        logger.error(f"{len(e.diagnostics)} diagnostic(s)")
    except ProcessError as e:
        logger.error(f"npm failed: {e}")
"""

from .base import DntError
from .build import (
    CompilationError,
    CompilerError,
    DiagnosticsError,
    EmitError,
    ProcessError,
)
from .config import (
    CapabilityDeniedError,
    ConfigurationError,
    DuplicateEntryPointError,
)

__all__ = [
    "CapabilityDeniedError",
    "CompilationError",
    "CompilerError",
    "ConfigurationError",
    "DiagnosticsError",
    "DntError",
    "DuplicateEntryPointError",
    "EmitError",
    "ProcessError",
]
