"""
Transform collaborator.

The pipeline consumes transformed files through the `Transformer` protocol.
`LocalTransformer` handles local module graphs; richer transformers (remote
module resolution, comment directives, polyfills) plug in through the same
protocol.
"""

from .discovery import DEFAULT_TEST_PATTERN, discover_test_files, expand_braces
from .local import LocalTransformer, get_relative_specifier
from .types import (
    Dependency,
    TransformedFile,
    Transformer,
    TransformOptions,
    TransformOutput,
    TransformOutputEnvironment,
)

__all__ = [
    "DEFAULT_TEST_PATTERN",
    "Dependency",
    "LocalTransformer",
    "TransformOptions",
    "TransformOutput",
    "TransformOutputEnvironment",
    "TransformedFile",
    "Transformer",
    "discover_test_files",
    "expand_braces",
    "get_relative_specifier",
]
