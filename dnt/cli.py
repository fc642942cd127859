"""Command line entry point."""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .build import build_sync
from .errors import ConfigurationError, DiagnosticsError, DntError
from .logging_utils import configure_logging
from .types import BuildOptions

logger = logging.getLogger(__name__)

# flag dest -> camelCase config key
_FLAG_OVERRIDES = {
    "out_dir": "outDir",
    "type_check": "typeCheck",
    "test": "test",
    "declaration": "declaration",
    "keep_source_files": "keepSourceFiles",
    "keep_test_files": "keepTestFiles",
}


def load_config(value: str) -> dict[str, Any]:
    """Parse `--config`: inline JSON or the path of a JSON file."""
    try:
        if value.lstrip().startswith("{"):
            config = json.loads(value)
        else:
            config = json.loads(Path(value).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON config: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Could not read config file {value}: {e}") from e
    if not isinstance(config, dict):
        raise ConfigurationError("Config must be a JSON object")
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dnt",
        description="Build an npm package (ESM, UMD and declarations) from a Deno module",
    )
    parser.add_argument(
        "--config",
        required=True,
        help="JSON config string or path to a JSON file with entryPoints, outDir, package, etc.",
    )
    parser.add_argument("--out-dir", dest="out_dir", default=None, help="Output directory")
    parser.add_argument("--no-type-check", dest="type_check", action="store_false", default=None)
    parser.add_argument("--no-test", dest="test", action="store_false", default=None)
    parser.add_argument("--no-declaration", dest="declaration", action="store_false", default=None)
    parser.add_argument("--keep-source-files", dest="keep_source_files", action="store_true", default=None)
    parser.add_argument("--keep-test-files", dest="keep_test_files", action="store_true", default=None)
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)

    try:
        config = load_config(args.config)
        for dest, key in _FLAG_OVERRIDES.items():
            value = getattr(args, dest)
            if value is not None:
                config[key] = value
        build_sync(BuildOptions.from_dict(config))
    except DntError as e:
        # diagnostics were already logged one by one
        if not isinstance(e, DiagnosticsError):
            logger.error(e.message)
        return e.exit_code
    return 0
