"""Tests for the command line entry point."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from dnt import BuildOptions
from dnt.cli import load_config, main
from dnt.compiler import Diagnostic
from dnt.errors import ConfigurationError, DiagnosticsError, ProcessError

CONFIG = {
    "entryPoints": ["./mod.ts"],
    "outDir": "./npm",
    "package": {"name": "pkg", "version": "0.1.0"},
}


class TestLoadConfig:
    """Tests for --config parsing."""

    def test_inline_json(self) -> None:
        assert load_config(json.dumps(CONFIG)) == CONFIG

    def test_config_file(self, tmp_path: Path) -> None:
        path = tmp_path / "dnt.json"
        path.write_text(json.dumps(CONFIG))
        assert load_config(str(path)) == CONFIG

    def test_invalid_json(self) -> None:
        with pytest.raises(ConfigurationError):
            load_config("{not json")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            load_config(str(tmp_path / "missing.json"))

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "dnt.json"
        path.write_text("[]")
        with pytest.raises(ConfigurationError):
            load_config(str(path))


class TestMain:
    """Tests for main()."""

    def test_success(self) -> None:
        with patch("dnt.cli.build_sync") as mock_build:
            assert main(["--config", json.dumps(CONFIG)]) == 0

        options = mock_build.call_args.args[0]
        assert isinstance(options, BuildOptions)
        assert options.entry_points == ("./mod.ts",)
        assert options.out_dir == Path("npm")
        assert options.test is True

    def test_flags_override_config(self) -> None:
        with patch("dnt.cli.build_sync") as mock_build:
            main(
                [
                    "--config",
                    json.dumps(CONFIG),
                    "--out-dir",
                    "dist",
                    "--no-test",
                    "--no-type-check",
                    "--no-declaration",
                    "--keep-source-files",
                ]
            )

        options = mock_build.call_args.args[0]
        assert options.out_dir == Path("dist")
        assert options.test is False
        assert options.type_check is False
        assert options.declaration is False
        assert options.keep_source_files is True
        assert options.keep_test_files is False

    def test_missing_required_option(self, capsys) -> None:
        with patch("dnt.cli.build_sync") as mock_build:
            assert main(["--config", json.dumps({"entryPoints": ["./mod.ts"]})]) == 1
        mock_build.assert_not_called()
        assert "[dnt] Missing required option: outDir" in capsys.readouterr().out

    def test_process_error_exit_status(self, capsys) -> None:
        error = ProcessError("npm install failed with exit code 1", args=["install"], exit_code=1)
        with patch("dnt.cli.build_sync", side_effect=error):
            assert main(["--config", json.dumps(CONFIG)]) == 1
        assert "npm install failed with exit code 1" in capsys.readouterr().out

    def test_diagnostics_not_logged_twice(self, capsys) -> None:
        error = DiagnosticsError("Type checking failed with 1 diagnostic(s)", [Diagnostic("bad", code=2322)])
        with patch("dnt.cli.build_sync", side_effect=error):
            assert main(["--config", json.dumps(CONFIG)]) == 1
        assert "Type checking failed" not in capsys.readouterr().out
