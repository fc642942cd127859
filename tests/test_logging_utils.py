"""Tests for console logging setup."""

from __future__ import annotations

import io
import logging

from dnt.logging_utils import DntFormatter, configure_logging, supports_color


def _record(level: int, message: str) -> logging.LogRecord:
    return logging.LogRecord("dnt.build", level, __file__, 1, message, None, None)


def test_formatter_prefix() -> None:
    assert DntFormatter().format(_record(logging.INFO, "Transforming...")) == "[dnt] Transforming..."


def test_formatter_colours_warnings() -> None:
    text = DntFormatter(use_color=True).format(_record(logging.WARNING, "careful"))
    assert text == "\033[33m[dnt] careful\033[0m"


def test_formatter_leaves_info_uncoloured() -> None:
    assert DntFormatter(use_color=True).format(_record(logging.INFO, "ok")) == "[dnt] ok"


def test_supports_color(monkeypatch) -> None:
    class Tty(io.StringIO):
        def isatty(self) -> bool:
            return True

    monkeypatch.delenv("NO_COLOR", raising=False)
    assert supports_color(Tty()) is True
    assert supports_color(io.StringIO()) is False
    monkeypatch.setenv("NO_COLOR", "1")
    assert supports_color(Tty()) is False


def test_configure_logging_writes_prefixed_lines() -> None:
    stream = io.StringIO()
    logger = configure_logging(stream=stream)
    logging.getLogger("dnt.build").info("Complete!")
    logging.getLogger("dnt.build").debug("hidden")
    assert stream.getvalue() == "[dnt] Complete!\n"
    assert logger.level == logging.INFO


def test_configure_logging_replaces_handler() -> None:
    first, second = io.StringIO(), io.StringIO()
    configure_logging(stream=first)
    logger = configure_logging(stream=second, verbose=True)
    logging.getLogger("dnt").debug("details")
    assert first.getvalue() == ""
    assert second.getvalue() == "[dnt] details\n"
    assert logger.level == logging.DEBUG
