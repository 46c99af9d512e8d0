"""Tests for webex_auth.output -- stream discipline, formats and logging.

Covers:
- AUTO format resolution and NO_COLOR / TERM=dumb handling
- stdout for data, stderr for diagnostics
- Quiet and verbose rules
- Table rendering in JSON and plain modes
- The Rich logging handler installed by configure_logging
"""

from __future__ import annotations

import json
import logging

import pytest
from rich.logging import RichHandler

from webex_auth import output as output_module
from webex_auth.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    configure_logging,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture(autouse=True)
def _reset_global_output():
    reset_output()
    yield
    reset_output()


@pytest.fixture()
def non_tty(monkeypatch):
    monkeypatch.setattr("webex_auth.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    monkeypatch.setattr("webex_auth.output._is_tty", lambda: True)


@pytest.fixture
def restore_logger():
    logger = logging.getLogger("webex_auth")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


class TestFormatResolution:
    def test_auto_is_plain_when_piped(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_is_rich_on_terminal(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager().format == OutputFormat.RICH

    def test_no_color_flag_forces_plain(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON

    @pytest.mark.parametrize(
        "no_color, term, expected",
        [("1", None, True), ("", None, True), (None, "dumb", True), (None, "xterm", False)],
    )
    def test_color_environment(self, monkeypatch, no_color, term, expected):
        for name, value in (("NO_COLOR", no_color), ("TERM", term)):
            if value is None:
                monkeypatch.delenv(name, raising=False)
            else:
                monkeypatch.setenv(name, value)
        assert _should_disable_color() is expected


class TestStreams:
    def test_data_on_stdout_diagnostics_on_stderr(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_data("WEBEX_ACCESS_TOKEN preview")
        mgr.info("Launching browser...")
        mgr.success("Token saved")
        mgr.warning("Clipboard is empty")
        mgr.error("extracted credential failed validation")
        mgr.suggest("source ~/.webex-cli/webex-env.sh")
        captured = capfd.readouterr()

        assert captured.out.strip() == "WEBEX_ACCESS_TOKEN preview"
        for text in (
            "Launching browser...",
            "Token saved",
            "Warning: Clipboard is empty",
            "Error: extracted credential failed validation",
            "source ~/.webex-cli/webex-env.sh",
        ):
            assert text in captured.err

    def test_json_stdout_stays_parseable(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.info("loading...")
        mgr.format_response({"headless": False})
        captured = capfd.readouterr()
        assert json.loads(captured.out) == {"headless": False}


class TestQuietAndVerbose:
    def test_quiet_keeps_warnings_and_errors(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.info("hidden info")
        mgr.success("hidden success")
        mgr.suggest("hidden suggestion")
        mgr.warning("shown warning")
        mgr.error("shown error")
        captured = capfd.readouterr()
        assert "hidden" not in captured.err
        assert "shown warning" in captured.err
        assert "shown error" in captured.err

    def test_debug_needs_verbose(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).debug("quiet trace")
        OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True).debug("loud trace")
        captured = capfd.readouterr()
        assert "quiet trace" not in captured.err
        assert "[debug] loud trace" in captured.err

    def test_progress_only_on_terminal(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).progress("Waiting...")
        assert capfd.readouterr().err == ""


class TestPrintTable:
    def test_json_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_table(["Field", "Value"], [["Expires", "never"]])
        assert json.loads(capfd.readouterr().out) == [{"Field": "Expires", "Value": "never"}]

    def test_plain_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_table(["Field", "Value"], [["Expires", "never"], ["Expired", "no"]])
        lines = capfd.readouterr().out.strip().split("\n")
        assert lines == ["Field\tValue", "Expires\tnever", "Expired\tno"]

    def test_rich_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_table(["Field", "Value"], [["Expires", "never"]], title="Stored Token")
        out = capfd.readouterr().out
        assert "Stored Token" in out
        assert "never" in out


class TestLogging:
    def test_verbose_enables_debug_records(self, restore_logger, non_tty):
        configure_logging(OutputManager(no_color=True, verbose=True))
        assert restore_logger.level == logging.DEBUG
        assert restore_logger.propagate is False
        assert any(isinstance(h, RichHandler) for h in restore_logger.handlers)

    def test_default_level_is_warning(self, restore_logger, non_tty):
        configure_logging(OutputManager(no_color=True))
        assert restore_logger.level == logging.WARNING

    def test_handler_not_duplicated(self, restore_logger, non_tty):
        configure_logging(OutputManager(no_color=True))
        configure_logging(OutputManager(no_color=True))
        rich_handlers = [h for h in restore_logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1

    def test_child_logger_reaches_stderr(self, restore_logger, capfd, non_tty):
        configure_logging(OutputManager(no_color=True, verbose=True))
        logging.getLogger("webex_auth.extraction.steps").debug("Enter email: ok via #IDToken1")
        assert "Enter email: ok via #IDToken1" in capfd.readouterr().err


class TestGlobalInstance:
    def test_lazy_default(self, non_tty):
        assert isinstance(get_output(), OutputManager)

    def test_set_and_reset(self):
        mgr = OutputManager(format=OutputFormat.JSON)
        set_output(mgr)
        assert get_output() is mgr
        reset_output()
        assert output_module._output is None

    def test_module_helpers_delegate(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.info("via helper")
        output_module.print_data("data via helper")
        captured = capfd.readouterr()
        assert "via helper" in captured.err
        assert "data via helper" in captured.out
