"""Shared test fixtures for webex_auth.

Provides an isolated config directory, output-state reset, a CLI runner,
and in-memory stand-ins for the browser session, launcher and validator so
the acquisition flow can be exercised without a real browser or network.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Optional

import pytest

from webex_auth.browser.base import BrowserLauncher, BrowserSession
from webex_auth.exceptions import (
    ClipboardReadError,
    SessionStartError,
    StepActionError,
    StepTimeoutError,
    UnexpectedCapabilityError,
)
from webex_auth.models import PortalLocators, Settings
from webex_auth.output import OutputFormat, OutputManager, reset_output, set_output


VALID_TOKEN = (
    "YzAwMTQ5NWQtOWM1ZC00ZDg1LTk4MWYtYTEwZTg3MDE2YTE5MjBlNjQ3NTAtYjgz"
    "_PF84_1eb65fdf-9643-417f-9974-ad72cae0e10f"
)


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams and the
    test finishes, the cached references become stale. Resetting forces a
    fresh manager on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config directory at a temporary path.

    Clears every WEBEX_AUTH_* variable that could leak into a test.

    Returns:
        The config directory.
    """
    config_dir = tmp_path / "webex-cli"
    monkeypatch.setenv("WEBEX_AUTH_HOME", str(config_dir))
    for var in ("WEBEX_AUTH_EMAIL", "WEBEX_AUTH_HEADLESS"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return config_dir


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN, quiet OutputManager for tests that ignore output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN, colourless OutputManager so diagnostics are easy to match."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


# ---------------------------------------------------------------------------
# Browser and validator fakes
# ---------------------------------------------------------------------------


class FakeSession(BrowserSession):
    """In-memory browser session.

    Args:
        visible: Selectors that resolve. Every other selector times out.
        clipboard: Text returned by :meth:`read_clipboard_text`.
        clipboard_error: When set, reading the clipboard raises
            :class:`ClipboardReadError` with this message.
        goto_error: When set, navigation raises :class:`SessionStartError`.
        failing: Selectors whose action raises :class:`StepActionError`.
        crash_on: Selector whose wait raises :class:`UnexpectedCapabilityError`.
    """

    def __init__(
        self,
        visible: Iterable[str] = (),
        clipboard: str = "",
        clipboard_error: Optional[str] = None,
        goto_error: Optional[str] = None,
        failing: Iterable[str] = (),
        crash_on: Optional[str] = None,
    ) -> None:
        self.visible = set(visible)
        self.clipboard = clipboard
        self.clipboard_error = clipboard_error
        self.goto_error = goto_error
        self.failing = set(failing)
        self.crash_on = crash_on
        self.calls: list[tuple[Any, ...]] = []
        self.pauses: list[int] = []
        self.close_count = 0

    def goto(self, url: str) -> None:
        self.calls.append(("goto", url))
        if self.goto_error:
            raise SessionStartError(self.goto_error)

    def wait_for_locator(self, selector: str, timeout_ms: int) -> Any:
        self.calls.append(("wait", selector, timeout_ms))
        if selector == self.crash_on:
            raise UnexpectedCapabilityError("Target closed")
        if selector not in self.visible:
            raise StepTimeoutError(selector, timeout_ms)
        return selector

    def click(self, handle: Any) -> None:
        self.calls.append(("click", handle))
        self._maybe_fail(handle)

    def type_text(self, handle: Any, text: str) -> None:
        self.calls.append(("type", handle, text))
        self._maybe_fail(handle)

    def focus(self, handle: Any) -> None:
        self.calls.append(("focus", handle))
        self._maybe_fail(handle)

    def read_clipboard_text(self) -> str:
        self.calls.append(("clipboard",))
        if self.clipboard_error:
            raise ClipboardReadError(self.clipboard_error)
        return self.clipboard

    def pause(self, ms: int) -> None:
        self.pauses.append(ms)

    def close(self) -> None:
        self.close_count += 1

    def acted_on(self) -> list[Any]:
        """Handles that received a click, type or focus, in order."""
        return [call[1] for call in self.calls if call[0] in ("click", "type", "focus")]

    def _maybe_fail(self, handle: Any) -> None:
        if handle in self.failing:
            raise StepActionError(f"element '{handle}' is detached")


class FakeLauncher(BrowserLauncher):
    def __init__(self, session: Optional[FakeSession] = None, error: Optional[str] = None) -> None:
        self.session = session
        self.error = error
        self.open_count = 0

    def open(self) -> FakeSession:
        self.open_count += 1
        if self.error:
            raise SessionStartError(self.error)
        assert self.session is not None
        return self.session


class FakeValidator:
    """Records candidates and answers with a fixed verdict."""

    def __init__(self, accept: bool = True, diagnostic: Optional[str] = None) -> None:
        self.accept = accept
        self.last_diagnostic: Optional[str] = None
        self._diagnostic = diagnostic
        self.candidates: list[str] = []

    def validate(self, candidate: str) -> bool:
        self.candidates.append(candidate)
        self.last_diagnostic = None if self.accept else self._diagnostic
        return self.accept


@pytest.fixture
def fakes():
    """Expose the fake classes to test modules without importing conftest."""

    class _Fakes:
        Session = FakeSession
        Launcher = FakeLauncher
        Validator = FakeValidator

    return _Fakes


@pytest.fixture
def settings() -> Settings:
    """Default settings with short settle pauses."""
    return Settings(
        confirmation_settle_ms=0,
        menu_settle_ms=0,
        copy_settle_ms=0,
    )


@pytest.fixture
def portal_selectors() -> dict[str, str]:
    """The first default selector of every locator field."""
    return {name: values[0] for name, values in PortalLocators().model_dump().items()}


@pytest.fixture
def valid_token() -> str:
    return VALID_TOKEN
