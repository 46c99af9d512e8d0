"""Abstract base classes for the browser session capability.

This module defines the contract between the acquisition flow and whatever
drives the browser:

- :class:`BrowserSession` -- the operations the step runner and orchestrator
  need, each reporting failure through the
  :class:`~webex_auth.exceptions.BrowserCapabilityError` taxonomy rather
  than driver-specific exceptions.
- :class:`BrowserLauncher` -- a factory for sessions.

Element handles are opaque: whatever :meth:`BrowserSession.wait_for_locator`
returns is passed back unchanged to :meth:`~BrowserSession.click`,
:meth:`~BrowserSession.type_text` or :meth:`~BrowserSession.focus`.

See Also:
    :mod:`webex_auth.browser.playwright_session` for the Playwright
    implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class BrowserSession(ABC):
    """One interactive browser context owning exactly one page.

    A session lives for a single acquisition attempt and must be closed on
    every exit path. Implementations translate driver errors as follows:

    - element wait elapsed: :class:`~webex_auth.exceptions.StepTimeoutError`
    - action on a resolved element failed:
      :class:`~webex_auth.exceptions.StepActionError`
    - clipboard unreadable: :class:`~webex_auth.exceptions.ClipboardReadError`
    - navigation failed: :class:`~webex_auth.exceptions.SessionStartError`
    - browser gone (crash, closed target):
      :class:`~webex_auth.exceptions.UnexpectedCapabilityError`
    """

    @abstractmethod
    def goto(self, url: str) -> None:
        """Navigate the page to *url* and wait for it to settle."""
        ...

    @abstractmethod
    def wait_for_locator(self, selector: str, timeout_ms: int) -> Any:
        """Wait up to *timeout_ms* for *selector* to become visible.

        Returns:
            An opaque element handle.

        Raises:
            StepTimeoutError: If the element did not appear in time.
        """
        ...

    @abstractmethod
    def click(self, handle: Any) -> None:
        ...

    @abstractmethod
    def type_text(self, handle: Any, text: str) -> None:
        ...

    @abstractmethod
    def focus(self, handle: Any) -> None:
        ...

    @abstractmethod
    def read_clipboard_text(self) -> str:
        """Return the current clipboard text as seen by the page."""
        ...

    @abstractmethod
    def pause(self, ms: int) -> None:
        """Let the page run for *ms* milliseconds without interacting."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the browser. Safe to call more than once; never raises."""
        ...


class BrowserLauncher(ABC):
    """Factory for :class:`BrowserSession` instances."""

    @abstractmethod
    def open(self) -> BrowserSession:
        """Start a browser and return a session bound to a fresh page.

        Raises:
            SessionStartError: If the browser cannot be started.
        """
        ...
