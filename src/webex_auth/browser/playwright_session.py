"""Playwright-backed browser session.

Drives a visible Chromium window through Playwright's synchronous API. The
launcher grants ``clipboard-read``/``clipboard-write`` to the portal origin
up front so the page's "copy token" action and the later
``navigator.clipboard.readText()`` call work without a permission prompt.

Element waits use :meth:`playwright.sync_api.Page.wait_for_selector` with a
per-call timeout, so each wait ends on its own bound and never affects any
other wait.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import urlparse

from playwright.sync_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    sync_playwright,
)
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from webex_auth.browser.base import BrowserLauncher, BrowserSession
from webex_auth.exceptions import (
    BrowserCapabilityError,
    ClipboardReadError,
    SessionStartError,
    StepActionError,
    StepTimeoutError,
    UnexpectedCapabilityError,
)
from webex_auth.models import Settings

logger = logging.getLogger(__name__)

_LAUNCH_ARGS = ["--disable-blink-features=AutomationControlled"]
_CLIPBOARD_PERMISSIONS = ["clipboard-read", "clipboard-write"]
_DISCONNECT_MARKERS = ("has been closed", "Target closed", "Connection closed")


def _origin_of(url: str) -> Optional[str]:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def _is_disconnect(exc: PlaywrightError) -> bool:
    """Return True when *exc* means the page or browser is gone."""
    message = str(exc)
    return any(marker in message for marker in _DISCONNECT_MARKERS)


def _stop_driver(playwright: Playwright) -> None:
    try:
        playwright.stop()
    except Exception:
        logger.debug("Playwright driver did not stop cleanly", exc_info=True)


def _translate(exc: PlaywrightError, fallback: type[BrowserCapabilityError], what: str) -> BrowserCapabilityError:
    if _is_disconnect(exc):
        return UnexpectedCapabilityError(f"Browser went away during {what}: {exc}")
    return fallback(f"{what} failed: {exc}")


class PlaywrightSession(BrowserSession):
    """A :class:`~webex_auth.browser.base.BrowserSession` over one Playwright page.

    Owns the whole Playwright stack for the attempt (driver, browser,
    context, page) and tears all of it down in :meth:`close`.
    """

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        context: BrowserContext,
        page: Page,
    ) -> None:
        self._playwright: Optional[Playwright] = playwright
        self._browser = browser
        self._context = context
        self._page = page

    @property
    def page(self) -> Page:
        return self._page

    def goto(self, url: str) -> None:
        logger.debug("Navigating to %s", url)
        try:
            self._page.goto(url, wait_until="networkidle")
        except PlaywrightTimeoutError as exc:
            raise SessionStartError(f"Timed out loading {url}: {exc}") from exc
        except PlaywrightError as exc:
            raise SessionStartError(f"Could not load {url}: {exc}") from exc

    def wait_for_locator(self, selector: str, timeout_ms: int) -> Any:
        try:
            handle = self._page.wait_for_selector(selector, timeout=timeout_ms, state="visible")
        except PlaywrightTimeoutError:
            raise StepTimeoutError(selector, timeout_ms) from None
        except PlaywrightError as exc:
            raise _translate(exc, StepActionError, f"waiting for '{selector}'") from exc
        if handle is None:
            raise StepTimeoutError(selector, timeout_ms)
        return handle

    def click(self, handle: Any) -> None:
        try:
            handle.click()
        except PlaywrightError as exc:
            raise _translate(exc, StepActionError, "click") from exc

    def type_text(self, handle: Any, text: str) -> None:
        try:
            handle.fill(text)
        except PlaywrightError as exc:
            raise _translate(exc, StepActionError, "typing") from exc

    def focus(self, handle: Any) -> None:
        try:
            handle.focus()
        except PlaywrightError as exc:
            raise _translate(exc, StepActionError, "focus") from exc

    def read_clipboard_text(self) -> str:
        try:
            text = self._page.evaluate("() => navigator.clipboard.readText()")
        except PlaywrightError as exc:
            raise _translate(exc, ClipboardReadError, "clipboard read") from exc
        return text if isinstance(text, str) else ""

    def pause(self, ms: int) -> None:
        if ms <= 0:
            return
        try:
            self._page.wait_for_timeout(ms)
        except PlaywrightError as exc:
            raise UnexpectedCapabilityError(f"Browser went away while waiting: {exc}") from exc

    def close(self) -> None:
        if self._playwright is None:
            return
        playwright, self._playwright = self._playwright, None
        for name, closer in (
            ("context", self._context.close),
            ("browser", self._browser.close),
            ("driver", playwright.stop),
        ):
            try:
                closer()
            except (PlaywrightError, OSError) as exc:
                # The window may already be gone (user closed it, or a crash).
                logger.debug("Ignoring error while closing %s: %s", name, exc)


class PlaywrightLauncher(BrowserLauncher):
    """Launch Chromium through Playwright and open a single page.

    Args:
        headless: Run without a visible window. The sign-in flow needs a
            human, so this is only useful with pre-authenticated profiles
            or for smoke tests.
        channel: Playwright browser channel (``"chrome"``, ``"msedge"``).
            ``None`` uses the bundled Chromium and falls back to the
            system Chrome when the bundled build is missing.
        clipboard_origin: Origin granted clipboard read/write permission.
    """

    def __init__(
        self,
        headless: bool = False,
        channel: Optional[str] = None,
        clipboard_origin: Optional[str] = None,
    ) -> None:
        self._headless = headless
        self._channel = channel
        self._clipboard_origin = clipboard_origin

    @classmethod
    def from_settings(cls, settings: Settings) -> PlaywrightLauncher:
        return cls(
            headless=settings.headless,
            channel=settings.browser_channel,
            clipboard_origin=_origin_of(settings.portal_url),
        )

    def open(self) -> PlaywrightSession:
        try:
            playwright = sync_playwright().start()
        except Exception as exc:
            raise SessionStartError(f"Playwright could not start: {exc}") from exc

        try:
            browser = self._launch(playwright)
            context = browser.new_context(no_viewport=True)
            if self._clipboard_origin:
                context.grant_permissions(_CLIPBOARD_PERMISSIONS, origin=self._clipboard_origin)
            page = context.new_page()
        except PlaywrightError as exc:
            _stop_driver(playwright)
            raise SessionStartError(f"Browser could not start: {exc}") from exc
        except BaseException:
            _stop_driver(playwright)
            raise

        logger.debug("Browser session started (headless=%s)", self._headless)
        return PlaywrightSession(playwright, browser, context, page)

    def _launch(self, playwright: Playwright) -> Browser:
        try:
            return playwright.chromium.launch(
                headless=self._headless, channel=self._channel, args=_LAUNCH_ARGS
            )
        except PlaywrightError as exc:
            if self._channel is not None or "Executable doesn't exist" not in str(exc):
                raise
            logger.warning(
                "Playwright Chromium executable missing; falling back to the system Chrome. (%s)",
                exc,
            )
            return playwright.chromium.launch(
                headless=self._headless, channel="chrome", args=_LAUNCH_ARGS
            )
