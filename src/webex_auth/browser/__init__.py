"""Browser session capability consumed by the acquisition flow.

The acquisition logic never talks to a browser driver directly. It works
against two small abstractions:

- :class:`BrowserLauncher` -- opens a fresh :class:`BrowserSession`.
- :class:`BrowserSession` -- one browser context owning one page, with
  bounded element waits, element actions, clipboard access and ``close``.

:class:`PlaywrightLauncher` is the production implementation, built on
Playwright's synchronous API. Tests substitute in-memory fakes.

Typical usage::

    from webex_auth.browser import PlaywrightLauncher

    launcher = PlaywrightLauncher(headless=False, clipboard_origin="https://developer.webex.com")
    session = launcher.open()
    try:
        session.goto("https://developer.webex.com/docs/getting-started")
    finally:
        session.close()
"""

from webex_auth.browser.base import BrowserLauncher, BrowserSession
from webex_auth.browser.playwright_session import PlaywrightLauncher, PlaywrightSession

__all__ = [
    "BrowserLauncher",
    "BrowserSession",
    "PlaywrightLauncher",
    "PlaywrightSession",
]
