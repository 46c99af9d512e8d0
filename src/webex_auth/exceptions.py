"""Exception hierarchy for webex_auth.

All exceptions inherit from :class:`WebexAuthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`webex_auth.exit_codes`.
The top-level error handler in :func:`webex_auth.app.main` catches
``WebexAuthError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Most of the acquisition failures below never reach the CLI as exceptions.
The browser session raises them, and the step runner and orchestrator turn
them into :class:`~webex_auth.models.StepOutcome` values or a failed
:class:`~webex_auth.models.AcquisitionResult`. Only
:class:`UnexpectedCapabilityError`, :class:`ConfigError` and
:class:`PersistenceError` are allowed to propagate.

Subclass hierarchy::

    WebexAuthError (exit 1)
    +-- InvalidUsageError           (exit 2)
    +-- ConfigError                 (exit 1)
    +-- PersistenceError            (exit 1)
    +-- BrowserCapabilityError      (exit 1)
    |   +-- SessionStartError
    |   +-- StepTimeoutError
    |   +-- StepActionError
    |   +-- ClipboardReadError
    |   +-- UnexpectedCapabilityError
    +-- ClassificationRejected      (exit 1)
    +-- ValidationRejected          (exit 1)
"""

from webex_auth.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE


class WebexAuthError(Exception):
    """Base exception for all webex_auth errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(WebexAuthError):
    """Raised for invalid CLI arguments or unknown config keys."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(WebexAuthError):
    """Raised for configuration problems (unreadable or invalid settings file)."""


class PersistenceError(WebexAuthError):
    """Raised when the token files cannot be written or read back."""


class BrowserCapabilityError(WebexAuthError):
    """Base class for failures reported by the browser session capability."""


class SessionStartError(BrowserCapabilityError):
    """Raised when the browser cannot be launched or the portal cannot be opened."""


class StepTimeoutError(BrowserCapabilityError):
    """Raised when a locator does not resolve within its bounded wait.

    Args:
        selector: The selector that was being waited for.
        timeout_ms: The wait bound that elapsed.
    """

    def __init__(self, selector: str, timeout_ms: int):
        super().__init__(f"'{selector}' did not appear within {timeout_ms} ms")
        self.selector = selector
        self.timeout_ms = timeout_ms


class StepActionError(BrowserCapabilityError):
    """Raised when a click, type or focus action fails on a resolved element."""


class ClipboardReadError(BrowserCapabilityError):
    """Raised when the page's clipboard cannot be read."""


class UnexpectedCapabilityError(BrowserCapabilityError):
    """Raised when the browser itself fails mid-run (crash, closed target, driver loss).

    This is the only capability failure that aborts an acquisition attempt
    instead of being absorbed by the best-effort flow.
    """


class ClassificationRejected(WebexAuthError):
    """Raised when clipboard text does not look like a Personal Access Token."""


class ValidationRejected(WebexAuthError):
    """Raised when the identity endpoint refuses a candidate token."""
