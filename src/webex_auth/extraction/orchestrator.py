"""The token-acquisition state machine.

:class:`ExtractionOrchestrator` drives one attempt from browser launch to a
stored credential::

    OPEN -> SIGN_IN -> AWAIT_CONFIRMATION -> REVEAL_TOKEN
         -> READ_CLIPBOARD -> CLASSIFY -> VALIDATE -> FINALIZE -> SUCCESS

Any state may end in ``FAILURE``. The page is outside our control, so the
UI states are best-effort: a failed sign-in plan, a missing device-trust
prompt, or a broken reveal plan are reported and the flow moves on, on the
assumption that the user finished the job by hand. Only the clipboard,
classification and validation states can fail the attempt.

Two invariants hold on every path:

- The browser session is closed exactly once before :meth:`run` returns or
  raises.
- The persistence callback receives a :class:`~webex_auth.models.Credential`
  exactly once on success and never on failure, and only for a token that
  passed both the classifier and the validator.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from webex_auth.browser.base import BrowserLauncher, BrowserSession
from webex_auth.exceptions import (
    ClassificationRejected,
    ClipboardReadError,
    SessionStartError,
    ValidationRejected,
)
from webex_auth.extraction.classifier import inspect_candidate
from webex_auth.extraction.plans import (
    build_confirmation_step,
    build_reveal_plan,
    build_sign_in_plan,
)
from webex_auth.extraction.steps import StepRunner, plan_completed
from webex_auth.models import (
    AcquisitionResult,
    AcquisitionState,
    Credential,
    Settings,
    StepOutcome,
)
from webex_auth.output import debug, info, success, warning

logger = logging.getLogger(__name__)

REASON_SESSION = "session could not start"
REASON_NO_TOKEN = "could not extract a valid-looking credential"
REASON_INVALID = "extracted credential failed validation"

_SESSION_REMEDIATION = [
    "Install a browser for Playwright: playwright install chromium",
    "Make sure a display is available, or set headless mode",
    "Check your network connection and run the command again",
]
_NO_TOKEN_REMEDIATION = [
    "Run the command again and complete sign-in, including MFA",
    "Check that the account menu on the developer portal offers 'Copy' for your token",
    "If the portal layout changed, update the selectors in settings.json",
]
_INVALID_REMEDIATION = [
    "The copied text may not have been your token; run the command again",
    "Check your network connection",
]


class CandidateValidator(Protocol):
    def validate(self, candidate: str) -> bool: ...


class ExtractionOrchestrator:
    """Run one token-acquisition attempt end to end.

    Args:
        launcher: Opens the browser session.
        validator: Confirms a classified candidate with the remote API.
        persist: Receives the credential on success (normally
            :meth:`~webex_auth.auth.token_store.TokenStore.save`).
        settings: Portal URL, timeouts and selectors.
        email: Email typed into the sign-in form.
        runner: Step runner; a default :class:`StepRunner` when omitted.
    """

    def __init__(
        self,
        launcher: BrowserLauncher,
        validator: CandidateValidator,
        persist: Callable[[Credential], None],
        settings: Settings,
        email: str,
        runner: Optional[StepRunner] = None,
    ) -> None:
        self._launcher = launcher
        self._validator = validator
        self._persist = persist
        self._settings = settings
        self._email = email
        self._runner = runner or StepRunner()
        self._result = AcquisitionResult(state=AcquisitionState.OPEN)

    def run(self) -> AcquisitionResult:
        """Execute the state machine and return its terminal state.

        Raises:
            UnexpectedCapabilityError: If the browser dies mid-run. The
                session is still closed first.
            PersistenceError: If the credential cannot be written.
        """
        self._result = AcquisitionResult(state=AcquisitionState.OPEN)
        self._enter(AcquisitionState.OPEN)
        info("Launching browser...")
        try:
            session = self._launcher.open()
        except SessionStartError as exc:
            return self._fail(AcquisitionState.OPEN, REASON_SESSION, exc, _SESSION_REMEDIATION)

        failure: Optional[AcquisitionResult] = None
        token: Optional[str] = None
        try:
            token = self._acquire(session)
        except SessionStartError as exc:
            failure = self._fail(AcquisitionState.OPEN, REASON_SESSION, exc, _SESSION_REMEDIATION)
        except ClassificationRejected as exc:
            failure = self._fail(AcquisitionState.CLASSIFY, REASON_NO_TOKEN, exc, _NO_TOKEN_REMEDIATION)
        except ValidationRejected as exc:
            failure = self._fail(AcquisitionState.VALIDATE, REASON_INVALID, exc, _INVALID_REMEDIATION)
        finally:
            session.close()
            debug("Browser closed")

        if failure is not None:
            return failure
        assert token is not None
        return self._finalize(token)

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _acquire(self, session: BrowserSession) -> str:
        info("Opening the developer portal...")
        session.goto(self._settings.portal_url)

        self._enter(AcquisitionState.SIGN_IN)
        self._sign_in(session)

        self._enter(AcquisitionState.AWAIT_CONFIRMATION)
        self._await_confirmation(session)

        self._enter(AcquisitionState.REVEAL_TOKEN)
        self._reveal_token(session)

        self._enter(AcquisitionState.READ_CLIPBOARD)
        candidate = self._read_clipboard(session)

        self._enter(AcquisitionState.CLASSIFY)
        token = self._classify(candidate)

        self._enter(AcquisitionState.VALIDATE)
        self._validate(token)

        self._enter(AcquisitionState.FINALIZE)
        return token

    def _sign_in(self, session: BrowserSession) -> None:
        plan = build_sign_in_plan(self._settings, self._email)
        info(f"Starting sign-in for {self._email}")
        outcomes = self._runner.run(session, plan)
        self._result.sign_in = outcomes

        if plan_completed(plan, outcomes):
            success("Password field is focused; type your password in the browser window.")
            info("Complete your password and MFA; the tool continues once you finish.")
            return

        warning(f"Automated sign-in stopped: {_describe_failure(outcomes)}")
        info("Please complete the login manually in the browser window.")
        info("The tool will wait for you to finish and then extract the token.")

    def _await_confirmation(self, session: BrowserSession) -> None:
        step = build_confirmation_step(self._settings)
        minutes = self._settings.confirmation_timeout_ms / 60_000
        info(f"Waiting up to {minutes:g} min for MFA and the device-trust prompt...")
        outcome = self._runner.run_step(session, step)
        if outcome.succeeded:
            self._result.confirmed = True
            success("Confirmed 'Yes, this is my device'")
        else:
            warning("Device-trust prompt not seen; continuing anyway.")
            logger.info("Confirmation wait ended: %s", outcome.reason)

    def _reveal_token(self, session: BrowserSession) -> None:
        plan = build_reveal_plan(self._settings)
        info("Copying the access token from the account menu...")
        outcomes = self._runner.run(session, plan)
        self._result.reveal = outcomes
        if not plan_completed(plan, outcomes):
            # The copy may still have reached the clipboard.
            warning(f"Token copy did not complete: {_describe_failure(outcomes)}")

    def _read_clipboard(self, session: BrowserSession) -> Optional[str]:
        try:
            text = session.read_clipboard_text()
        except ClipboardReadError as exc:
            warning(f"Could not read from clipboard: {exc}")
            return None
        if not text or not text.strip():
            warning("Clipboard is empty")
            return None
        debug(f"Clipboard holds {len(text)} characters starting with {text[:20]!r}")
        return text

    def _classify(self, candidate: Optional[str]) -> str:
        verdict = inspect_candidate(candidate)
        if not verdict.accepted:
            warning(f"Clipboard text rejected: {verdict.reason}")
            raise ClassificationRejected(verdict.reason or "rejected")

        token = verdict.token
        debug(f"Token length: {len(token)} characters")
        debug(f"Token contains '_' or '-': {any(ch in token for ch in '_-')}")
        success("Extracted a token from the clipboard")
        return token

    def _validate(self, token: str) -> None:
        info("Validating token with the Webex API...")
        if self._validator.validate(token):
            return
        detail = getattr(self._validator, "last_diagnostic", None)
        if not isinstance(detail, str) or not detail:
            detail = "identity endpoint rejected the token"
        raise ValidationRejected(detail)

    def _finalize(self, token: str) -> AcquisitionResult:
        credential = Credential(
            access_token=token,
            refresh_token="",
            expires_at_ms=0,
            token_type="Bearer",
        )
        self._persist(credential)
        self._enter(AcquisitionState.SUCCESS)
        result = self._result
        result.state = AcquisitionState.SUCCESS
        result.credential = credential
        # The returned result is the only holder of the credential.
        self._result = AcquisitionResult(state=AcquisitionState.OPEN)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _enter(self, state: AcquisitionState) -> None:
        logger.debug("-> %s", state.value)
        self._result.trail.append(state)

    def _fail(
        self,
        state: AcquisitionState,
        reason: str,
        exc: Exception,
        remediation: list[str],
    ) -> AcquisitionResult:
        self._enter(AcquisitionState.FAILURE)
        self._result.state = AcquisitionState.FAILURE
        self._result.failed_at = state
        self._result.reason = reason
        self._result.detail = str(exc)
        self._result.remediation = list(remediation)
        return self._result


def _describe_failure(outcomes: list[StepOutcome]) -> str:
    if not outcomes:
        return "no steps ran"
    last = outcomes[-1]
    return f"{last.step} ({last.status.value.replace('_', ' ')})"
