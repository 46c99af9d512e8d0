"""Login command -- acquire a Personal Access Token through the browser.

Opens the Webex developer portal, walks the sign-in form up to the password
prompt, waits for the user to finish MFA, copies the token from the account
menu, checks it against the identity endpoint and stores it.

Example::

    webex-auth login
    webex-auth login --email jdoe@example.com --confirm-timeout 120
    source ~/.webex-cli/webex-env.sh
"""

from __future__ import annotations

from typing import Optional

import typer

from webex_auth.exceptions import WebexAuthError
from webex_auth.models import AcquisitionResult, Settings
from webex_auth.output import error, info, success, suggest


def _build_orchestrator(settings: Settings):
    """Wire the production launcher, validator and token store together."""
    from webex_auth.auth import IdentityValidator, TokenStore
    from webex_auth.browser import PlaywrightLauncher
    from webex_auth.config import resolve_sign_in_email
    from webex_auth.extraction import ExtractionOrchestrator, StepRunner
    from webex_auth.extraction.steps import progress_line

    store = TokenStore()
    orchestrator = ExtractionOrchestrator(
        launcher=PlaywrightLauncher.from_settings(settings),
        validator=IdentityValidator(
            identity_url=settings.identity_url,
            timeout=settings.request_timeout,
        ),
        persist=store.save,
        settings=settings,
        email=resolve_sign_in_email(settings),
        runner=StepRunner(on_outcome=progress_line),
    )
    return orchestrator, store


def login_command(
    email: Optional[str] = typer.Option(
        None, "--email", "-e", help="Sign-in email (default: $USER@<email_domain>)."
    ),
    headless: bool = typer.Option(
        False, "--headless", help="Run the browser without a window."
    ),
    confirm_timeout: Optional[int] = typer.Option(
        None,
        "--confirm-timeout",
        help="Seconds to wait for MFA and the device-trust prompt.",
    ),
) -> None:
    """Sign in to the developer portal and store a Personal Access Token.

    Raises:
        typer.Exit: With code 1 when no valid token could be obtained,
            or the error's own exit code for configuration and storage
            problems.
    """
    from webex_auth.config import resolve_settings

    try:
        settings = resolve_settings(
            cli_email=email,
            cli_headless=True if headless else None,
            cli_confirm_timeout=confirm_timeout,
        )
        orchestrator, store = _build_orchestrator(settings)
        result = orchestrator.run()
    except WebexAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if not result.succeeded:
        _report_failure(result)
        raise typer.Exit(code=1)

    credential = result.credential
    assert credential is not None
    info(f"Token: {credential.preview()}")
    info(f"Type: {credential.token_type}")
    info("Expires: never" if credential.never_expires else f"Expires: {credential.expires_at_ms}")
    success(f"Token saved to {store.env_path}")
    suggest(f"Load it into your shell: source {store.script_path}")


def _report_failure(result: AcquisitionResult) -> None:
    error(result.reason or "token acquisition failed")
    if result.detail:
        info(f"Details: {result.detail}")
    for step in result.remediation:
        suggest(step)
