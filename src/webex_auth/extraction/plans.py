"""Step plans for the Webex developer portal.

The plans are pure data built from :class:`~webex_auth.models.Settings`:
selectors come from ``settings.locators`` and waits from the timeout
fields, so a portal redesign means editing ``settings.json`` rather than
this module or the orchestrator.
"""

from __future__ import annotations

from webex_auth.models import (
    ActionKind,
    InteractionStep,
    LocatorSpec,
    Settings,
    StepPlan,
)


def build_sign_in_plan(settings: Settings, email: str) -> StepPlan:
    """Walk the sign-in form up to the password prompt.

    The email is entered twice: once on the portal's identity page and
    once on the identity broker's own form. The last step only focuses
    the password field; the user types the password.
    """
    loc = settings.locators
    timeout = settings.step_timeout_ms
    return StepPlan(
        name="sign-in",
        steps=(
            InteractionStep(
                description="Open the login page",
                locate=LocatorSpec.of(*loc.login_link),
                timeout_ms=timeout,
            ),
            InteractionStep(
                description="Enter email",
                locate=LocatorSpec.of(*loc.email_input),
                action=ActionKind.TYPE_TEXT,
                text=email,
                timeout_ms=timeout,
            ),
            InteractionStep(
                description="Submit email",
                locate=LocatorSpec.of(*loc.sign_in_button),
                timeout_ms=timeout,
            ),
            InteractionStep(
                description="Enter email on the identity broker",
                locate=LocatorSpec.of(*loc.second_email_input),
                action=ActionKind.TYPE_TEXT,
                text=email,
                timeout_ms=timeout,
            ),
            InteractionStep(
                description="Continue to password",
                locate=LocatorSpec.of(*loc.next_button),
                timeout_ms=timeout,
            ),
            InteractionStep(
                description="Focus the password field",
                locate=LocatorSpec.of(*loc.password_input),
                action=ActionKind.FOCUS_ONLY,
                timeout_ms=timeout,
            ),
        ),
    )


def build_confirmation_step(settings: Settings) -> InteractionStep:
    """The "Yes, this is my device" prompt shown after MFA succeeds."""
    return InteractionStep(
        description="Trust this device",
        locate=LocatorSpec.of(*settings.locators.trust_device_button),
        timeout_ms=settings.confirmation_timeout_ms,
        settle_ms=settings.confirmation_settle_ms,
    )


def build_reveal_plan(settings: Settings) -> StepPlan:
    """Open the account menu and copy the Personal Access Token."""
    loc = settings.locators
    return StepPlan(
        name="reveal-token",
        steps=(
            InteractionStep(
                description="Open the account menu",
                locate=LocatorSpec.of(*loc.avatar),
                timeout_ms=settings.avatar_timeout_ms,
                settle_ms=settings.menu_settle_ms,
            ),
            InteractionStep(
                description="Copy the access token",
                locate=LocatorSpec.of(*loc.copy_token_button),
                timeout_ms=settings.step_timeout_ms,
            ),
            InteractionStep(
                description="Confirm the copy",
                locate=LocatorSpec.of(*loc.confirm_copy_button),
                timeout_ms=settings.step_timeout_ms,
                settle_ms=settings.copy_settle_ms,
            ),
        ),
    )
