"""Canonical Pydantic models shared across all webex_auth modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Settings models** -- serialised as JSON in the config directory:
    :class:`PortalLocators` and :class:`Settings`.

**Interaction models** -- immutable descriptions of what to do on the page
and what happened:
    :class:`ActionKind`, :class:`LocatorSpec`, :class:`InteractionStep`,
    :class:`StepPlan`, :class:`StepStatus`, and :class:`StepOutcome`.

**Acquisition models** -- produced by the classifier, orchestrator and token
store:
    :class:`ClassificationVerdict`, :class:`Credential`,
    :class:`AcquisitionState`, :class:`AcquisitionResult`, and
    :class:`StoredToken`.

All models use Pydantic v2. Interaction and credential models are frozen.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# --- Settings ---


_LOGIN_FORM = (
    "#login-parent > div > "
    "div.display-flex.flex-direction-column.flex-value-one"
    ".size-padding-left-large.size-padding-right-large"
)


class PortalLocators(BaseModel):
    """CSS selectors for every element the acquisition flow touches.

    Each field is an ordered list of alternatives for one logical target;
    the step runner tries them in order. The defaults match the Webex
    developer portal and its identity broker. When the portal changes,
    override the affected field in ``settings.json`` rather than editing
    the plans.
    """

    login_link: list[str] = Field(
        default_factory=lambda: ["#header-login-link"], min_length=1
    )
    email_input: list[str] = Field(default_factory=lambda: ["#IDToken1"], min_length=1)
    sign_in_button: list[str] = Field(
        default_factory=lambda: ["#IDButton2"], min_length=1
    )
    second_email_input: list[str] = Field(
        default_factory=lambda: [f"{_LOGIN_FORM} > label > input"], min_length=1
    )
    next_button: list[str] = Field(
        default_factory=lambda: [f"{_LOGIN_FORM} > button"], min_length=1
    )
    password_input: list[str] = Field(
        default_factory=lambda: [f"{_LOGIN_FORM} > form > label > input"], min_length=1
    )
    trust_device_button: list[str] = Field(
        default_factory=lambda: ["#trust-browser-button"], min_length=1
    )
    avatar: list[str] = Field(
        default_factory=lambda: [
            "#root > div > header > div > div > div.md-top-bar__right"
            " > div.md-top-bar__user > div",
            ".md-top-bar__user",
            ".md-avatar",
            ".user-image",
            "div.md-top-bar__user",
            "div.md-avatar",
            "img.user-image",
        ],
        min_length=1,
    )
    copy_token_button: list[str] = Field(
        default_factory=lambda: ["#copy-token-modal-button"], min_length=1
    )
    confirm_copy_button: list[str] = Field(
        default_factory=lambda: ["#confirm-copy-button"], min_length=1
    )


class Settings(BaseModel):
    """User settings persisted at ``<config_dir>/settings.json``.

    Loaded and saved by :func:`~webex_auth.config.load_settings` and
    :func:`~webex_auth.config.save_settings`. Fields here have the lowest
    precedence and can be overridden by environment variables or CLI flags.
    See :func:`~webex_auth.config.resolve_settings`.
    """

    portal_url: str = Field(
        default="https://developer.webex.com/docs/getting-started",
        description="Developer portal page the browser opens",
    )
    identity_url: str = Field(
        default="https://webexapis.com/v1/people/me",
        description="Identity endpoint used to validate a candidate token",
    )
    email: Optional[str] = Field(
        default=None, description="Sign-in email (default: $USER@email_domain)"
    )
    email_domain: str = Field(
        default="cisco.com", description="Domain appended to $USER for the sign-in email"
    )
    headless: bool = Field(default=False, description="Run the browser without a window")
    browser_channel: Optional[str] = Field(
        default=None, description="Playwright channel, e.g. 'chrome' or 'msedge'"
    )
    step_timeout_ms: int = Field(default=10_000, gt=0)
    avatar_timeout_ms: int = Field(default=5_000, gt=0)
    confirmation_timeout_ms: int = Field(
        default=300_000, gt=0, description="How long to wait for MFA and device trust"
    )
    confirmation_settle_ms: int = Field(default=3_000, ge=0)
    menu_settle_ms: int = Field(default=2_000, ge=0)
    copy_settle_ms: int = Field(default=1_000, ge=0)
    request_timeout: int = Field(default=30, gt=0, description="Identity request timeout in seconds")
    locators: PortalLocators = Field(default_factory=PortalLocators)


# --- Interaction ---


class ActionKind(str, enum.Enum):
    """What to do with an element once it has been located."""

    CLICK = "click"
    TYPE_TEXT = "type_text"
    FOCUS_ONLY = "focus_only"


class LocatorSpec(BaseModel):
    """One or more alternative selectors for the same logical UI target."""

    model_config = ConfigDict(frozen=True)

    selectors: tuple[str, ...] = Field(min_length=1)

    @classmethod
    def of(cls, *selectors: str) -> LocatorSpec:
        """Build a locator from positional selectors, tried in the given order."""
        return cls(selectors=selectors)


class InteractionStep(BaseModel):
    """A single UI interaction with a bounded wait.

    Example::

        InteractionStep(
            description="Enter email",
            locate=LocatorSpec.of("#IDToken1"),
            action=ActionKind.TYPE_TEXT,
            text="jdoe@example.com",
            timeout_ms=10_000,
        )
    """

    model_config = ConfigDict(frozen=True)

    description: str
    locate: LocatorSpec
    action: ActionKind = ActionKind.CLICK
    text: Optional[str] = None
    timeout_ms: int = Field(default=10_000, gt=0)
    settle_ms: int = Field(
        default=0, ge=0, description="Pause after a successful action"
    )

    @model_validator(mode="after")
    def _text_required_for_typing(self) -> InteractionStep:
        if self.action == ActionKind.TYPE_TEXT and self.text is None:
            raise ValueError(f"step '{self.description}' types text but has none")
        return self


class StepPlan(BaseModel):
    """A named, ordered sequence of steps executed fail-fast."""

    model_config = ConfigDict(frozen=True)

    name: str
    steps: tuple[InteractionStep, ...] = ()


class StepStatus(str, enum.Enum):
    SUCCEEDED = "succeeded"
    LOCATOR_NOT_FOUND = "locator_not_found"
    ACTION_FAILED = "action_failed"


class StepOutcome(BaseModel):
    """What happened to one attempted step.

    Attributes:
        step: The step's description.
        status: The tagged result.
        selector: The alternative that resolved (set for every status
            except ``LOCATOR_NOT_FOUND``).
        reason: Failure detail for ``ACTION_FAILED`` and
            ``LOCATOR_NOT_FOUND``.
    """

    model_config = ConfigDict(frozen=True)

    step: str
    status: StepStatus
    selector: Optional[str] = None
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == StepStatus.SUCCEEDED


# --- Acquisition ---


class ClassificationVerdict(BaseModel):
    """Decision of the token classifier.

    ``token`` is the candidate after ``Bearer`` prefix and whitespace
    removal; ``reason`` names the rule that rejected it.
    """

    model_config = ConfigDict(frozen=True)

    accepted: bool
    token: str
    reason: Optional[str] = None


class Credential(BaseModel):
    """A validated, persistable access token plus metadata.

    Personal Access Tokens carry no refresh token and never expire, which
    is what the defaults describe. ``expires_at_ms`` is epoch milliseconds,
    with ``0`` meaning "never".
    """

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(min_length=1)
    refresh_token: str = ""
    expires_at_ms: int = Field(default=0, ge=0)
    token_type: str = "Bearer"

    @property
    def never_expires(self) -> bool:
        return self.expires_at_ms == 0

    def preview(self, length: int = 20) -> str:
        """Return the first *length* characters followed by an ellipsis."""
        return f"{self.access_token[:length]}..."


class AcquisitionState(str, enum.Enum):
    """States of the token-acquisition state machine."""

    OPEN = "open"
    SIGN_IN = "sign_in"
    AWAIT_CONFIRMATION = "await_confirmation"
    REVEAL_TOKEN = "reveal_token"
    READ_CLIPBOARD = "read_clipboard"
    CLASSIFY = "classify"
    VALIDATE = "validate"
    FINALIZE = "finalize"
    SUCCESS = "success"
    FAILURE = "failure"


class AcquisitionResult(BaseModel):
    """Terminal state of one acquisition attempt.

    Attributes:
        state: ``SUCCESS`` or ``FAILURE``.
        credential: The persisted credential (``SUCCESS`` only).
        reason: Short failure reason (``FAILURE`` only).
        detail: Underlying error text behind ``reason``, when there is one.
        remediation: Human-readable next steps for a failed attempt.
        failed_at: The state in which the attempt failed.
        trail: Every state visited, in order.
        sign_in: Outcomes of the sign-in plan.
        reveal: Outcomes of the token-reveal plan.
        confirmed: Whether the device-trust prompt was seen and acknowledged.
    """

    state: AcquisitionState
    credential: Optional[Credential] = None
    reason: Optional[str] = None
    detail: Optional[str] = None
    remediation: list[str] = Field(default_factory=list)
    failed_at: Optional[AcquisitionState] = None
    trail: list[AcquisitionState] = Field(default_factory=list)
    sign_in: list[StepOutcome] = Field(default_factory=list)
    reveal: list[StepOutcome] = Field(default_factory=list)
    confirmed: bool = False

    @property
    def succeeded(self) -> bool:
        return self.state == AcquisitionState.SUCCESS


class StoredToken(BaseModel):
    """Token values read back from the key=value file."""

    access_token: str
    refresh_token: str = ""
    expires_at_ms: int = 0

    @property
    def expires_at(self) -> Optional[datetime]:
        """UTC expiry time, or ``None`` for a token that never expires."""
        if self.expires_at_ms == 0:
            return None
        return datetime.fromtimestamp(self.expires_at_ms / 1000, tz=timezone.utc)

    @property
    def is_expired(self) -> bool:
        expires = self.expires_at
        if expires is None:
            return False
        return datetime.now(timezone.utc) >= expires
