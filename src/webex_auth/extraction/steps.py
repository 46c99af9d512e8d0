"""Fail-fast execution of interaction plans against a browser session.

:class:`StepRunner` turns a :class:`~webex_auth.models.StepPlan` into an
ordered list of :class:`~webex_auth.models.StepOutcome` values. Locator
timeouts and failed actions, whatever the session raised, are recorded as
outcomes instead of raised, so the orchestrator decides what a failed plan
means. Only :class:`~webex_auth.exceptions.UnexpectedCapabilityError` (the browser
itself is gone) escapes.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from webex_auth.browser.base import BrowserSession
from webex_auth.exceptions import (
    BrowserCapabilityError,
    StepTimeoutError,
    UnexpectedCapabilityError,
)
from webex_auth.models import (
    ActionKind,
    InteractionStep,
    StepOutcome,
    StepPlan,
    StepStatus,
)
from webex_auth.output import progress

logger = logging.getLogger(__name__)


def plan_completed(plan: StepPlan, outcomes: list[StepOutcome]) -> bool:
    """Return True when every step of *plan* ran and succeeded."""
    return len(outcomes) == len(plan.steps) and all(o.succeeded for o in outcomes)


def progress_line(outcome: StepOutcome) -> None:
    """Print a one-line progress note for *outcome* on stderr."""
    if outcome.succeeded:
        progress(f"  {outcome.step}: ok")
    else:
        progress(f"  {outcome.step}: {outcome.status.value}")


class StepRunner:
    """Execute plans step by step, stopping at the first failure.

    Args:
        on_outcome: Optional callback invoked with each outcome as soon as
            it is known. ``webex-auth login`` passes
            :func:`progress_line` to print one line per step.

    Example::

        runner = StepRunner()
        outcomes = runner.run(session, plan)
        if not plan_completed(plan, outcomes):
            print(outcomes[-1].reason)
    """

    def __init__(self, on_outcome: Optional[Callable[[StepOutcome], None]] = None) -> None:
        self._on_outcome = on_outcome

    def run(self, session: BrowserSession, plan: StepPlan) -> list[StepOutcome]:
        """Run *plan* in order and return one outcome per attempted step.

        Steps after the first failed step are not attempted and produce no
        outcome.

        Raises:
            UnexpectedCapabilityError: If the browser disappears mid-plan.
        """
        outcomes: list[StepOutcome] = []
        total = len(plan.steps)
        for index, step in enumerate(plan.steps, 1):
            outcome = self.run_step(session, step)
            outcomes.append(outcome)
            if not outcome.succeeded:
                logger.info(
                    "Plan '%s' stopped at step %d/%d (%s)", plan.name, index, total, step.description
                )
                break
        return outcomes

    def run_step(self, session: BrowserSession, step: InteractionStep) -> StepOutcome:
        """Locate the step's target, perform its action and report the outcome.

        Each alternative selector gets its own wait of ``step.timeout_ms``;
        the first one that resolves is the only one acted upon.
        """
        handle, selector, misses = self._locate(session, step)
        if handle is None:
            outcome = StepOutcome(
                step=step.description,
                status=StepStatus.LOCATOR_NOT_FOUND,
                reason="; ".join(misses),
            )
        else:
            outcome = self._act(session, step, handle, selector)

        self._report(outcome)
        return outcome

    def _locate(
        self, session: BrowserSession, step: InteractionStep
    ) -> tuple[Any, Optional[str], list[str]]:
        misses: list[str] = []
        for selector in step.locate.selectors:
            try:
                handle = session.wait_for_locator(selector, step.timeout_ms)
            except UnexpectedCapabilityError:
                raise
            except StepTimeoutError as exc:
                misses.append(str(exc))
                continue
            except Exception as exc:
                if not isinstance(exc, BrowserCapabilityError):
                    logger.debug("Lookup of '%s' raised", selector, exc_info=True)
                misses.append(f"'{selector}': {exc}")
                continue
            return handle, selector, misses
        return None, None, misses

    def _act(
        self,
        session: BrowserSession,
        step: InteractionStep,
        handle: Any,
        selector: Optional[str],
    ) -> StepOutcome:
        try:
            if step.action == ActionKind.CLICK:
                session.click(handle)
            elif step.action == ActionKind.TYPE_TEXT:
                assert step.text is not None
                session.type_text(handle, step.text)
            else:
                session.focus(handle)
        except UnexpectedCapabilityError:
            raise
        except Exception as exc:
            if not isinstance(exc, BrowserCapabilityError):
                logger.debug("Action on '%s' raised", selector, exc_info=True)
            return StepOutcome(
                step=step.description,
                status=StepStatus.ACTION_FAILED,
                selector=selector,
                reason=str(exc) or type(exc).__name__,
            )

        if step.settle_ms:
            session.pause(step.settle_ms)
        return StepOutcome(step=step.description, status=StepStatus.SUCCEEDED, selector=selector)

    def _report(self, outcome: StepOutcome) -> None:
        if outcome.succeeded:
            logger.debug("%s: ok via %s", outcome.step, outcome.selector)
        else:
            logger.debug("%s: %s (%s)", outcome.step, outcome.status.value, outcome.reason)
        if self._on_outcome is not None:
            self._on_outcome(outcome)
