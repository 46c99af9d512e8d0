"""Token acquisition: classification, step execution and the state machine.

Re-exports the public surface so callers can write::

    from webex_auth.extraction import ExtractionOrchestrator, classify
"""

from webex_auth.extraction.classifier import classify, inspect_candidate
from webex_auth.extraction.orchestrator import ExtractionOrchestrator
from webex_auth.extraction.steps import StepRunner, plan_completed

__all__ = [
    "ExtractionOrchestrator",
    "StepRunner",
    "classify",
    "inspect_candidate",
    "plan_completed",
]
