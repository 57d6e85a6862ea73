"""
studiogate — Workflow State Machines
=====================================
Project and deliverable lifecycles.

Public API:
    validate_transition - Project status change check
    DeliverableStateMachine - Deliverable lifecycle
"""

from studiogate.workflow.states import DeliverableState, ProjectState
from studiogate.workflow.project_lifecycle import (
    PROJECT_TRANSITIONS,
    TransitionResult,
    get_available_transitions,
    validate_transition,
)
from studiogate.workflow.deliverable_lifecycle import (
    DELIVERABLE_TRANSITIONS,
    DeliverableStateMachine,
    ensure_utc,
    final_files_expire_at,
)

__all__ = [
    "ProjectState",
    "DeliverableState",
    "PROJECT_TRANSITIONS",
    "TransitionResult",
    "validate_transition",
    "get_available_transitions",
    "DELIVERABLE_TRANSITIONS",
    "DeliverableStateMachine",
    "final_files_expire_at",
    "ensure_utc",
]
