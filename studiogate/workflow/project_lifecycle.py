"""
studiogate — Project Status Transitions
========================================
Validates project status changes against an explicit adjacency table.

Rules, in evaluation order:
- Self-transition is rejected.
- Archived projects cannot change status (deletion is a separate,
  super-admin-only operation).
- Completed projects cannot return to draft; every other exit is allowed.
- The operational states (draft, active, in_review, awaiting_payment,
  on_hold) move freely between each other.
- Archiving is allowed from every non-archived state.
- Completion is allowed from every operational state except draft.

A rejected transition is a data result (``TransitionResult``), never an
exception; the caller surfaces ``error`` verbatim and skips the update.

Usage:
    result = validate_transition("active", "archived")
    if not result.is_valid:
        return error_response(result.error)
"""

from __future__ import annotations

from dataclasses import dataclass

from studiogate.core.logging import get_logger
from studiogate.workflow.states import ProjectState

logger = get_logger(__name__)

_S = ProjectState


# ── Authoritative Transition Map ────────────────────────────────────────
# Exhaustive. Any (from, to) pair not listed is rejected.

PROJECT_TRANSITIONS: dict[ProjectState, frozenset[ProjectState]] = {
    _S.DRAFT: frozenset({
        _S.ACTIVE, _S.IN_REVIEW, _S.AWAITING_PAYMENT, _S.ON_HOLD,
        _S.ARCHIVED,
    }),
    _S.ACTIVE: frozenset({
        _S.DRAFT, _S.IN_REVIEW, _S.AWAITING_PAYMENT, _S.ON_HOLD,
        _S.COMPLETED, _S.ARCHIVED,
    }),
    _S.IN_REVIEW: frozenset({
        _S.DRAFT, _S.ACTIVE, _S.AWAITING_PAYMENT, _S.ON_HOLD,
        _S.COMPLETED, _S.ARCHIVED,
    }),
    _S.AWAITING_PAYMENT: frozenset({
        _S.DRAFT, _S.ACTIVE, _S.IN_REVIEW, _S.ON_HOLD,
        _S.COMPLETED, _S.ARCHIVED,
    }),
    _S.ON_HOLD: frozenset({
        _S.DRAFT, _S.ACTIVE, _S.IN_REVIEW, _S.AWAITING_PAYMENT,
        _S.COMPLETED, _S.ARCHIVED,
    }),
    _S.COMPLETED: frozenset({
        _S.ACTIVE, _S.IN_REVIEW, _S.AWAITING_PAYMENT, _S.ON_HOLD,
        _S.ARCHIVED,
    }),
    # Terminal: the only way out is deletion
    _S.ARCHIVED: frozenset(),
}


# ── Rejection messages ──────────────────────────────────────────────────

ALREADY_IN_STATUS = "project is already in this status"
ARCHIVED_IS_FINAL = "archived projects cannot change status"
COMPLETED_TO_DRAFT = "completed projects cannot return to draft"
DRAFT_TO_COMPLETED = "draft projects must be activated before they can be completed"


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a project status transition check."""

    is_valid: bool
    error: str | None = None

    @staticmethod
    def ok() -> TransitionResult:
        return TransitionResult(is_valid=True)

    @staticmethod
    def rejected(error: str) -> TransitionResult:
        return TransitionResult(is_valid=False, error=error)


def _rejection_message(from_state: ProjectState, to_state: ProjectState) -> str:
    """Most specific message for a pair that is not in the table."""
    if from_state == to_state:
        return ALREADY_IN_STATUS
    if from_state == ProjectState.ARCHIVED:
        return ARCHIVED_IS_FINAL
    if from_state == ProjectState.COMPLETED and to_state == ProjectState.DRAFT:
        return COMPLETED_TO_DRAFT
    if from_state == ProjectState.DRAFT and to_state == ProjectState.COMPLETED:
        return DRAFT_TO_COMPLETED
    return (
        f"Cannot transition project from '{from_state.label}' "
        f"to '{to_state.label}'"
    )


def validate_transition(
    from_state: str | ProjectState,
    to_state: str | ProjectState,
) -> TransitionResult:
    """
    Check a project status change.

    Accepts ``ProjectState`` members, storage values or display labels.
    Raises ``InvalidStateError`` only for strings outside the state set.
    """
    current = ProjectState.parse(from_state)
    target = ProjectState.parse(to_state)

    if target in PROJECT_TRANSITIONS[current]:
        return TransitionResult.ok()

    error = _rejection_message(current, target)
    logger.debug(
        "project_lifecycle.transition_rejected",
        from_state=current.value,
        to_state=target.value,
        error=error,
    )
    return TransitionResult.rejected(error)


def get_available_transitions(state: str | ProjectState) -> frozenset[ProjectState]:
    """Return the set of statuses a project may move to from ``state``."""
    return PROJECT_TRANSITIONS[ProjectState.parse(state)]


def is_terminal(state: str | ProjectState) -> bool:
    """Return ``True`` if no status change is possible from ``state``."""
    return not PROJECT_TRANSITIONS[ProjectState.parse(state)]
