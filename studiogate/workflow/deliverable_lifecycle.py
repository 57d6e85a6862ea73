"""
studiogate — Deliverable State Machine
=======================================
Deterministic lifecycle for a single deliverable:

    pending → in_progress → beta_ready → awaiting_approval
        → approved → payment_pending → final_delivered
        → revision_requested | rejected → in_progress (rework)

Undefined transitions raise ``InvalidTransitionError``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from studiogate.core.config import get_settings
from studiogate.core.exceptions import InvalidTransitionError
from studiogate.workflow.states import DeliverableState

_D = DeliverableState


# ── Terminal states (no outgoing transitions) ───────────────────────────

TERMINAL_STATES: frozenset[DeliverableState] = frozenset({_D.FINAL_DELIVERED})


# ── Authoritative Transition Map ────────────────────────────────────────

DELIVERABLE_TRANSITIONS: dict[DeliverableState, frozenset[DeliverableState]] = {
    _D.PENDING: frozenset({_D.IN_PROGRESS}),
    _D.IN_PROGRESS: frozenset({_D.BETA_READY, _D.PENDING}),
    _D.BETA_READY: frozenset({_D.AWAITING_APPROVAL, _D.IN_PROGRESS}),
    _D.AWAITING_APPROVAL: frozenset(
        {_D.APPROVED, _D.REVISION_REQUESTED, _D.REJECTED}
    ),
    _D.APPROVED: frozenset({_D.PAYMENT_PENDING}),
    _D.PAYMENT_PENDING: frozenset({_D.FINAL_DELIVERED}),
    _D.REVISION_REQUESTED: frozenset({_D.IN_PROGRESS}),
    _D.REJECTED: frozenset({_D.IN_PROGRESS}),
    _D.FINAL_DELIVERED: frozenset(),
}

# Client decisions that use up one revision from the project quota
_REVISION_CONSUMING: frozenset[DeliverableState] = frozenset(
    {_D.REVISION_REQUESTED, _D.REJECTED}
)


class DeliverableStateMachine:
    """
    State machine for the deliverable lifecycle.

    Any state string outside ``DeliverableState`` is rejected with
    ``InvalidStateError``; undefined transitions raise
    ``InvalidTransitionError``.
    """

    @staticmethod
    def parse_state(raw: str) -> DeliverableState:
        """Convert a raw string to a ``DeliverableState``."""
        return DeliverableState.parse(raw)

    @staticmethod
    def validate_transition(
        from_state: DeliverableState, to_state: DeliverableState
    ) -> bool:
        """
        Return ``True`` if the transition is valid.

        Raises ``InvalidTransitionError`` if the transition is undefined.
        """
        current = DeliverableState.parse(from_state)
        target = DeliverableState.parse(to_state)
        allowed = DELIVERABLE_TRANSITIONS[current]
        if target not in allowed:
            raise InvalidTransitionError(
                current.value,
                target.value,
                frozenset(s.value for s in allowed),
            )
        return True

    @staticmethod
    def get_allowed_transitions(state: DeliverableState) -> frozenset[DeliverableState]:
        """Return the set of valid next states for the given state."""
        return DELIVERABLE_TRANSITIONS[DeliverableState.parse(state)]

    @staticmethod
    def is_terminal(state: DeliverableState) -> bool:
        """Return ``True`` if the state is terminal (no outgoing transitions)."""
        return DeliverableState.parse(state) in TERMINAL_STATES

    @staticmethod
    def consumes_revision(
        from_state: DeliverableState, to_state: DeliverableState
    ) -> bool:
        """True when the move is a client decision that spends a revision."""
        return (
            DeliverableState.parse(from_state) == _D.AWAITING_APPROVAL
            and DeliverableState.parse(to_state) in _REVISION_CONSUMING
        )


def ensure_utc(value: datetime | None) -> datetime | None:
    """Read a timestamp without tzinfo as UTC; aware values pass through."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def final_files_expire_at(
    delivered_at: datetime, retention_days: int | None = None
) -> datetime:
    """
    Compute ``expires_at`` for a deliverable delivered at ``delivered_at``.

    The result is always timezone-aware; a naive ``delivered_at`` is read
    as UTC. Expiry only ends file access for non-admins; nothing is deleted.
    """
    if retention_days is None:
        retention_days = get_settings().final_file_retention_days
    return ensure_utc(delivered_at) + timedelta(days=retention_days)
