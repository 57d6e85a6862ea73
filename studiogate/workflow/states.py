"""
studiogate — Lifecycle States
==============================
Authoritative status sets for projects and deliverables.

Statuses are stored in snake_case (``on_hold``) while the portal shows
display labels (``On Hold``). Both forms parse to the same member; the
legacy storage value ``cancelled`` maps to ``archived``.
"""

from __future__ import annotations

from enum import StrEnum

from studiogate.core.exceptions import InvalidStateError


class ProjectState(StrEnum):
    """Project lifecycle states. Deletion is a removal, not a state."""

    DRAFT = "draft"
    ACTIVE = "active"
    IN_REVIEW = "in_review"
    AWAITING_PAYMENT = "awaiting_payment"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    ARCHIVED = "archived"

    @property
    def label(self) -> str:
        """Display label shown in the portal."""
        return _PROJECT_LABELS[self]

    @classmethod
    def parse(cls, raw: str | ProjectState) -> ProjectState:
        """
        Convert a storage value or display label to a ``ProjectState``.

        Raises ``InvalidStateError`` for anything else.
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            state = _PROJECT_ALIASES.get(raw.strip().lower())
            if state is not None:
                return state
        raise InvalidStateError(raw, "project")


_PROJECT_LABELS: dict[ProjectState, str] = {
    ProjectState.DRAFT: "Draft",
    ProjectState.ACTIVE: "Active",
    ProjectState.IN_REVIEW: "In Review",
    ProjectState.AWAITING_PAYMENT: "Awaiting Payment",
    ProjectState.ON_HOLD: "On Hold",
    ProjectState.COMPLETED: "Completed",
    ProjectState.ARCHIVED: "Archived",
}

_PROJECT_ALIASES: dict[str, ProjectState] = {
    **{s.value: s for s in ProjectState},
    **{label.lower(): s for s, label in _PROJECT_LABELS.items()},
    "cancelled": ProjectState.ARCHIVED,
}


class DeliverableState(StrEnum):
    """Deliverable lifecycle states."""

    PENDING = "pending"                          # internal only
    IN_PROGRESS = "in_progress"                  # internal only
    BETA_READY = "beta_ready"                    # watermarked preview visible
    AWAITING_APPROVAL = "awaiting_approval"      # locked, client decides
    APPROVED = "approved"
    PAYMENT_PENDING = "payment_pending"          # final files withheld
    FINAL_DELIVERED = "final_delivered"          # retention clock running
    REJECTED = "rejected"
    REVISION_REQUESTED = "revision_requested"

    @classmethod
    def parse(cls, raw: str | DeliverableState) -> DeliverableState:
        """
        Convert a raw string to a ``DeliverableState``.

        Raises ``InvalidStateError`` if the string doesn't match any state.
        """
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw.strip().lower())
        except (AttributeError, ValueError):
            raise InvalidStateError(raw, "deliverable") from None


# ── Status groups consulted by the access rules ─────────────────────────

CLIENT_VISIBLE_STATES: frozenset[DeliverableState] = frozenset({
    DeliverableState.BETA_READY,
    DeliverableState.AWAITING_APPROVAL,
    DeliverableState.APPROVED,
    DeliverableState.PAYMENT_PENDING,
    DeliverableState.FINAL_DELIVERED,
})

BETA_VIEWABLE_STATES: frozenset[DeliverableState] = frozenset({
    DeliverableState.BETA_READY,
    DeliverableState.AWAITING_APPROVAL,
    DeliverableState.APPROVED,
})

OPERATIONAL_PROJECT_STATES: frozenset[ProjectState] = frozenset({
    ProjectState.DRAFT,
    ProjectState.ACTIVE,
    ProjectState.IN_REVIEW,
    ProjectState.AWAITING_PAYMENT,
    ProjectState.ON_HOLD,
})
