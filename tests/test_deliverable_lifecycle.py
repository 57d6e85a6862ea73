"""
Deliverable State Machine Tests
================================
Validates the deliverable lifecycle whitelist, terminal state, revision
consumption and the final-file expiry computation.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from studiogate.core.exceptions import InvalidStateError, InvalidTransitionError
from studiogate.workflow.deliverable_lifecycle import (
    DELIVERABLE_TRANSITIONS,
    TERMINAL_STATES,
    DeliverableStateMachine,
    ensure_utc,
    final_files_expire_at,
)
from studiogate.workflow.states import DeliverableState

D = DeliverableState


class TestCompleteness:

    def test_nine_states(self):
        assert len(DeliverableState) == 9

    def test_transition_map_covers_all_states(self):
        assert set(DELIVERABLE_TRANSITIONS) == set(DeliverableState)

    def test_only_final_delivered_is_terminal(self):
        assert TERMINAL_STATES == frozenset({D.FINAL_DELIVERED})


class TestTransitions:

    @pytest.mark.parametrize(
        "from_state,to_state",
        [
            (D.PENDING, D.IN_PROGRESS),
            (D.IN_PROGRESS, D.BETA_READY),
            (D.BETA_READY, D.AWAITING_APPROVAL),
            (D.AWAITING_APPROVAL, D.APPROVED),
            (D.AWAITING_APPROVAL, D.REVISION_REQUESTED),
            (D.AWAITING_APPROVAL, D.REJECTED),
            (D.REVISION_REQUESTED, D.IN_PROGRESS),  # rework
            (D.REJECTED, D.IN_PROGRESS),  # rework
            (D.APPROVED, D.PAYMENT_PENDING),
            (D.PAYMENT_PENDING, D.FINAL_DELIVERED),
        ],
    )
    def test_valid_transition_accepted(self, from_state, to_state):
        assert DeliverableStateMachine.validate_transition(from_state, to_state) is True

    @pytest.mark.parametrize(
        "from_state,to_state",
        [
            (D.PENDING, D.FINAL_DELIVERED),
            (D.BETA_READY, D.APPROVED),
            (D.APPROVED, D.FINAL_DELIVERED),  # payment cannot be skipped
            (D.FINAL_DELIVERED, D.IN_PROGRESS),
            (D.AWAITING_APPROVAL, D.IN_PROGRESS),
        ],
    )
    def test_invalid_transitions_rejected(self, from_state, to_state):
        with pytest.raises(InvalidTransitionError) as exc_info:
            DeliverableStateMachine.validate_transition(from_state, to_state)
        assert exc_info.value.from_state == from_state.value
        assert exc_info.value.to_state == to_state.value

    def test_string_states_accepted(self):
        assert DeliverableStateMachine.validate_transition("beta_ready", "awaiting_approval")

    def test_unknown_state_rejected(self):
        with pytest.raises(InvalidStateError):
            DeliverableStateMachine.parse_state("archived")

    def test_terminal(self):
        assert DeliverableStateMachine.is_terminal(D.FINAL_DELIVERED) is True
        assert DeliverableStateMachine.is_terminal(D.APPROVED) is False
        assert DeliverableStateMachine.get_allowed_transitions(D.FINAL_DELIVERED) == frozenset()


class TestRevisionConsumption:

    def test_revision_request_consumes(self):
        assert DeliverableStateMachine.consumes_revision(D.AWAITING_APPROVAL, D.REVISION_REQUESTED)
        assert DeliverableStateMachine.consumes_revision(D.AWAITING_APPROVAL, D.REJECTED)

    def test_approval_does_not_consume(self):
        assert not DeliverableStateMachine.consumes_revision(D.AWAITING_APPROVAL, D.APPROVED)

    def test_rework_does_not_consume(self):
        assert not DeliverableStateMachine.consumes_revision(D.REVISION_REQUESTED, D.IN_PROGRESS)


class TestExpiry:

    def test_default_retention_is_365_days(self):
        delivered = datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert final_files_expire_at(delivered) == datetime(2027, 1, 1, tzinfo=timezone.utc)

    def test_retention_override(self):
        delivered = datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert final_files_expire_at(delivered, retention_days=30) == datetime(
            2026, 1, 31, tzinfo=timezone.utc
        )

    def test_retention_from_settings(self, monkeypatch):
        from studiogate.core.config import get_settings

        monkeypatch.setenv("STUDIOGATE_FINAL_FILE_RETENTION_DAYS", "10")
        get_settings.cache_clear()
        delivered = datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert final_files_expire_at(delivered) == datetime(2026, 1, 11, tzinfo=timezone.utc)

    def test_naive_delivery_time_read_as_utc(self):
        expires = final_files_expire_at(datetime(2026, 1, 1), retention_days=1)
        assert expires == datetime(2026, 1, 2, tzinfo=timezone.utc)
        assert expires.tzinfo is timezone.utc

    def test_aware_delivery_time_keeps_its_zone(self):
        zone = timezone(timedelta(hours=2))
        expires = final_files_expire_at(datetime(2026, 1, 1, tzinfo=zone), retention_days=1)
        assert expires.tzinfo is zone


class TestEnsureUtc:

    def test_none_passes_through(self):
        assert ensure_utc(None) is None

    def test_naive_becomes_utc(self):
        assert ensure_utc(datetime(2026, 5, 1, 9, 30)) == datetime(
            2026, 5, 1, 9, 30, tzinfo=timezone.utc
        )

    def test_aware_unchanged(self):
        value = datetime(2026, 5, 1, 9, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert ensure_utc(value) is value
