"""
Input Record Tests
===================
Validates coercion of status strings, team uniqueness, expiry and the
revision quota snapshot.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import NOW, make_client_member, make_team_member
from studiogate.access.models import (
    Deliverable,
    Project,
    ProjectMembership,
    User,
    revision_quota,
)
from studiogate.access.roles import is_primary_contact
from studiogate.core.exceptions import InvalidStateError, ModelError
from studiogate.workflow.states import DeliverableState, ProjectState


class TestProject:

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("active", ProjectState.ACTIVE),
            ("On Hold", ProjectState.ON_HOLD),
            ("Awaiting Payment", ProjectState.AWAITING_PAYMENT),
            ("cancelled", ProjectState.ARCHIVED),
        ],
    )
    def test_status_coerced(self, raw, expected):
        assert Project(id="p", status=raw).status is expected

    def test_unknown_status_rejected(self):
        with pytest.raises(InvalidStateError):
            Project(id="p", status="paused")

    def test_duplicate_team_ids_rejected(self):
        member = make_team_member()
        with pytest.raises(ModelError) as exc_info:
            Project(id="p", status="active", team=(member, member))
        assert exc_info.value.error_code == "MODEL_ERROR"
        assert exc_info.value.project_id == "p"

    def test_naive_terms_timestamp_read_as_utc(self):
        project = Project(id="p", status="active", terms_accepted_at=datetime(2026, 1, 5))
        assert project.terms_accepted_at == datetime(2026, 1, 5, tzinfo=timezone.utc)

    def test_team_membership_lookup(self):
        member = make_team_member()
        project = Project(id="p", status="active", team=[member])
        assert project.team == (member,)
        assert project.has_member(member) is True
        assert project.has_member(make_client_member()) is False

    def test_terms_accepted_flag(self):
        assert Project(id="p", status="active").terms_accepted is False
        assert Project(id="p", status="active", terms_accepted_at=NOW).terms_accepted is True


class TestDeliverable:

    def test_status_coerced(self):
        assert Deliverable(id="d", status="beta_ready").status is DeliverableState.BETA_READY

    def test_unknown_status_rejected(self):
        with pytest.raises(InvalidStateError):
            Deliverable(id="d", status="shipped")

    def test_no_expiry_never_expires(self):
        assert Deliverable(id="d", status="final_delivered").is_expired(NOW) is False

    def test_expiry_is_strictly_after(self):
        dlv = Deliverable(id="d", status="final_delivered", expires_at=NOW)
        assert dlv.is_expired(NOW) is False
        assert dlv.is_expired(NOW + timedelta(seconds=1)) is True

    def test_naive_timestamps_stored_as_utc(self):
        dlv = Deliverable(
            id="d",
            status="final_delivered",
            expires_at=datetime(2027, 1, 1),
            delivered_at=datetime(2026, 1, 1),
        )
        assert dlv.expires_at == datetime(2027, 1, 1, tzinfo=timezone.utc)
        assert dlv.delivered_at == datetime(2026, 1, 1, tzinfo=timezone.utc)

    def test_naive_now_compares_with_stored_expiry(self):
        dlv = Deliverable(id="d", status="final_delivered", expires_at=datetime(2027, 1, 1))
        assert dlv.is_expired(datetime(2027, 1, 2)) is True
        assert dlv.is_expired(datetime(2026, 12, 31, tzinfo=timezone.utc)) is False


class TestUserMemberships:

    @pytest.mark.parametrize("raw,expected", [
        (ProjectMembership(is_primary_contact=True), True),
        ({"is_primary_contact": True}, True),
        ({"isPrimaryContact": True}, True),
        ({"isPrimaryContact": False}, False),
        ({}, False),
    ])
    def test_membership_shapes_coerced(self, raw, expected):
        user = User(id="c", role="client", project_team_memberships={"p": raw})
        membership = user.project_team_memberships["p"]
        assert isinstance(membership, ProjectMembership)
        assert membership.is_primary_contact is expected
        assert is_primary_contact(user, "p") is expected

    @pytest.mark.parametrize("raw", [
        True,
        "primary",
        None,
        {"isPrimaryContact": "yes"},
        {"is_primary_contact": 1},
    ])
    def test_malformed_membership_rejected(self, raw):
        with pytest.raises(ModelError) as exc_info:
            User(id="c", role="client", project_team_memberships={"p": raw})
        assert "'p'" in exc_info.value.message


class TestRevisionQuota:

    def test_remaining(self):
        quota = revision_quota(Project(id="p", status="active", revision_count=1, max_revisions=3))
        assert quota.total == 3
        assert quota.used == 1
        assert quota.remaining == 2
        assert quota.exhausted is False

    def test_overdrawn_quota_clamps_at_zero(self):
        quota = revision_quota(Project(id="p", status="active", revision_count=5, max_revisions=3))
        assert quota.remaining == 0
        assert quota.exhausted is True
