"""
studiogate — Test Fixtures
===========================
Shared users, project/deliverable factories and a fixed clock.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from studiogate.access.models import (
    Deliverable,
    Project,
    ProjectMembership,
    Task,
    User,
)
from studiogate.access.roles import Role
from studiogate.workflow.states import DeliverableState, ProjectState

PROJECT_ID = "proj-1"
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
TERMS_ACCEPTED_AT = NOW - timedelta(days=30)


@pytest.fixture(autouse=True)
def _clear_settings_cache(monkeypatch):
    """Ensure a fresh Settings instance for each test."""
    from studiogate.core.config import get_settings

    for name in (
        "STUDIOGATE_DEFAULT_PRIMARY_CONTACT_WHEN_UNSET",
        "STUDIOGATE_FINAL_FILE_RETENTION_DAYS",
        "STUDIOGATE_LOG_FORMAT",
        "STUDIOGATE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ── Users ───────────────────────────────────────────────────────────────


def make_super_admin() -> User:
    return User(id="u-admin", role=Role.SUPER_ADMIN, name="Asha Admin")


def make_project_manager() -> User:
    return User(id="u-pm", role=Role.PROJECT_MANAGER, name="Pat Manager")


def make_team_member() -> User:
    return User(id="u-team", role=Role.TEAM_MEMBER, name="Tay Editor")


def make_client_primary() -> User:
    return User(
        id="u-client-pc",
        role=Role.CLIENT,
        name="Casey Client",
        project_team_memberships={PROJECT_ID: ProjectMembership(is_primary_contact=True)},
    )


def make_client_member() -> User:
    return User(
        id="u-client-tm",
        role=Role.CLIENT,
        name="Jordan Client",
        project_team_memberships={PROJECT_ID: ProjectMembership(is_primary_contact=False)},
    )


def all_users() -> dict[str, User]:
    return {
        "super_admin": make_super_admin(),
        "project_manager": make_project_manager(),
        "team_member": make_team_member(),
        "client_primary": make_client_primary(),
        "client_member": make_client_member(),
    }


@pytest.fixture
def super_admin() -> User:
    return make_super_admin()


@pytest.fixture
def project_manager() -> User:
    return make_project_manager()


@pytest.fixture
def team_member() -> User:
    return make_team_member()


@pytest.fixture
def client_primary() -> User:
    return make_client_primary()


@pytest.fixture
def client_member() -> User:
    return make_client_member()


@pytest.fixture
def client_unset() -> User:
    """Client whose membership data has not been loaded."""
    return User(id="u-client-new", role=Role.CLIENT)


# ── Records ─────────────────────────────────────────────────────────────


def make_project(
    status: ProjectState | str = ProjectState.ACTIVE,
    *,
    terms_accepted: bool = True,
    project_id: str = PROJECT_ID,
) -> Project:
    return Project(
        id=project_id,
        status=status,
        terms_accepted_at=TERMS_ACCEPTED_AT if terms_accepted else None,
        title="Spring Launch Film",
    )


def make_deliverable(
    status: DeliverableState | str = DeliverableState.AWAITING_APPROVAL,
    *,
    expires_at: datetime | None = None,
) -> Deliverable:
    return Deliverable(id="dlv-1", status=status, expires_at=expires_at)


def make_task(*assignees: str, assignee: str | None = None) -> Task:
    return Task(id="task-1", assignee=assignee, assignees=assignees)


# ── Logging ─────────────────────────────────────────────────────────────


@pytest.fixture
def log_records():
    """
    Configure JSON logging into an in-memory buffer; return a reader that
    parses and drains the lines written so far.
    """
    import io
    import json
    import logging

    import structlog

    from studiogate.core.logging import configure_logging

    buffer = io.StringIO()
    configure_logging()
    for handler in logging.getLogger().handlers:
        handler.setStream(buffer)

    def read() -> list[dict]:
        lines = buffer.getvalue().splitlines()
        buffer.seek(0)
        buffer.truncate()
        return [json.loads(line) for line in lines if line.strip()]

    yield read
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()
