"""
studiogate — Authorization Predicates
======================================
One boolean gate per guarded action. Callers load fresh records, ask the
gate, and only mutate on ``True``; on ``False`` they show
``explain_denial`` for the same action and inputs.

All gates are pure: no I/O, no caching, no mutation. Time-dependent gates
take an optional ``now`` so results are reproducible.
"""

from __future__ import annotations

from datetime import datetime

from studiogate.access.models import Deliverable, Project, Task, User
from studiogate.access.rules import AccessContext, Action, decide


def _allowed(
    action: Action,
    user: User,
    project: Project | None,
    *,
    deliverable: Deliverable | None = None,
    task: Task | None = None,
    now: datetime | None = None,
) -> bool:
    ctx = AccessContext.build(
        user, project, deliverable=deliverable, task=task, now=now
    )
    return decide(action, ctx).allowed


# ── Visibility ──────────────────────────────────────────────────────────


def can_view(user: User, deliverable: Deliverable, project: Project) -> bool:
    """
    Archived projects: super admin only. Draft projects: super admin or
    PM only. Internal team otherwise always; clients once the deliverable
    is ready for review (beta_ready onwards, excluding rework states).
    """
    return _allowed(Action.VIEW, user, project, deliverable=deliverable)


def can_view_beta_files(user: User, deliverable: Deliverable, project: Project) -> bool:
    """``can_view`` plus the watermarked preview window (beta_ready → approved)."""
    return _allowed(Action.VIEW_BETA_FILES, user, project, deliverable=deliverable)


def can_access_final_files(
    user: User,
    deliverable: Deliverable,
    project: Project,
    *,
    now: datetime | None = None,
) -> bool:
    """
    Final files need ``final_delivered``. After ``expires_at`` only a
    super admin keeps access; outside active/completed projects likewise.
    Otherwise falls through to ``can_view``.
    """
    return _allowed(
        Action.ACCESS_FINAL_FILES, user, project, deliverable=deliverable, now=now
    )


def can_comment(user: User, deliverable: Deliverable, project: Project) -> bool:
    return _allowed(Action.COMMENT, user, project, deliverable=deliverable)


# ── Uploads ─────────────────────────────────────────────────────────────


def can_upload_beta(user: User, project: Project, task: Task | None = None) -> bool:
    """Team members may only upload to tasks they are assigned to."""
    return _allowed(Action.UPLOAD_BETA, user, project, task=task)


def can_upload_final(user: User, project: Project) -> bool:
    return _allowed(Action.UPLOAD_FINAL, user, project)


# ── Client decisions ────────────────────────────────────────────────────


def can_approve(user: User, deliverable: Deliverable, project: Project) -> bool:
    """
    Primary contact, deliverable awaiting approval, project not on hold,
    archived or awaiting payment, and terms accepted. All must hold.
    """
    return _allowed(Action.APPROVE, user, project, deliverable=deliverable)


def can_request_revision(user: User, deliverable: Deliverable, project: Project) -> bool:
    """As ``can_approve`` but still allowed while a payment is pending."""
    return _allowed(Action.REQUEST_REVISION, user, project, deliverable=deliverable)


def can_view_approval_history(user: User, project: Project) -> bool:
    return _allowed(Action.VIEW_APPROVAL_HISTORY, user, project)


# ── Deliverable management ──────────────────────────────────────────────


def can_edit(user: User, deliverable: Deliverable, project: Project) -> bool:
    """Locked for everyone while awaiting approval."""
    return _allowed(Action.EDIT_DELIVERABLE, user, project, deliverable=deliverable)


def can_create_deliverable(user: User, project: Project) -> bool:
    return _allowed(Action.CREATE_DELIVERABLE, user, project)


def can_delete_deliverable(user: User, project: Project) -> bool:
    return _allowed(Action.DELETE_DELIVERABLE, user, project)


# ── Tasks ───────────────────────────────────────────────────────────────


def can_edit_task(user: User, task: Task | None = None) -> bool:
    return _allowed(Action.EDIT_TASK, user, None, task=task)


def can_create_task(user: User, project: Project) -> bool:
    return _allowed(Action.CREATE_TASK, user, project)


def can_delete_task(user: User, project: Project) -> bool:
    return _allowed(Action.DELETE_TASK, user, project)


# ── Project files & project lifecycle ───────────────────────────────────


def can_upload_project_file(user: User, project: Project) -> bool:
    return _allowed(Action.UPLOAD_PROJECT_FILE, user, project)


def can_delete_project_file(user: User, project: Project) -> bool:
    return _allowed(Action.DELETE_PROJECT_FILE, user, project)


def can_archive_project(user: User, project: Project) -> bool:
    return _allowed(Action.ARCHIVE_PROJECT, user, project)


def can_delete_project(user: User, project: Project) -> bool:
    """Super admin only, and only once the project is archived."""
    return _allowed(Action.DELETE_PROJECT, user, project)


# ── Portal-wide ─────────────────────────────────────────────────────────


def can_view_all_projects(user: User) -> bool:
    """Internal team sees every project; clients only their own."""
    return _allowed(Action.VIEW_ALL_PROJECTS, user, None)


def can_manage_team(user: User) -> bool:
    return _allowed(Action.MANAGE_TEAM, user, None)


def can_access_settings(user: User) -> bool:
    return _allowed(Action.ACCESS_SETTINGS, user, None)
