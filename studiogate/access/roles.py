"""
studiogate — Roles & Relationship Helpers
==========================================
The only place role and membership facts are derived. Every rule in the
access table goes through these helpers rather than comparing role strings.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from studiogate.core.config import get_settings
from studiogate.core.exceptions import InvalidRoleError

if TYPE_CHECKING:
    from studiogate.access.models import Task, User


class Role(StrEnum):
    """The four portal roles. Assigned outside the engine."""

    SUPER_ADMIN = "super_admin"
    PROJECT_MANAGER = "project_manager"
    TEAM_MEMBER = "team_member"
    CLIENT = "client"


INTERNAL_ROLES: frozenset[Role] = frozenset(
    {Role.SUPER_ADMIN, Role.PROJECT_MANAGER, Role.TEAM_MEMBER}
)

_ROLE_LABELS: dict[Role, str] = {
    Role.SUPER_ADMIN: "Super Admin",
    Role.PROJECT_MANAGER: "Project Manager",
    Role.TEAM_MEMBER: "Team Member",
    Role.CLIENT: "Client",
}


def parse_role(raw: str | Role) -> Role:
    """
    Convert a raw string to a ``Role``.

    Raises ``InvalidRoleError`` if it is not one of the four roles.
    """
    if isinstance(raw, Role):
        return raw
    try:
        return Role(raw)
    except ValueError:
        raise InvalidRoleError(raw) from None


def role_label(role: Role) -> str:
    """Human-readable role name."""
    return _ROLE_LABELS[role]


# ── Role helpers ────────────────────────────────────────────────────────


def is_internal_team(user: User) -> bool:
    """Super admin, project manager or team member."""
    return user.role in INTERNAL_ROLES


def is_client(user: User) -> bool:
    return user.role == Role.CLIENT


def is_super_admin(user: User) -> bool:
    return user.role == Role.SUPER_ADMIN


def is_project_manager(user: User) -> bool:
    return user.role == Role.PROJECT_MANAGER


def is_admin_or_pm(user: User) -> bool:
    return user.role in (Role.SUPER_ADMIN, Role.PROJECT_MANAGER)


def is_team_member(user: User) -> bool:
    return user.role == Role.TEAM_MEMBER


# ── Relationship helpers ────────────────────────────────────────────────


def is_primary_contact(
    user: User,
    project_id: str,
    *,
    default_when_unset: bool | None = None,
) -> bool:
    """
    Return ``True`` if ``user`` is the client primary contact of the project.

    Non-clients are never primary contacts. A client with no membership
    data at all falls back to ``default_when_unset``, which defaults to the
    ``default_primary_contact_when_unset`` setting.
    """
    if not is_client(user):
        return False

    if not user.project_team_memberships:
        if default_when_unset is None:
            default_when_unset = get_settings().default_primary_contact_when_unset
        return default_when_unset

    membership = user.project_team_memberships.get(project_id)
    return membership is not None and membership.is_primary_contact is True


def is_assigned_to_task(user: User, task: Task | None) -> bool:
    """Exact id match against the task's single assignee or assignee list."""
    if task is None:
        return False
    if task.assignee is not None and task.assignee == user.id:
        return True
    return user.id in task.assignees
