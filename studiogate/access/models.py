"""
studiogate — Input Records
===========================
Plain in-memory snapshots handed to the engine by its callers.

Records are frozen: the engine never mutates them and callers build a
fresh snapshot for every decision.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType

from studiogate.access.roles import Role, parse_role
from studiogate.core.exceptions import ModelError
from studiogate.workflow.deliverable_lifecycle import ensure_utc
from studiogate.workflow.states import DeliverableState, ProjectState


@dataclass(frozen=True)
class ProjectMembership:
    """A client's relationship to one project."""

    is_primary_contact: bool = False

    @classmethod
    def coerce(cls, project_id: str, raw: object) -> ProjectMembership:
        """
        Accept a ``ProjectMembership`` or a mapping keyed ``is_primary_contact``
        (or the portal's ``isPrimaryContact``).

        Raises ``ModelError`` for anything else.
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, Mapping):
            flag = raw.get("is_primary_contact", raw.get("isPrimaryContact", False))
            if isinstance(flag, bool):
                return cls(is_primary_contact=flag)
        raise ModelError(f"Invalid membership for project {project_id!r}: {raw!r}.")


@dataclass(frozen=True)
class User:
    """Actor requesting an action."""

    id: str
    role: Role
    name: str = ""
    project_team_memberships: Mapping[str, ProjectMembership] = field(
        default_factory=dict
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", parse_role(self.role))
        object.__setattr__(
            self,
            "project_team_memberships",
            MappingProxyType({
                project_id: ProjectMembership.coerce(project_id, membership)
                for project_id, membership in (self.project_team_memberships or {}).items()
            }),
        )


@dataclass(frozen=True)
class Task:
    """A project task. Assignees are user ids."""

    id: str
    assignee: str | None = None
    assignees: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "assignees", tuple(self.assignees or ()))


@dataclass(frozen=True)
class Deliverable:
    """A deliverable belonging to exactly one project."""

    id: str
    status: DeliverableState
    expires_at: datetime | None = None
    delivered_at: datetime | None = None
    revisions_consumed: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", DeliverableState.parse(self.status))
        # Naive timestamps are stored as UTC
        object.__setattr__(self, "expires_at", ensure_utc(self.expires_at))
        object.__setattr__(self, "delivered_at", ensure_utc(self.delivered_at))

    def is_expired(self, now: datetime) -> bool:
        """True once ``now`` is past ``expires_at``; never without an expiry."""
        return self.expires_at is not None and ensure_utc(now) > self.expires_at


@dataclass(frozen=True)
class Project:
    """Owning project of deliverables and tasks."""

    id: str
    status: ProjectState
    terms_accepted_at: datetime | None = None
    team: tuple[User, ...] = ()
    title: str = ""
    revision_count: int = 0
    max_revisions: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", ProjectState.parse(self.status))
        object.__setattr__(self, "terms_accepted_at", ensure_utc(self.terms_accepted_at))
        team = tuple(self.team or ())
        ids = [member.id for member in team]
        if len(ids) != len(set(ids)):
            raise ModelError(
                f"Project {self.id!r} team contains duplicate user ids.",
                project_id=self.id,
            )
        object.__setattr__(self, "team", team)

    @property
    def terms_accepted(self) -> bool:
        return self.terms_accepted_at is not None

    def has_member(self, user: User) -> bool:
        return any(member.id == user.id for member in self.team)


@dataclass(frozen=True)
class RevisionQuota:
    """Project-level revision allowance."""

    total: int
    used: int

    @property
    def remaining(self) -> int:
        return max(self.total - self.used, 0)

    @property
    def exhausted(self) -> bool:
        return self.remaining == 0


def revision_quota(project: Project) -> RevisionQuota:
    """Quota snapshot for display next to the revision request form."""
    return RevisionQuota(total=project.max_revisions, used=project.revision_count)
