"""
studiogate — Access Rule Table
===============================
Table-driven authorization engine.

Each guarded action maps to an ordered tuple of rules. A rule either
ALLOWs or DENYs (with a user-facing reason) when its condition matches;
``Rule.requires`` delegates to another action and forwards its denial.
The first matching rule decides. If none matches, the action's fallback
reason applies, so the engine always fails closed.

Predicates and ``explain_denial`` are both read off ``decide``; they
cannot disagree about an outcome.

Usage:
    ctx = AccessContext.build(user, project, deliverable=deliverable)
    decision = decide(Action.APPROVE, ctx)
    if not decision.allowed:
        show(decision.reason)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum

from studiogate.access.models import Deliverable, Project, Task, User
from studiogate.access.roles import (
    is_admin_or_pm,
    is_assigned_to_task,
    is_client,
    is_internal_team,
    is_primary_contact,
    is_super_admin,
    is_team_member,
)
from studiogate.core.config import get_settings
from studiogate.core.exceptions import UnknownActionError
from studiogate.workflow.deliverable_lifecycle import ensure_utc
from studiogate.workflow.states import (
    BETA_VIEWABLE_STATES,
    CLIENT_VISIBLE_STATES,
    DeliverableState,
    ProjectState,
)


# ── Actions ─────────────────────────────────────────────────────────────


class Action(StrEnum):
    """Every guarded action the portal asks about."""

    VIEW = "view"
    VIEW_BETA_FILES = "view_beta_files"
    ACCESS_FINAL_FILES = "access_final_files"
    COMMENT = "comment"
    UPLOAD_BETA = "upload_beta"
    UPLOAD_FINAL = "upload_final"
    APPROVE = "approve"
    REQUEST_REVISION = "request_revision"
    VIEW_APPROVAL_HISTORY = "view_approval_history"
    EDIT_DELIVERABLE = "edit_deliverable"
    CREATE_DELIVERABLE = "create_deliverable"
    DELETE_DELIVERABLE = "delete_deliverable"
    EDIT_TASK = "edit_task"
    CREATE_TASK = "create_task"
    DELETE_TASK = "delete_task"
    UPLOAD_PROJECT_FILE = "upload_project_file"
    DELETE_PROJECT_FILE = "delete_project_file"
    ARCHIVE_PROJECT = "archive_project"
    DELETE_PROJECT = "delete_project"
    VIEW_ALL_PROJECTS = "view_all_projects"
    MANAGE_TEAM = "manage_team"
    ACCESS_SETTINGS = "access_settings"

    @classmethod
    def parse(cls, raw: str | Action) -> Action:
        """
        Convert an action name (or a short portal alias) to an ``Action``.

        Raises ``UnknownActionError`` for anything else.
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            key = raw.strip().lower()
            if key in _ACTION_ALIASES:
                return _ACTION_ALIASES[key]
            try:
                return cls(key)
            except ValueError:
                pass
        raise UnknownActionError(raw)


# Short names used by the portal's UI handlers
_ACTION_ALIASES: dict[str, Action] = {
    "reject": Action.REQUEST_REVISION,
    "access_final": Action.ACCESS_FINAL_FILES,
    "view_history": Action.VIEW_APPROVAL_HISTORY,
    "edit": Action.EDIT_DELIVERABLE,
    "create": Action.CREATE_DELIVERABLE,
    "delete": Action.DELETE_DELIVERABLE,
}


class Effect(StrEnum):
    ALLOW = "ALLOW"
    DENY = "DENY"


# ── Data Objects ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AccessContext:
    """Snapshot of everything a rule may consult for one decision."""

    user: User
    project: Project | None
    deliverable: Deliverable | None = None
    task: Task | None = None
    now: datetime | None = None
    default_primary_contact: bool = True

    @classmethod
    def build(
        cls,
        user: User,
        project: Project | None,
        *,
        deliverable: Deliverable | None = None,
        task: Task | None = None,
        now: datetime | None = None,
    ) -> AccessContext:
        """Assemble a context, reading the primary-contact fallback setting."""
        return cls(
            user=user,
            project=project,
            deliverable=deliverable,
            task=task,
            now=ensure_utc(now) if now is not None else datetime.now(timezone.utc),
            default_primary_contact=get_settings().default_primary_contact_when_unset,
        )

    @property
    def project_status(self) -> ProjectState | None:
        return self.project.status if self.project is not None else None

    @property
    def deliverable_status(self) -> DeliverableState | None:
        return self.deliverable.status if self.deliverable is not None else None

    @property
    def primary_contact(self) -> bool:
        if self.project is None:
            return False
        return is_primary_contact(
            self.user,
            self.project.id,
            default_when_unset=self.default_primary_contact,
        )

    @property
    def expired(self) -> bool:
        if self.deliverable is None:
            return False
        now = self.now if self.now is not None else datetime.now(timezone.utc)
        return self.deliverable.is_expired(now)


Condition = Callable[[AccessContext], bool]


def _always(ctx: AccessContext) -> bool:
    return True


@dataclass(frozen=True)
class Rule:
    """One row of an action's rule list."""

    name: str
    effect: Effect
    when: Condition = _always
    reason: str | None = None
    requires: Action | None = None

    @staticmethod
    def allow(name: str, when: Condition = _always) -> Rule:
        return Rule(name=name, effect=Effect.ALLOW, when=when)

    @staticmethod
    def deny(name: str, when: Condition, reason: str) -> Rule:
        return Rule(name=name, effect=Effect.DENY, when=when, reason=reason)

    @staticmethod
    def require(action: Action) -> Rule:
        """Deny with ``action``'s reason unless ``action`` is allowed."""
        return Rule(name=f"requires_{action.value}", effect=Effect.DENY, requires=action)


@dataclass(frozen=True)
class AccessDecision:
    """Result of evaluating one action."""

    allowed: bool
    action: Action
    reason: str | None = None
    rule: str = ""


# ── Shared conditions ───────────────────────────────────────────────────


def _status_is(*states: ProjectState) -> Condition:
    def check(ctx: AccessContext) -> bool:
        return ctx.project_status in states
    return check


def _status_is_not_super_admin(*states: ProjectState) -> Condition:
    def check(ctx: AccessContext) -> bool:
        return ctx.project_status in states and not is_super_admin(ctx.user)
    return check


def _is_internal(ctx: AccessContext) -> bool:
    return is_internal_team(ctx.user)


def _is_client(ctx: AccessContext) -> bool:
    return is_client(ctx.user)


def _is_admin_or_pm(ctx: AccessContext) -> bool:
    return is_admin_or_pm(ctx.user)


def _is_super_admin(ctx: AccessContext) -> bool:
    return is_super_admin(ctx.user)


def _is_team_member(ctx: AccessContext) -> bool:
    return is_team_member(ctx.user)


def _deliverable_missing(ctx: AccessContext) -> bool:
    return ctx.deliverable is None


def _not_awaiting_approval(ctx: AccessContext) -> bool:
    return ctx.deliverable_status != DeliverableState.AWAITING_APPROVAL


def _terms_missing(ctx: AccessContext) -> bool:
    return ctx.project is None or not ctx.project.terms_accepted


# ── Reasons ─────────────────────────────────────────────────────────────

GENERIC_DENIAL = "Permission denied"
PROJECT_MISSING = "Project information not available"
DELIVERABLE_MISSING = "Deliverable information not available"

PROJECT_ARCHIVED = "Project is archived"
PROJECT_DRAFT = "Project is in draft status"
PROJECT_ON_HOLD = "Project is on hold"
PROJECT_COMPLETED = "Project is completed"
PAYMENT_REQUIRED = "Payment is required before approving new deliverables"
NOT_AWAITING_APPROVAL = "Deliverable must be awaiting approval"
LOCKED_DURING_APPROVAL = "Deliverable is locked during approval"
CLIENTS_CANNOT_UPLOAD = "Clients cannot upload files"

_deliverable_required = Rule.deny(
    "deliverable_missing", _deliverable_missing, DELIVERABLE_MISSING
)
_on_hold_gate = Rule.deny(
    "project_on_hold",
    _status_is_not_super_admin(ProjectState.ON_HOLD),
    PROJECT_ON_HOLD,
)
_archived_gate = Rule.deny(
    "project_archived",
    _status_is_not_super_admin(ProjectState.ARCHIVED),
    PROJECT_ARCHIVED,
)


# ── Rule Table ──────────────────────────────────────────────────────────

ACTION_RULES: dict[Action, tuple[Rule, ...]] = {
    Action.VIEW: (
        _deliverable_required,
        _archived_gate,
        Rule.allow("archived_super_admin", _status_is(ProjectState.ARCHIVED)),
        Rule.deny(
            "project_draft",
            lambda c: c.project_status == ProjectState.DRAFT and not is_admin_or_pm(c.user),
            PROJECT_DRAFT,
        ),
        Rule.allow("draft_admin_or_pm", _status_is(ProjectState.DRAFT)),
        Rule.allow("internal_team", _is_internal),
        Rule.allow(
            "client_review_window",
            lambda c: is_client(c.user) and c.deliverable_status in CLIENT_VISIBLE_STATES,
        ),
        Rule.deny(
            "client_not_ready",
            _is_client,
            "Deliverable is not yet ready for client review",
        ),
    ),
    Action.VIEW_BETA_FILES: (
        _deliverable_required,
        Rule.require(Action.VIEW),
        Rule.deny(
            "beta_window_closed",
            lambda c: c.deliverable_status not in BETA_VIEWABLE_STATES,
            "Beta files are only available while the deliverable is in review",
        ),
        Rule.allow("beta_window_open"),
    ),
    Action.ACCESS_FINAL_FILES: (
        _deliverable_required,
        Rule.deny(
            "not_final_delivered",
            lambda c: c.deliverable_status != DeliverableState.FINAL_DELIVERED,
            "Final files not yet delivered",
        ),
        Rule.deny(
            "files_expired",
            lambda c: c.expired and not is_super_admin(c.user),
            "Final files have expired after the post-delivery retention period",
        ),
        Rule.allow("expired_super_admin", lambda c: c.expired),
        Rule.deny(
            "project_not_open_for_delivery",
            lambda c: (
                c.project_status not in (ProjectState.ACTIVE, ProjectState.COMPLETED)
                and not is_super_admin(c.user)
            ),
            "Final files are only available on active or completed projects",
        ),
        Rule.allow(
            "closed_project_super_admin",
            lambda c: c.project_status not in (ProjectState.ACTIVE, ProjectState.COMPLETED),
        ),
        Rule.require(Action.VIEW),
        Rule.allow("final_files_released"),
    ),
    Action.COMMENT: (
        _deliverable_required,
        Rule.require(Action.VIEW),
        Rule.allow("viewer_can_comment"),
    ),
    Action.UPLOAD_BETA: (
        _on_hold_gate,
        _archived_gate,
        Rule.allow(
            "paused_project_super_admin",
            _status_is(ProjectState.ON_HOLD, ProjectState.ARCHIVED),
        ),
        Rule.allow("admin_or_pm", _is_admin_or_pm),
        Rule.allow(
            "assigned_team_member",
            lambda c: is_team_member(c.user) and is_assigned_to_task(c.user, c.task),
        ),
        Rule.deny(
            "team_member_not_assigned",
            _is_team_member,
            "You can only upload to tasks you are assigned to",
        ),
        Rule.deny("client_upload", _is_client, CLIENTS_CANNOT_UPLOAD),
    ),
    Action.UPLOAD_FINAL: (
        _on_hold_gate,
        _archived_gate,
        Rule.allow(
            "paused_project_super_admin",
            _status_is(ProjectState.ON_HOLD, ProjectState.ARCHIVED),
        ),
        Rule.allow("admin_or_pm", _is_admin_or_pm),
        Rule.deny(
            "team_member_final_upload",
            _is_team_member,
            "Only project managers and admins can upload final files",
        ),
        Rule.deny("client_upload", _is_client, CLIENTS_CANNOT_UPLOAD),
    ),
    Action.APPROVE: (
        _deliverable_required,
        Rule.deny(
            "not_client",
            lambda c: not is_client(c.user),
            "Only clients can approve deliverables",
        ),
        Rule.deny(
            "not_primary_contact",
            lambda c: not c.primary_contact,
            "Only the Primary Contact can approve deliverables",
        ),
        Rule.deny("not_awaiting_approval", _not_awaiting_approval, NOT_AWAITING_APPROVAL),
        Rule.deny("project_on_hold", _status_is(ProjectState.ON_HOLD), PROJECT_ON_HOLD),
        Rule.deny("project_archived", _status_is(ProjectState.ARCHIVED), PROJECT_ARCHIVED),
        Rule.deny(
            "awaiting_payment",
            _status_is(ProjectState.AWAITING_PAYMENT),
            PAYMENT_REQUIRED,
        ),
        Rule.deny(
            "terms_not_accepted",
            _terms_missing,
            "Project terms must be accepted before work can be approved",
        ),
        Rule.allow("primary_contact_approval"),
    ),
    # Same as APPROVE minus the payment gate: clients may still contest
    # quality while a payment is outstanding.
    Action.REQUEST_REVISION: (
        _deliverable_required,
        Rule.deny(
            "not_client",
            lambda c: not is_client(c.user),
            "Only clients can request revisions",
        ),
        Rule.deny(
            "not_primary_contact",
            lambda c: not c.primary_contact,
            "Only the Primary Contact can request revisions",
        ),
        Rule.deny("not_awaiting_approval", _not_awaiting_approval, NOT_AWAITING_APPROVAL),
        Rule.deny("project_on_hold", _status_is(ProjectState.ON_HOLD), PROJECT_ON_HOLD),
        Rule.deny("project_archived", _status_is(ProjectState.ARCHIVED), PROJECT_ARCHIVED),
        Rule.deny(
            "terms_not_accepted",
            _terms_missing,
            "Project terms must be accepted before requesting revisions",
        ),
        Rule.allow("primary_contact_revision"),
    ),
    Action.VIEW_APPROVAL_HISTORY: (
        Rule.allow("internal_team", _is_internal),
        Rule.allow("primary_contact", lambda c: c.primary_contact),
        Rule.deny(
            "client_team_member",
            _always,
            "Only the Primary Contact and the production team can view approval history",
        ),
    ),
    Action.EDIT_DELIVERABLE: (
        _deliverable_required,
        Rule.deny(
            "locked_during_approval",
            lambda c: c.deliverable_status == DeliverableState.AWAITING_APPROVAL,
            LOCKED_DURING_APPROVAL,
        ),
        Rule.deny(
            "project_completed",
            _status_is_not_super_admin(ProjectState.COMPLETED),
            PROJECT_COMPLETED,
        ),
        _archived_gate,
        Rule.allow(
            "closed_project_super_admin",
            _status_is(ProjectState.COMPLETED, ProjectState.ARCHIVED),
        ),
        Rule.allow("internal_team", _is_internal),
        Rule.deny("client_edit", _is_client, "Clients cannot edit deliverables"),
    ),
    Action.CREATE_DELIVERABLE: (
        Rule.deny(
            "project_not_open",
            lambda c: (
                c.project_status not in (ProjectState.ACTIVE, ProjectState.DRAFT)
                and not is_super_admin(c.user)
            ),
            "Project must be active",
        ),
        Rule.allow("admin_or_pm", _is_admin_or_pm),
        Rule.deny(
            "not_admin_or_pm",
            _always,
            "Only project managers and admins can create deliverables",
        ),
    ),
    Action.DELETE_DELIVERABLE: (
        Rule.allow("super_admin", _is_super_admin),
        Rule.deny(
            "not_super_admin",
            _always,
            "Only super admins can delete deliverables",
        ),
    ),
    Action.EDIT_TASK: (
        Rule.allow("admin_or_pm", _is_admin_or_pm),
        Rule.allow(
            "assigned_team_member",
            lambda c: is_team_member(c.user) and is_assigned_to_task(c.user, c.task),
        ),
        Rule.deny(
            "team_member_not_assigned",
            _is_team_member,
            "You can only edit tasks assigned to you",
        ),
        Rule.deny("client_edit", _is_client, "Clients cannot edit tasks"),
    ),
    Action.CREATE_TASK: (
        _archived_gate,
        Rule.allow("internal_team", _is_internal),
        Rule.deny("client_create", _is_client, "Clients cannot create tasks"),
    ),
    Action.DELETE_TASK: (
        _archived_gate,
        Rule.allow("internal_team", _is_internal),
        Rule.deny("client_delete", _is_client, "Clients cannot delete tasks"),
    ),
    Action.UPLOAD_PROJECT_FILE: (
        _archived_gate,
        Rule.allow("internal_team", _is_internal),
        Rule.allow("client", _is_client),
    ),
    Action.DELETE_PROJECT_FILE: (
        _archived_gate,
        Rule.deny("client_delete", _is_client, "Clients cannot delete project files"),
        Rule.allow("internal_team", _is_internal),
    ),
    Action.ARCHIVE_PROJECT: (
        Rule.deny(
            "already_archived",
            _status_is(ProjectState.ARCHIVED),
            "This project is already archived",
        ),
        Rule.allow("admin_or_pm", _is_admin_or_pm),
        Rule.deny(
            "not_admin_or_pm",
            _always,
            "Only project managers and admins can archive projects",
        ),
    ),
    Action.DELETE_PROJECT: (
        Rule.deny(
            "not_super_admin",
            lambda c: not is_super_admin(c.user),
            "Only super admins can delete projects",
        ),
        Rule.deny(
            "not_archived",
            lambda c: c.project_status != ProjectState.ARCHIVED,
            "Only archived projects can be deleted. Archive this project first",
        ),
        Rule.allow("archived_super_admin"),
    ),
    # Portal-wide gates, decided on role alone
    Action.VIEW_ALL_PROJECTS: (
        Rule.allow("internal_team", _is_internal),
        Rule.deny(
            "client_portfolio",
            _always,
            "Clients can only view the projects they belong to",
        ),
    ),
    Action.MANAGE_TEAM: (
        Rule.allow("admin_or_pm", _is_admin_or_pm),
        Rule.deny(
            "not_admin_or_pm",
            _always,
            "Only project managers and admins can manage the team",
        ),
    ),
    Action.ACCESS_SETTINGS: (
        Rule.allow("super_admin", _is_super_admin),
        Rule.deny(
            "not_super_admin",
            _always,
            "Only super admins can access settings",
        ),
    ),
}

# Reason used when no rule in the list matches
FALLBACK_REASONS: dict[Action, str] = {
    Action.VIEW: "You do not have permission to view this deliverable",
    Action.VIEW_BETA_FILES: "You do not have permission to view beta files",
    Action.ACCESS_FINAL_FILES: "You do not have permission to access final files",
    Action.COMMENT: "You do not have permission to comment on this deliverable",
    Action.UPLOAD_BETA: "You do not have permission to upload beta files",
    Action.UPLOAD_FINAL: "You do not have permission to upload final files",
    Action.APPROVE: "Cannot approve deliverable",
    Action.REQUEST_REVISION: "Cannot request revisions",
    Action.VIEW_APPROVAL_HISTORY: "You do not have permission to view approval history",
    Action.EDIT_DELIVERABLE: "You do not have permission to edit this deliverable",
    Action.CREATE_DELIVERABLE: "You do not have permission to create deliverables",
    Action.DELETE_DELIVERABLE: "You do not have permission to delete deliverables",
    Action.EDIT_TASK: "You do not have permission to edit this task",
    Action.CREATE_TASK: "You do not have permission to create tasks",
    Action.DELETE_TASK: "You do not have permission to delete tasks",
    Action.UPLOAD_PROJECT_FILE: "You do not have permission to upload project files",
    Action.DELETE_PROJECT_FILE: "You do not have permission to delete project files",
    Action.ARCHIVE_PROJECT: "You do not have permission to archive this project",
    Action.DELETE_PROJECT: "You do not have permission to delete this project",
    Action.VIEW_ALL_PROJECTS: "You do not have permission to view all projects",
    Action.MANAGE_TEAM: "You do not have permission to manage the team",
    Action.ACCESS_SETTINGS: "You do not have permission to access settings",
}

# Task edits are decided on the task alone; portal gates on role alone
PROJECT_OPTIONAL_ACTIONS: frozenset[Action] = frozenset({
    Action.EDIT_TASK,
    Action.VIEW_ALL_PROJECTS,
    Action.MANAGE_TEAM,
    Action.ACCESS_SETTINGS,
})


# ── Evaluation ──────────────────────────────────────────────────────────


def decide(action: Action | str, ctx: AccessContext) -> AccessDecision:
    """
    Evaluate ``action`` against its rule list, first match wins.

    Raises ``UnknownActionError`` for an action with no rule table.
    """
    action = Action.parse(action)

    if ctx.project is None and action not in PROJECT_OPTIONAL_ACTIONS:
        return AccessDecision(False, action, PROJECT_MISSING, "project_missing")

    for rule in ACTION_RULES[action]:
        if rule.requires is not None:
            prior = decide(rule.requires, ctx)
            if not prior.allowed:
                return AccessDecision(
                    False, action, prior.reason, f"{rule.name}.{prior.rule}"
                )
            continue
        if rule.when(ctx):
            if rule.effect == Effect.ALLOW:
                return AccessDecision(True, action, None, rule.name)
            return AccessDecision(False, action, rule.reason, rule.name)

    return AccessDecision(False, action, FALLBACK_REASONS[action], "fallback")


def documented_reasons(action: Action | str | None = None) -> frozenset[str]:
    """
    Every denial reason ``decide`` can produce, for one action or for all.
    """
    if action is None:
        reasons: set[str] = set()
        for each in Action:
            reasons |= documented_reasons(each)
        return frozenset(reasons)

    action = Action.parse(action)
    reasons = {FALLBACK_REASONS[action]}
    if action not in PROJECT_OPTIONAL_ACTIONS:
        reasons.add(PROJECT_MISSING)
    for rule in ACTION_RULES[action]:
        if rule.requires is not None:
            reasons |= documented_reasons(rule.requires)
        elif rule.effect == Effect.DENY and rule.reason:
            reasons.add(rule.reason)
    return frozenset(reasons)
