"""
studiogate — Enforcement
=========================
Caller-side guard: evaluate an action and raise on denial.

The engine itself only decides. ``enforce`` is what a route handler calls
right before a mutation so that a denial becomes an ``AccessDeniedError``
carrying the user-facing reason, and every denial leaves an audit log line.

Usage:
    enforce(Action.APPROVE, user, project, deliverable=deliverable)
    mark_approved(deliverable.id)   # only reached when allowed
"""

from __future__ import annotations

from datetime import datetime

from studiogate.access.models import Deliverable, Project, Task, User
from studiogate.access.rules import AccessContext, AccessDecision, Action, decide
from studiogate.core.context import correlation_id_ctx
from studiogate.core.exceptions import AccessDeniedError
from studiogate.core.logging import get_logger

logger = get_logger(__name__)


def enforce(
    action: Action | str,
    user: User,
    project: Project | None,
    deliverable: Deliverable | None = None,
    task: Task | None = None,
    *,
    now: datetime | None = None,
) -> AccessDecision:
    """
    Return the decision if ``action`` is allowed.

    Raises
    ------
    AccessDeniedError
        If the rule table denies the action. ``reason`` is the same string
        ``explain_denial`` returns for these inputs.
    UnknownActionError
        If ``action`` is not a known action name.
    """
    action = Action.parse(action)
    ctx = AccessContext.build(
        user, project, deliverable=deliverable, task=task, now=now
    )
    decision = decide(action, ctx)
    project_id = project.id if project is not None else None

    if decision.allowed:
        logger.debug(
            "access.allowed",
            action=action.value,
            rule=decision.rule,
            user_id=user.id,
            role=user.role.value,
            project_id=project_id,
        )
        return decision

    logger.info(
        "access.denied",
        action=action.value,
        rule=decision.rule,
        reason=decision.reason,
        user_id=user.id,
        role=user.role.value,
        project_id=project_id,
        deliverable_id=deliverable.id if deliverable is not None else None,
    )
    raise AccessDeniedError(
        decision.reason or "",
        action=action.value,
        rule=decision.rule,
        user_id=user.id,
        project_id=project_id,
        correlation_id=correlation_id_ctx.get(None),
    )
