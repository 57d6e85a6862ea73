"""
studiogate — Denial Explanations
=================================
User-facing reason for a denied action, read off the same rule table as
the predicates.
"""

from __future__ import annotations

from datetime import datetime

from studiogate.access.models import Deliverable, Project, Task, User
from studiogate.access.rules import (
    GENERIC_DENIAL,
    AccessContext,
    Action,
    decide,
)
from studiogate.core.exceptions import UnknownActionError


def explain_denial(
    action: Action | str,
    user: User,
    project: Project | None,
    deliverable: Deliverable | None = None,
    task: Task | None = None,
    *,
    now: datetime | None = None,
) -> str:
    """
    Return the most specific reason ``action`` is denied.

    Returns ``""`` when the action is allowed, and the bare
    ``GENERIC_DENIAL`` only for an action name with no rule table.
    """
    try:
        action = Action.parse(action)
    except UnknownActionError:
        return GENERIC_DENIAL

    ctx = AccessContext.build(
        user, project, deliverable=deliverable, task=task, now=now
    )
    decision = decide(action, ctx)
    if decision.allowed:
        return ""
    return decision.reason or GENERIC_DENIAL
