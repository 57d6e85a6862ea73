"""
studiogate — Authorization Engine
==================================
Role, relationship and lifecycle-aware gates for every sensitive portal
action, with human-readable denial reasons.

Public API:
    can_* predicates, explain_denial, decide, enforce
"""

from studiogate.access.roles import (
    Role,
    is_assigned_to_task,
    is_client,
    is_internal_team,
    is_primary_contact,
    is_project_manager,
    parse_role,
)
from studiogate.access.models import (
    Deliverable,
    Project,
    ProjectMembership,
    RevisionQuota,
    Task,
    User,
    revision_quota,
)
from studiogate.access.rules import (
    GENERIC_DENIAL,
    AccessContext,
    AccessDecision,
    Action,
    decide,
    documented_reasons,
)
from studiogate.access.predicates import (
    can_access_final_files,
    can_access_settings,
    can_approve,
    can_archive_project,
    can_comment,
    can_create_deliverable,
    can_create_task,
    can_delete_deliverable,
    can_delete_project,
    can_delete_project_file,
    can_delete_task,
    can_edit,
    can_edit_task,
    can_manage_team,
    can_request_revision,
    can_upload_beta,
    can_upload_final,
    can_upload_project_file,
    can_view,
    can_view_approval_history,
    can_view_all_projects,
    can_view_beta_files,
)
from studiogate.access.explain import explain_denial
from studiogate.access.enforcement import enforce

__all__ = [
    "Role",
    "parse_role",
    "is_internal_team",
    "is_client",
    "is_primary_contact",
    "is_project_manager",
    "is_assigned_to_task",
    "User",
    "ProjectMembership",
    "Project",
    "Deliverable",
    "Task",
    "RevisionQuota",
    "revision_quota",
    "Action",
    "AccessContext",
    "AccessDecision",
    "GENERIC_DENIAL",
    "decide",
    "documented_reasons",
    "can_view",
    "can_view_beta_files",
    "can_access_final_files",
    "can_comment",
    "can_upload_beta",
    "can_upload_final",
    "can_approve",
    "can_request_revision",
    "can_view_approval_history",
    "can_edit",
    "can_create_deliverable",
    "can_delete_deliverable",
    "can_edit_task",
    "can_create_task",
    "can_delete_task",
    "can_upload_project_file",
    "can_delete_project_file",
    "can_archive_project",
    "can_delete_project",
    "can_view_all_projects",
    "can_manage_team",
    "can_access_settings",
    "explain_denial",
    "enforce",
]
