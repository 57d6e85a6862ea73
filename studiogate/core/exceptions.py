"""
studiogate — Exception Taxonomy
================================
Category-based exception hierarchy with a severity property.

The decision functions themselves never raise for well-formed input: a
denial is a data result. Exceptions here cover malformed input (unknown
roles, unknown statuses), illegal deliverable transitions, and the
caller-facing ``enforce`` helper that turns a denial into an error.

Usage:
    from studiogate.core.exceptions import AccessDeniedError

    raise AccessDeniedError(
        "Deliverable is locked during approval",
        action="edit_deliverable",
        user_id="u-1",
        project_id="p-1",
    )
"""

from __future__ import annotations

from enum import StrEnum


class ErrorSeverity(StrEnum):
    """Error severity levels: LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class StudioGateError(Exception):
    """
    Base exception for all studiogate errors.

    Provides:
    - severity: Classification for error handling/routing
    - error_code: Unique identifier for programmatic handling
    - Tracing identifiers: user_id, project_id, correlation_id
    """

    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    error_code: str = "STUDIOGATE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        user_id: str | None = None,
        project_id: str | None = None,
        correlation_id: str | None = None,
    ) -> None:
        self.message = message
        self.user_id = user_id
        self.project_id = project_id
        self.correlation_id = correlation_id
        super().__init__(message)

    def __repr__(self) -> str:
        parts = [
            f"{self.__class__.__name__}(",
            f"error_code={self.error_code!r}, ",
            f"severity={self.severity.value!r}",
        ]
        if self.user_id:
            parts.append(f", user_id={self.user_id!r}")
        if self.project_id:
            parts.append(f", project_id={self.project_id!r}")
        if self.correlation_id:
            parts.append(f", correlation_id={self.correlation_id!r}")
        parts.append(")")
        return "".join(parts)


# ── Configuration ─────────────────────────────────────────────────────────


class ConfigurationError(StudioGateError):
    """Errors in configuration (missing settings, invalid values)."""

    severity = ErrorSeverity.HIGH
    error_code = "CONFIGURATION_ERROR"


# ── Input Records ─────────────────────────────────────────────────────────


class ModelError(StudioGateError):
    """Malformed input records handed to the engine."""

    error_code = "MODEL_ERROR"


class InvalidRoleError(ModelError):
    """Raised when a role string is not one of the four known roles."""

    error_code = "INVALID_ROLE"

    def __init__(self, role: object, **kwargs: str | None) -> None:
        self.role = role
        super().__init__(f"Unknown role {role!r}.", **kwargs)


class InvalidStateError(ModelError):
    """Raised when a status string is not part of a state machine."""

    error_code = "INVALID_STATE"

    def __init__(self, state: object, machine: str, **kwargs: str | None) -> None:
        self.state = state
        self.machine = machine
        super().__init__(f"Unknown {machine} status {state!r}.", **kwargs)


# ── State Transitions ─────────────────────────────────────────────────────


class TransitionError(StudioGateError):
    """Errors raised by the lifecycle state machines."""

    error_code = "TRANSITION_ERROR"


class InvalidTransitionError(TransitionError):
    """Raised when an undefined deliverable transition is attempted."""

    error_code = "INVALID_TRANSITION"

    def __init__(
        self,
        from_state: str,
        to_state: str,
        allowed: frozenset[str] | None = None,
        **kwargs: str | None,
    ) -> None:
        self.from_state = from_state
        self.to_state = to_state
        self.allowed = allowed or frozenset()
        super().__init__(
            f"Invalid transition {from_state} → {to_state}. "
            f"Allowed: {sorted(str(s) for s in self.allowed)}.",
            **kwargs,
        )


# ── Access ────────────────────────────────────────────────────────────────


class AccessError(StudioGateError):
    """Errors raised around authorization decisions."""

    error_code = "ACCESS_ERROR"


class AccessDeniedError(AccessError):
    """Raised by ``enforce`` when the engine denies an action."""

    severity = ErrorSeverity.LOW
    error_code = "ACCESS_DENIED"

    def __init__(
        self,
        reason: str,
        *,
        action: str,
        rule: str | None = None,
        **kwargs: str | None,
    ) -> None:
        self.reason = reason
        self.action = action
        self.rule = rule
        super().__init__(reason, **kwargs)


class UnknownActionError(AccessError):
    """Raised when an action name has no rule table."""

    error_code = "UNKNOWN_ACTION"

    def __init__(self, action: object, **kwargs: str | None) -> None:
        self.action = action
        super().__init__(f"Unknown action {action!r}.", **kwargs)
