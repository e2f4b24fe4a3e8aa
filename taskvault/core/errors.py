"""Error Hierarchy — typed, categorized exceptions for every TaskVault failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are recoverable; infrastructure errors (5xx) are critical
    - to_response() produces the REST envelope {success: false, error, errors?}
    - No internal details leaked in user-facing messages
    - NotFound never reveals whether the resource exists under another owner

Design Decisions:
    - Single hierarchy with TaskVaultError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Violation carries field + message so ValidationFailure can render
      human-readable "Field message" lines
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    ACCESS_DENIED = "access_denied"
    UNAUTHENTICATED = "unauthenticated"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    caller_id: str | None = None
    resource: str | None = None
    resource_id: str | None = None
    debug_info: dict[str, Any] | None = None


@dataclass(frozen=True)
class Violation:
    """A single field-level rule violation."""
    field: str
    message: str

    @property
    def full_message(self) -> str:
        if self.field == "base":
            return self.message
        label = self.field.replace("_", " ").capitalize()
        return f"{label} {self.message}"


class TaskVaultError(Exception):
    """Base exception for all TaskVault errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        errors: list[str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.errors = errors or []

    def to_response(self) -> dict:
        """Convert to the standard failure envelope."""
        response: dict[str, Any] = {"success": False, "error": self.message}
        if self.errors:
            response["errors"] = list(self.errors)
        return response


# ─── Domain Errors (4xx) ────────────────────────────────────────

class ValidationFailure(TaskVaultError):
    """One or more field-level rules rejected a candidate entity state."""
    def __init__(
        self, violations: list[Violation], context: ErrorContext | None = None,
    ):
        super().__init__(
            "Validation failed", "VALIDATION_FAILED", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 422,
            errors=[v.full_message for v in violations],
        )
        self.violations = violations


class ResourceNotFoundError(TaskVaultError):
    """Resource absent, or owned by someone else (the two are indistinguishable)."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource = resource_type
        ctx.resource_id = resource_id
        super().__init__(
            f"{resource_type.capitalize()} not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )


class AccessDeniedError(TaskVaultError):
    """Resource exists but the caller lacks rights on it."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Access denied", "ACCESS_DENIED", ErrorCategory.ACCESS_DENIED,
            ErrorSeverity.WARNING, context, 403,
        )


class UnauthenticatedError(TaskVaultError):
    """No caller identity could be resolved for the request."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Authentication required", "UNAUTHENTICATED",
            ErrorCategory.UNAUTHENTICATED, ErrorSeverity.WARNING, context, 401,
        )


class BusinessRuleConflict(TaskVaultError):
    """A domain rule refused an otherwise well-formed operation."""
    def __init__(
        self,
        message: str,
        code: str = "BUSINESS_RULE_CONFLICT",
        errors: list[str] | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 422, errors=errors,
        )


class InvalidTransitionError(BusinessRuleConflict):
    """uncomplete requested on a task that is not in a terminal state."""
    def __init__(self, current_status: str, context: ErrorContext | None = None):
        super().__init__(
            "Task is not finished", "TASK_NOT_FINISHED", context=context,
        )
        self.current_status = current_status


class DeletionRefusedError(BusinessRuleConflict):
    """Guarded delete refused because tasks still reference the entity."""
    def __init__(
        self, errors: list[str], context: ErrorContext | None = None,
    ):
        super().__init__(
            ", ".join(errors), "DELETE_REFUSED", errors=errors, context=context,
        )


# ─── Infrastructure Errors (5xx) ────────────────────────────────

class DatabaseError(TaskVaultError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation
