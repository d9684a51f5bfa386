"""
Engine errors.

Every precondition failure in the draft, publish and snapshot layers raises one of these
before anything is written. Routers map `kind` to an HTTP status; the bulk coordinator maps
it to an error code string.
"""
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, Enum):
    BAD_REQUEST = "BAD_REQUEST"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN = "UNKNOWN_ERROR"


class ScheduleEngineError(Exception):
    """Base class: stable `code`, human message, optional details."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        code: str = "engine_error",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            detail["details"] = self.details
        return detail


class BadRequestError(ScheduleEngineError):
    """Rejected precondition (wrong status, bad chunk index, bad date range...)."""

    kind = ErrorKind.BAD_REQUEST


class MalformedPlanError(BadRequestError):
    """The draft does not have the structure the engine needs (no `shows` list)."""

    def __init__(self, message: str = "Invalid plan document structure") -> None:
        super().__init__(message, code="malformed_plan_document")


class PlanValidationFailedError(BadRequestError):
    """Structure is fine but content is not; carries the complete error list."""

    def __init__(self, errors: List[Dict[str, Any]]) -> None:
        super().__init__(
            "Schedule validation failed",
            code="validation_failed",
            details={"errors": errors},
        )
        self.errors = errors


class ConflictError(ScheduleEngineError):
    kind = ErrorKind.CONFLICT


class VersionConflictError(ConflictError):
    """Optimistic lock failure: surfaces both versions so the client can resync."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Version mismatch. Expected {expected}, but schedule is at version {actual}",
            code="version_mismatch",
            details={"expected_version": expected, "current_version": actual},
        )
        self.expected = expected
        self.actual = actual


class NotFoundError(ScheduleEngineError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, identifier: Optional[Any] = None) -> None:
        message = (
            f"{resource} not found with id {identifier}"
            if identifier is not None
            else f"{resource} not found"
        )
        super().__init__(
            message,
            code="not_found",
            details={"resource": resource, "id": identifier},
        )
        self.resource = resource
        self.identifier = identifier


def classify_error(exc: BaseException) -> str:
    """Coarse classification used in bulk result records."""
    if isinstance(exc, ScheduleEngineError):
        return exc.kind.value
    return ErrorKind.UNKNOWN.value
