# app/core/errors.py
from fastapi import Request, status
from fastapi.responses import JSONResponse


class WorkItemError(Exception):
    """Base for every expected, caller-recoverable failure of the work item core."""

    kind = "WorkItemError"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(WorkItemError):
    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND


class Unauthenticated(WorkItemError):
    kind = "Unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(WorkItemError):
    kind = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidTransition(WorkItemError):
    kind = "InvalidTransition"


class ProjectNotActive(WorkItemError):
    kind = "ProjectNotActive"


class EmployeeNotEligible(WorkItemError):
    kind = "EmployeeNotEligible"

    def __init__(self, message: str, role=None):
        super().__init__(message)
        self.role = role


class AssignmentDenied(WorkItemError):
    """Admission control refused a new assignment."""

    kind = "AssignmentDenied"


class CapacityExceeded(AssignmentDenied):
    kind = "CapacityExceeded"


class PerformanceBelowThreshold(AssignmentDenied):
    kind = "PerformanceBelowThreshold"


class ConcurrencyConflict(WorkItemError):
    kind = "ConcurrencyConflict"
    status_code = status.HTTP_409_CONFLICT


async def work_item_error_handler(request: Request, exc: WorkItemError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
        headers=headers,
    )
