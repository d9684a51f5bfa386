"""Engine error -> HTTPException, and the matching OpenAPI error responses."""
from typing import Any, Dict, Union

from fastapi import HTTPException, status

from schedule_engine.errors import ErrorKind, ScheduleEngineError
from schedule_engine.schemas.common import ErrorResponse

_STATUS_BY_KIND = {
    ErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}

ERROR_RESPONSES: Dict[Union[int, str], Dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Rejected precondition or invalid plan"},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Schedule, snapshot or reference not found"},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse, "description": "Version mismatch or out-of-order chunk"},
}


def http_error(exc: ScheduleEngineError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=exc.to_detail(),
    )
