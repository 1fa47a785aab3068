"""Error envelope and the mapping from failed service results to HTTP errors."""

from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from backoffice.api.schemas import ErrorResponse
from backoffice.application.results import ServiceResult
from backoffice.domain.exceptions import ErrorKind

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(
    request: Request,
    status_code: int,
    kind: str,
    error_code: str,
    message: str,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the uniform error envelope, tagged with the request id."""
    body = ErrorResponse(
        kind=kind,
        error_code=error_code,
        message=message,
        details=details,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True),
        headers=headers,
    )


def raise_for_result(result: ServiceResult) -> None:
    """Raise an HTTPException carrying the error envelope if ``result`` failed."""
    if result.success:
        return
    kind = result.error_kind or ErrorKind.INTERNAL
    raise HTTPException(
        status_code=STATUS_BY_KIND[kind],
        detail={
            "kind": kind.value,
            "error_code": result.error_code or "ERROR",
            "message": result.error or "Request failed",
            "details": result.error_details,
        },
    )
