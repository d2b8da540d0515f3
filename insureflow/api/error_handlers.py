"""Translate workflow errors into HTTP problem responses."""

from typing import Tuple, Type

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from insureflow.core.exceptions import (
    AppError,
    ConflictError,
    NotFoundError,
    PreconditionFailedError,
    UpstreamFailureError,
)
from insureflow.utils.logging import get_logger
from insureflow.utils.responses import create_error_detail

LOGGER = get_logger(__name__)

ERROR_STATUS: Tuple[Tuple[Type[AppError], int, str], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND, "Not Found"),
    (PreconditionFailedError, status.HTTP_422_UNPROCESSABLE_ENTITY, "Precondition Failed"),
    (ConflictError, status.HTTP_409_CONFLICT, "Conflict"),
    (UpstreamFailureError, status.HTTP_502_BAD_GATEWAY, "Upstream Failure"),
)


def status_for_error(exc: AppError) -> Tuple[int, str]:
    """HTTP status code and title for an application error."""
    for error_class, status_code, title in ERROR_STATUS:
        if isinstance(exc, error_class):
            return status_code, title
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status_code, title = status_for_error(exc)

    if status_code >= 500:
        LOGGER.error(
            f"Request failed: {str(exc)}",
            exc_info=exc,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
    else:
        LOGGER.info(
            f"Request rejected: {str(exc)}",
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )

    error_detail = create_error_detail(
        title=title,
        status=status_code,
        detail=str(exc),
        request=request,
        error_type=type(exc).__name__,
    )
    return JSONResponse(status_code=status_code, content=error_detail.model_dump(mode="json"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
