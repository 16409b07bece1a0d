"""Error taxonomy shared by the services, the HTTP layer and the API client."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class LeaveDeskError(Exception):
    """Base class for every failure a LeaveDesk operation reports."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LeaveDeskError):
    """Malformed input: bad dates, missing field, out-of-range length."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(LeaveDeskError):
    """No session, or the session could not be verified."""

    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(LeaveDeskError):
    """Authenticated, but the role or ownership does not allow the action."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(LeaveDeskError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(LeaveDeskError):
    """Duplicate identifier, resource in use, or invalid state transition."""

    status_code = status.HTTP_409_CONFLICT


class TransportError(LeaveDeskError):
    """The backing service could not be reached or answered unexpectedly."""

    status_code = status.HTTP_502_BAD_GATEWAY


_BY_STATUS: dict[int, type[LeaveDeskError]] = {
    cls.status_code: cls
    for cls in (
        ValidationError,
        AuthenticationError,
        AuthorizationError,
        NotFoundError,
        ConflictError,
    )
}


def error_for_status(status_code: int, message: str) -> LeaveDeskError:
    """Rebuild a typed error from an HTTP status and its ``{error}`` text."""

    if status_code == 422:
        return ValidationError(message)
    error_cls = _BY_STATUS.get(status_code, TransportError)
    return error_cls(message)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(item) for item in err.get("loc", ()) if item != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"error": "..."}``."""

    @app.exception_handler(LeaveDeskError)
    async def handle_leavedesk_error(request: Request, exc: LeaveDeskError) -> JSONResponse:
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, _describe_validation(exc))

    @app.exception_handler(HTTPException)
    async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
