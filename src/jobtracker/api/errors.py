from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobtracker.api.schemas import ErrorResponse
from jobtracker.errors import ErrorKind, TrackerError

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.VALIDATION: (400, "BAD_REQUEST"),
    ErrorKind.NOT_FOUND: (404, "NOT_FOUND"),
    ErrorKind.CONFLICT: (409, "CONFLICT"),
    ErrorKind.PERSISTENCE: (500, "INTERNAL_ERROR"),
}

KIND_BY_STATUS: dict[int, ErrorKind] = {status: kind for kind, (status, _code) in STATUS_BY_KIND.items()}

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


def error_response(
    kind: ErrorKind | None,
    message: str,
    field: str | None = None,
    *,
    status_code: int | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    if kind is not None:
        status_code, code = STATUS_BY_KIND[kind]
    else:
        # Framework statuses outside the tracker kinds, e.g. 405.
        code = HTTPStatus(status_code).name
    body = ErrorResponse(error=message, code=code, field=field)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TrackerError)
    async def _tracker_error(request: Request, exc: TrackerError) -> JSONResponse:
        if exc.kind is ErrorKind.PERSISTENCE:
            logger.error("Internal error on %s %s: %r", request.method, request.url.path, exc, exc_info=exc)
            return error_response(exc.kind, INTERNAL_ERROR_MESSAGE)
        return error_response(exc.kind, exc.message, exc.field)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
        return error_response(
            ErrorKind.VALIDATION,
            first.get("msg", "Invalid request"),
            ".".join(location) or None,
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        kind = KIND_BY_STATUS.get(exc.status_code)
        return error_response(kind, str(exc.detail), status_code=exc.status_code, headers=exc.headers)
