"""Error responses in the back office's legacy shape: {"error": ..., "details": ...}."""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised by routes to return a non-2xx {error, details} response."""

    def __init__(self, status_code: int, error: str, details: Any = None):
        self.status_code = status_code
        self.error = error
        self.details = details
        super().__init__(error)


def parse_id(raw: str, entity: str) -> int:
    """Parse a numeric path id, raising a 400 ApiError when it is not an integer."""
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ApiError(400, f"Invalid {entity} ID", f"'{raw}' is not a valid integer id")


def _payload(error: str, details: Any = None) -> dict:
    content: dict[str, Any] = {"error": error}
    if details is not None:
        content["details"] = details
    return content


async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_payload(exc.error, exc.details))


async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    # Body/path validation is a client error (400), not FastAPI's default 422
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content=_payload("Invalid request", details))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=_payload("Internal server error", str(exc)),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the {error, details} handlers on an app."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
