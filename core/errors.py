# core/errors.py

import logging
from contextlib import contextmanager
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto an HTTP status and an error envelope."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Missing or invalid authorization header"


class PermissionDenied(ApiError):
    status_code = 403
    default_message = "Access forbidden: admin role required"


class InvalidArgument(ApiError):
    status_code = 400
    default_message = "Invalid request"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class Internal(ApiError):
    status_code = 500


# --- Envelopes ---

def _serialize(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return jsonable_encoder(value)


def success(data: Any = None, message: Optional[str] = None, status_code: int = 200, **extra: Any) -> JSONResponse:
    """Build the `{success: true, data, message}` envelope; pydantic models go out under their camelCase aliases."""
    body: dict = {"success": True}
    if data is not None:
        body["data"] = _serialize(data)
    if message:
        body["message"] = message
    body.update(_serialize(extra))
    return JSONResponse(status_code=status_code, content=body)


def failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


# --- Exception handlers ---

async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return failure(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return failure(exc.status_code, detail)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form"))
        problems.append(f"{location}: {err.get('msg')}" if location else err.get("msg", "invalid value"))
    return failure(400, "; ".join(problems) or InvalidArgument.default_message)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error in {request.method} {request.url.path}: {exc}")
    return failure(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


@contextmanager
def downstream(message: str):
    """
    Wrap calls to the database or object storage: anything that is not already
    an ApiError is logged with its traceback and reported as Internal(message).
    """
    try:
        yield
    except ApiError:
        raise
    except Exception as e:
        logger.exception(message)
        raise Internal(message) from e
