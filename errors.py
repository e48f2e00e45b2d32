"""
Error types and the JSON error envelope.

Every failure leaves the API in the same shape::

    {"error": {"code": "...", "message": "...", "details": [{"field": ..., "message": ...}]}}

Handlers raise ApiError (or a subclass); register_exception_handlers()
renders it, along with FastAPI's own request validation errors and anything
unexpected.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

_LOCATIONS = {"body", "query", "path", "header", "cookie"}


class ApiError(Exception):
    """Base error carrying an HTTP status and a machine-readable code"""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[list[dict]] = None,
        headers: Optional[dict] = None,
    ):
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details
        self.headers = headers
        super().__init__(message)

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}


class AuthenticationError(ApiError):
    def __init__(self, code: str = "AUTH_TOKEN_INVALID", message: str = "Invalid authentication token"):
        super().__init__(
            status.HTTP_401_UNAUTHORIZED, code, message,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(ApiError):
    def __init__(self, message: str = "You are not allowed to perform this operation", code: str = "FORBIDDEN"):
        super().__init__(status.HTTP_403_FORBIDDEN, code, message)


class NotFoundError(ApiError):
    def __init__(self, message: str = "Resource not found", code: str = "NOT_FOUND"):
        super().__init__(status.HTTP_404_NOT_FOUND, code, message)


class ConflictError(ApiError):
    def __init__(self, code: str, message: str, details: Optional[list[dict]] = None):
        super().__init__(status.HTTP_409_CONFLICT, code, message, details)


class ValidationFailed(ApiError):
    def __init__(self, message: str = "Invalid input", details: Optional[list[dict]] = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", message, details)


class InternalError(ApiError):
    def __init__(self, message: str = "Internal server error"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", message)


def _field_name(loc) -> str:
    parts = list(loc)
    if parts and parts[0] in _LOCATIONS and len(parts) > 1:
        parts = parts[1:]
    return ".".join(str(p) for p in parts)


def _clean_message(msg: str) -> str:
    # pydantic prefixes messages raised from validators
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


def validation_details(errors) -> list[dict]:
    return [
        {"field": _field_name(err.get("loc", ())), "message": _clean_message(err.get("msg", ""))}
        for err in errors
    ]


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationFailed(details=validation_details(exc.errors()))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        code = {
            status.HTTP_401_UNAUTHORIZED: "AUTH_TOKEN_INVALID",
            status.HTTP_403_FORBIDDEN: "FORBIDDEN",
            status.HTTP_404_NOT_FOUND: "NOT_FOUND",
            status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
        }.get(exc.status_code, "HTTP_ERROR")
        body = {"error": {"code": code, "message": str(exc.detail)}}
        return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=InternalError().to_dict())
