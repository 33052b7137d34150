"""API error type and the handlers that render every failure as an error envelope"""
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    429: "TOO_MANY_REQUESTS",
    500: "INTERNAL_ERROR",
}


class ApiError(Exception):
    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR", details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details if details is not None else {}

    @classmethod
    def bad_request(cls, message: str, details: Any = None) -> "ApiError":
        return cls(message, 400, "BAD_REQUEST", details)

    @classmethod
    def unauthorized(cls, message: str = "Unauthorized") -> "ApiError":
        return cls(message, 401, "UNAUTHORIZED")

    @classmethod
    def forbidden(cls, message: str = "Forbidden") -> "ApiError":
        return cls(message, 403, "FORBIDDEN")

    @classmethod
    def not_found(cls, message: str = "Resource not found") -> "ApiError":
        return cls(message, 404, "NOT_FOUND")

    @classmethod
    def too_many_requests(cls, message: str = "Too many requests") -> "ApiError":
        return cls(message, 429, "TOO_MANY_REQUESTS")

    @classmethod
    def internal(cls, message: str = "Internal server error") -> "ApiError":
        return cls(message, 500, "INTERNAL_ERROR")


def error_envelope(code: str, message: str, details: Optional[Any] = None) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details if details is not None else {},
        }
    }


async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.code, exc.message, jsonable_encoder(exc.details)),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg"),
            "type": err.get("type"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_envelope("BAD_REQUEST", "Invalid request data", details),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    code = STATUS_CODES.get(exc.status_code, "INTERNAL_ERROR" if exc.status_code >= 500 else "BAD_REQUEST")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_envelope("INTERNAL_ERROR", "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
