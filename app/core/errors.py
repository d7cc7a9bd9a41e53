"""Error taxonomy and FastAPI exception handlers

Every failure that reaches a client is rendered with the same shape:

    {"success": false, "error": <user message>, "code": <error type>, "requestId": <id>}

Internal details (the raw message and metadata) are only attached when the
application runs in development mode.
"""
import logging
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import config

logger = logging.getLogger(__name__)


class ErrorType(str, Enum):
    """HTTP-facing error categories"""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    BUSINESS_LOGIC = "business_logic"
    INTERNAL = "internal"
    RATE_LIMIT = "rate_limit"


STATUS_CODES: Dict[ErrorType, int] = {
    ErrorType.VALIDATION: 400,
    ErrorType.AUTHENTICATION: 401,
    ErrorType.AUTHORIZATION: 403,
    ErrorType.NOT_FOUND: 404,
    ErrorType.DATABASE: 500,
    ErrorType.EXTERNAL_API: 502,
    ErrorType.BUSINESS_LOGIC: 400,
    ErrorType.INTERNAL: 500,
    ErrorType.RATE_LIMIT: 429,
}

USER_MESSAGES: Dict[ErrorType, str] = {
    ErrorType.VALIDATION: "Invalid input provided. Please check your data and try again.",
    ErrorType.AUTHENTICATION: "Authentication required. Please log in and try again.",
    ErrorType.AUTHORIZATION: "You do not have permission to perform this action.",
    ErrorType.NOT_FOUND: "The requested resource was not found.",
    ErrorType.DATABASE: "A database error occurred. Please try again later.",
    ErrorType.EXTERNAL_API: "An external service is temporarily unavailable. Please try again later.",
    ErrorType.BUSINESS_LOGIC: "Unable to complete the requested operation.",
    ErrorType.INTERNAL: "An internal server error occurred. Please try again later.",
    ErrorType.RATE_LIMIT: "Too many requests. Please wait a moment and try again.",
}


class AppError(Exception):
    error_type = ErrorType.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        error_type: Optional[ErrorType] = None,
        status_code: Optional[int] = None,
        user_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_type:
            self.error_type = error_type
        self.status_code = status_code or STATUS_CODES[self.error_type]
        self.user_message = user_message or USER_MESSAGES[self.error_type]
        self.details = details or {}


class ValidationError(AppError):
    error_type = ErrorType.VALIDATION


class AuthenticationError(AppError):
    error_type = ErrorType.AUTHENTICATION


class AuthorizationError(AppError):
    error_type = ErrorType.AUTHORIZATION


class NotFoundError(AppError):
    error_type = ErrorType.NOT_FOUND


class DatabaseError(AppError):
    error_type = ErrorType.DATABASE


class ExternalAPIError(AppError):
    error_type = ErrorType.EXTERNAL_API


class BusinessLogicError(AppError):
    error_type = ErrorType.BUSINESS_LOGIC


class InternalError(AppError):
    error_type = ErrorType.INTERNAL


class RateLimitError(AppError):
    error_type = ErrorType.RATE_LIMIT


_HTTP_STATUS_TYPES: Dict[int, ErrorType] = {
    400: ErrorType.VALIDATION,
    401: ErrorType.AUTHENTICATION,
    403: ErrorType.AUTHORIZATION,
    404: ErrorType.NOT_FOUND,
    422: ErrorType.VALIDATION,
    429: ErrorType.RATE_LIMIT,
    502: ErrorType.EXTERNAL_API,
}


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id") or str(uuid4())


def error_payload(
    error_type: ErrorType,
    user_message: str,
    request_id: str,
    message: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "success": False,
        "error": user_message,
        "code": error_type.value,
        "requestId": request_id,
    }
    if config.is_development():
        payload["details"] = {"message": message or user_message, "metadata": metadata or {}}
    return payload


def _json_error(status_code: int, payload: Dict[str, Any]) -> JSONResponse:
    response = JSONResponse(status_code=status_code, content=payload)
    response.headers["x-request-id"] = payload["requestId"]
    return response


async def app_error_handler(request: Request, exc: AppError):
    rid = _request_id(request)
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        f"{exc.error_type.value} error on {request.method} {request.url.path}: {exc.message} (request_id={rid})",
    )
    payload = error_payload(exc.error_type, exc.user_message, rid, exc.message, exc.details)
    return _json_error(exc.status_code, payload)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    rid = _request_id(request)
    error_type = _HTTP_STATUS_TYPES.get(exc.status_code, ErrorType.INTERNAL)
    message = str(exc.detail) if exc.detail else USER_MESSAGES[error_type]
    logger.warning(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {message} (request_id={rid})")
    payload = error_payload(error_type, message, rid, message)
    response = _json_error(exc.status_code, payload)
    if isinstance(exc, HTTPException) and exc.headers:
        response.headers.update(exc.headers)
    return response


async def request_validation_handler(request: Request, exc: RequestValidationError):
    rid = _request_id(request)
    logger.warning(f"Request validation failed on {request.method} {request.url.path} (request_id={rid})")
    payload = error_payload(
        ErrorType.VALIDATION,
        USER_MESSAGES[ErrorType.VALIDATION],
        rid,
        "Request validation failed",
        {"errors": jsonable_errors(exc)},
    )
    return _json_error(400, payload)


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = _request_id(request)
    logger.error(f"Unhandled exception on {request.method} {request.url.path} (request_id={rid})", exc_info=exc)
    payload = error_payload(ErrorType.INTERNAL, USER_MESSAGES[ErrorType.INTERNAL], rid, str(exc))
    return _json_error(500, payload)


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": [str(part) for part in error.get("loc", [])], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
