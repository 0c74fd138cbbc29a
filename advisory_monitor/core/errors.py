from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class AppError(Exception):
    def __init__(self, code: str, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(code="not_found", message=message, status_code=404)


class BadRequestError(AppError):
    def __init__(self, message: str = "Bad request") -> None:
        super().__init__(code="bad_request", message=message, status_code=400)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(code="unauthorized", message=message, status_code=401)


class ForbiddenError(AppError):
    def __init__(self, message: str = "Not allowed") -> None:
        super().__init__(code="forbidden", message=message, status_code=403)


class StaleRequestError(AppError):
    def __init__(self, message: str = "Superseded by a newer request") -> None:
        super().__init__(code="stale_request", message=message, status_code=409)


class ErrorEnvelope(BaseModel):
    error: ErrorDetail


def describe_upstream_error(exc: httpx.HTTPError) -> str:
    """Return the data store's own error message when the response carries one."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error_description") or body.get("error")
            if isinstance(message, str) and message:
                return message
    return str(exc) or exc.__class__.__name__


def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    envelope = ErrorEnvelope(error=ErrorDetail(code=exc.code, message=exc.message))
    return JSONResponse(status_code=exc.status_code, content=envelope.model_dump())


def upstream_error_handler(_: Request, exc: httpx.HTTPError) -> JSONResponse:
    message = describe_upstream_error(exc)
    logger.warning("Data store request failed: %s", message)
    envelope = ErrorEnvelope(error=ErrorDetail(code="upstream_error", message=message))
    return JSONResponse(status_code=502, content=envelope.model_dump())


def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    envelope = ErrorEnvelope(
        error=ErrorDetail(
            code="validation_error",
            message="Validation error",
            details={"errors": exc.errors()},
        )
    )
    return JSONResponse(status_code=422, content=envelope.model_dump())
