from __future__ import annotations

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from advisory_monitor.api.router import api_router
from advisory_monitor.core.config import get_cors_origins, get_settings
from advisory_monitor.core.errors import (
    AppError,
    app_error_handler,
    upstream_error_handler,
    validation_error_handler,
)
from advisory_monitor.core.logging import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix=settings.api_prefix)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(httpx.HTTPError, upstream_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    return app


app = create_app()
