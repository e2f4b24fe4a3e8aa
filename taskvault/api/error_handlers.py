"""Error Handlers — global exception handlers for the TaskVault API.

Invariants:
    - TaskVaultError → its http_status with the {success: false, error, errors?} envelope
    - RequestValidationError (bad JSON, wrong types, bad UUIDs) → 400 with field messages
    - Exception (catch-all) → 500; internal detail only in development

Design Decisions:
    - Three-layer handler: domain (TaskVaultError), validation (Pydantic), catch-all
    - Extracted from main.py so the app module stays a list of registrations
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from taskvault.config import get_settings
from taskvault.core.errors import ErrorSeverity, TaskVaultError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(TaskVaultError)
    async def taskvault_error_handler(request: Request, exc: TaskVaultError):
        level = (
            logging.ERROR if exc.severity is ErrorSeverity.CRITICAL
            else logging.WARNING
        )
        logger.log(
            level,
            f"{type(exc).__name__}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "method": request.method,
                "caller_id": exc.context.caller_id,
                "resource": exc.context.resource,
                "resource_id": exc.context.resource_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Malformed request on {request.url.path}: {exc.errors()}",
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_malformed_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all. Details are shown in development only."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path, "method": request.method},
        )
        content = {"success": False, "error": "Internal server error"}
        if get_settings().expose_error_details:
            content["details"] = str(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content,
        )


def _build_malformed_response(exc: RequestValidationError) -> dict:
    return {
        "success": False,
        "error": "Malformed request",
        "errors": [
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
            for e in exc.errors()
        ],
    }
