"""Global exception handlers.

Every error body is ``{"message": ...}``, optionally with ``errors`` or
``field``. Internal details go to the log only.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from tixit.core.errors import DependencyError, RateLimited, TixitError
from tixit.core.sanitize import validation_details

logger = logging.getLogger(__name__)

SERVER_ERROR = {"message": "Server error"}


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(TixitError)
    async def tixit_error_handler(request: Request, exc: TixitError):
        headers = None
        if isinstance(exc, RateLimited):
            headers = {"Retry-After": str(exc.retry_after)}
        if isinstance(exc, DependencyError):
            logger.error("Dependency failure on %s: %s", request.url.path, exc.detail,
                         extra={"error_code": exc.code, "path": request.url.path})
        else:
            logger.info("%s on %s", exc.code, request.url.path,
                        extra={"error_code": exc.code, "path": request.url.path})
        return JSONResponse(status_code=exc.http_status, content=exc.to_response(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Invalid input", "errors": validation_details(exc)},
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error on %s", request.url.path, exc_info=exc, extra={"path": request.url.path})
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=SERVER_ERROR)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s", request.url.path, exc_info=exc, extra={"path": request.url.path})
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=SERVER_ERROR)
