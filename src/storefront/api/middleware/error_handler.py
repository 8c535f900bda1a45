"""
Error handling: exception handlers and request logging middleware.
"""

import time

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from storefront.utils.exceptions import StorefrontError, AuthenticationError, ConflictError
from storefront.utils.logger import get_logger
from storefront.utils.transaction import translate_integrity_error

logger = get_logger(__name__)


def error_response(error: StorefrontError) -> JSONResponse:
    content = {"error": error.error, "message": error.message}
    if error.details:
        content["details"] = error.details

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(error, AuthenticationError) else None
    return JSONResponse(status_code=error.status_code, content=content, headers=headers)


async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    else:
        logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
    return error_response(exc)


async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity error on {request.url.path}: {exc.orig}")
    return error_response(translate_integrity_error(exc))


async def stale_data_handler(request: Request, exc: StaleDataError):
    logger.warning(f"Concurrent modification on {request.url.path}: {exc}")
    return error_response(ConflictError("Resource was modified concurrently, retry the request"))


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"SQLAlchemy error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Database Error", "message": "A database error occurred"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the application error handlers."""
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(StaleDataError, stale_data_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Logs every request and turns unhandled exceptions into a JSON 500.
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled exception: {e}", exc_info=True)
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal Server Error",
                    "message": "An unexpected error occurred"
                }
            )

        duration = time.time() - start_time
        logger.info(f"{request.method} {request.url.path} - {response.status_code} - {duration:.3f}s")
        return response
