"""
Error taxonomy and the FastAPI handlers that render it.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nbhwc_api.core.config import settings

logger = logging.getLogger(__name__)

class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class ValidationError(AppError):
    """Bad or missing input. Raised before anything is written."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "validation_error"

class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"

class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    error_type = "conflict"

class TransientStoreError(AppError):
    """The store failed mid-transaction; the transaction was rolled back and the call can be retried."""
    error_type = "store_error"

def _envelope(status_code: int, message, error_type: str, **extra) -> JSONResponse:
    error = {"message": message, "type": error_type, "status_code": status_code}
    error.update(extra)
    return JSONResponse(status_code=status_code, content={"error": error})

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{exc.error_type} on {request.url.path}: {exc.message}")
            message = "Internal server error." if settings.is_production() else exc.message
            return _envelope(exc.status_code, message, exc.error_type)
        return _envelope(exc.status_code, exc.message, exc.error_type)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _envelope(exc.status_code, exc.detail, "http_error")

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in exc.errors()]
        return _envelope(status.HTTP_400_BAD_REQUEST, "Validation error", "validation_error", details=details)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        if settings.is_production():
            return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "An internal error occurred", "internal_error")
        return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "internal_error", debug=True)
