"""
Exception handlers.

Every error leaves the API in the same envelope:
``{"success": false, "error", "error_type", "details", "request_id"}``.
"""
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cv_analysis.utils.config import settings
from cv_analysis.utils.exceptions import CVAnalysisException
from cv_analysis.utils.logger import get_logger

logger = get_logger(__name__)


def error_response(
    request: Request,
    status_code: int,
    error: Any,
    error_type: str,
    details: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    """Build the error envelope"""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "error_type": error_type,
            "details": jsonable_encoder(details or {}),
            "request_id": getattr(request.state, "request_id", None),
        }
    )


async def cv_analysis_exception_handler(request: Request, exc: CVAnalysisException):
    """Application errors carry their own status code and details"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{exc.__class__.__name__}: {exc.message}", extra={
        "status_code": exc.status_code,
        "path": request.url.path
    })
    return error_response(request, exc.status_code, exc.message, exc.__class__.__name__, exc.details)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies, including bad custom field definitions"""
    errors = jsonable_encoder(exc.errors())
    logger.warning(f"Request validation failed with {len(errors)} error(s)", extra={
        "path": request.url.path
    })
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        "ValidationError",
        {"errors": errors}
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}")
    return error_response(request, exc.status_code, exc.detail, "HTTPException")


async def generic_exception_handler(request: Request, exc: Exception):
    """Anything unexpected is a 500; the message is only exposed in debug mode"""
    logger.error(f"Unhandled {exc.__class__.__name__} on {request.url.path}: {exc}", exc_info=True)
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "InternalServerError",
        {"message": str(exc)} if settings.DEBUG else None
    )
