"""
예외 → HTTP 응답 변환

모든 오류 응답은 {"error": {"code", "message", "details", "traceId"}} 형식입니다.
"""

import uuid
from typing import Any, Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catalog.core.exceptions import (
    CatalogException,
    ConcurrentModificationException,
    DuplicateSkuException,
    InvalidIdentifierException,
    InvalidQuantityException,
    LockAcquisitionException,
    ProductNotFoundException,
    StorageUnavailableException,
)
from catalog.schemas.product import ErrorDetail, ErrorResponse

logger = structlog.get_logger(__name__)

STATUS_BY_EXCEPTION: dict[type[CatalogException], int] = {
    InvalidIdentifierException: status.HTTP_400_BAD_REQUEST,
    InvalidQuantityException: status.HTTP_400_BAD_REQUEST,
    ProductNotFoundException: status.HTTP_404_NOT_FOUND,
    DuplicateSkuException: status.HTTP_409_CONFLICT,
    ConcurrentModificationException: status.HTTP_409_CONFLICT,
    LockAcquisitionException: status.HTTP_409_CONFLICT,
    StorageUnavailableException: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> JSONResponse:
    trace_id = str(uuid.uuid4())
    body = ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details, trace_id=trace_id)
    )
    logger.warning(
        "request.failed",
        status_code=status_code,
        code=code,
        message=message,
        trace_id=trace_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


async def handle_catalog_exception(request: Request, exc: CatalogException) -> JSONResponse:
    status_code = STATUS_BY_EXCEPTION.get(
        type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return error_response(status_code, exc.code, exc.message, exc.details)


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = {
        ".".join(str(part) for part in error["loc"] if part != "body"): error["msg"]
        for error in exc.errors()
    }
    return error_response(
        status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", "Validation failed", details
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.unexpected_error", path=request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An unexpected error occurred",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """앱에 예외 핸들러를 등록합니다."""
    app.add_exception_handler(CatalogException, handle_catalog_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
