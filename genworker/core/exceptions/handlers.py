"""
Global Exception Handlers
전역 예외 핸들러
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from .base import (
    AppException,
    AuthorizationException,
    ExternalServiceException,
    NotFoundException,
    ValidationException,
)
from .codes import ErrorCode

logger = logging.getLogger(__name__)


def status_code_for(exc: AppException) -> int:
    """예외 종류별 HTTP 상태 코드"""
    if isinstance(exc, NotFoundException):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ValidationException):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, AuthorizationException):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, ExternalServiceException):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """커스텀 애플리케이션 예외 핸들러"""
    status_code = status_code_for(exc)
    logger.error(
        f"AppException occurred: [{exc.error_code}] {exc.message}",
        extra={
            "error_code": exc.error_code,
            "status_code": status_code,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
        },
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details or None,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    일반 예외 핸들러 (예상치 못한 모든 에러)

    500 Internal Server Error로 처리
    """
    logger.exception(
        f"Unexpected exception occurred: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
    )

    from ..config import settings

    details = {"error": str(exc), "type": type(exc).__name__} if settings.debug else None
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": ErrorCode.SYS_UNKNOWN_ERROR.value,
            "message": "Internal server error",
            "details": details,
        },
    )
