"""
AI Provider Exceptions
외부 AI API 호출 관련 예외
"""

from typing import Any, Dict, Optional

from ...core.exceptions import ErrorCode, ExternalServiceException, ValidationException


class ProviderError(ExternalServiceException):
    """AI 제공자 호출 실패 (status_code 는 업스트림 HTTP 상태)"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: ErrorCode = ErrorCode.PROVIDER_REQUEST_FAILED,
    ):
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=status_code,
            details=details,
        )


class ProviderRateLimitError(ProviderError):
    """업스트림 속도 제한 (HTTP 429)"""

    def __init__(self, message: str = "Provider rate limit exceeded (429)", details=None):
        super().__init__(
            message=message,
            status_code=429,
            details=details,
            error_code=ErrorCode.PROVIDER_RATE_LIMITED,
        )


class UnsupportedModelError(ValidationException):
    """지원하지 않는 이미지 생성 모델"""

    def __init__(self, model_id: str):
        super().__init__(
            error_code=ErrorCode.TASK_UNSUPPORTED_MODEL,
            message=f"Unknown or unsupported image model: {model_id}",
            details={"model_id": model_id},
        )
