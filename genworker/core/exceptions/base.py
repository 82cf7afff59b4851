"""
Base Exception Classes
기본 예외 클래스
"""

from enum import Enum
from typing import Optional, Dict, Any, Union


class AppException(Exception):
    """
    애플리케이션 기본 예외

    모든 커스텀 예외의 베이스 클래스.
    워커가 작업을 최종 실패 처리할 때 error_code가 result.errorCode로 기록됩니다.
    """

    def __init__(
        self,
        error_code: Union[str, Enum],
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            error_code: 에러 코드 (예: TASK_001)
            message: 에러 메시지
            details: 추가 에러 정보 (선택사항)
        """
        self.error_code = error_code.value if isinstance(error_code, Enum) else error_code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"error_code={self.error_code!r}, "
            f"message={self.message!r})"
        )


class ValidationException(AppException):
    """
    검증 실패 예외

    작업 본문 등 입력 데이터 검증에 실패한 경우 발생
    """
    pass


class NotFoundException(AppException):
    """
    리소스 없음 예외

    요청한 리소스를 찾을 수 없는 경우 발생
    """
    pass


class AuthorizationException(AppException):
    """
    권한 부족 예외

    다른 사용자의 리소스에 접근하려는 경우 발생
    """
    pass


class BusinessLogicException(AppException):
    """
    비즈니스 로직 예외

    비즈니스 규칙 위반 시 발생
    """
    pass


class ExternalServiceException(AppException):
    """
    외부 서비스 예외

    외부 API 호출 실패 시 발생. status_code는 업스트림 HTTP 상태 코드입니다.
    """

    def __init__(
        self,
        error_code: Union[str, Enum],
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(error_code=error_code, message=message, details=details)
        self.status_code = status_code
