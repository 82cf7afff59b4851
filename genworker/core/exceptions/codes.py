"""
Error Code Definitions
에러 코드 정의
"""

from enum import Enum


class ErrorCode(str, Enum):
    """
    애플리케이션 에러 코드

    규칙:
    - TASK_xxx: 작업 처리 관련 에러
    - ASSET_xxx: 에셋 저장소 관련 에러
    - PROVIDER_xxx: 외부 AI Provider 에러
    - SYS_xxx: 시스템 에러
    """

    # ==================== Task (TASK_xxx) ====================
    TASK_MISSING_FIELD = "TASK_001"
    """작업 본문에 필수 필드가 누락되었습니다"""

    TASK_SOURCE_ASSET_NOT_FOUND = "TASK_002"
    """원본 에셋을 찾을 수 없습니다"""

    TASK_UNSUPPORTED_MODEL = "TASK_003"
    """지원하지 않는 이미지 모델입니다"""

    TASK_UNSUPPORTED_TYPE = "TASK_004"
    """지원하지 않는 작업 타입입니다"""

    # ==================== Asset (ASSET_xxx) ====================
    ASSET_TOO_LARGE = "ASSET_001"
    """에셋 크기가 허용치를 초과했습니다"""

    ASSET_ACCESS_DENIED = "ASSET_002"
    """에셋 접근 권한이 없습니다"""

    # ==================== Provider (PROVIDER_xxx) ====================
    PROVIDER_REQUEST_FAILED = "PROVIDER_001"
    """외부 AI Provider 요청이 실패했습니다"""

    PROVIDER_INVALID_RESPONSE = "PROVIDER_002"
    """외부 AI Provider 응답 형식이 올바르지 않습니다"""

    PROVIDER_NOT_CONFIGURED = "PROVIDER_003"
    """Provider 인증 정보가 설정되지 않았습니다"""

    PROVIDER_RATE_LIMITED = "PROVIDER_429"
    """외부 AI Provider 요청 한도를 초과했습니다"""

    # ==================== System (SYS_xxx) ====================
    SYS_UNKNOWN_ERROR = "UNKNOWN_ERROR"
    """알 수 없는 오류"""
