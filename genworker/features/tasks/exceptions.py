"""
Task Domain Exceptions
작업 처리 전용 커스텀 예외
"""

from ...core.exceptions import (
    BusinessLogicException,
    NotFoundException,
    ValidationException,
    ErrorCode,
)
from ...infrastructure.ai.exceptions import UnsupportedModelError  # noqa: F401


class TaskValidationError(ValidationException):
    """작업 본문 필수 필드 누락 (재시도 예산을 소모하는 일반 실패)"""

    def __init__(self, field: str):
        super().__init__(
            error_code=ErrorCode.TASK_MISSING_FIELD,
            message=f"Missing {field} in task body",
            details={"field": field},
        )


class SourceAssetNotFoundError(NotFoundException):
    """원본 에셋 없음"""

    def __init__(self, asset_id: str):
        super().__init__(
            error_code=ErrorCode.TASK_SOURCE_ASSET_NOT_FOUND,
            message=f"Source asset not found: {asset_id}",
            details={"asset_id": asset_id},
        )


class UnsupportedTaskTypeError(BusinessLogicException):
    """
    처리기가 없는 작업 타입

    재시도해도 해결되지 않으므로 워커가 즉시 failed 로 전환합니다.
    """

    def __init__(self, task_type: str):
        super().__init__(
            error_code=ErrorCode.TASK_UNSUPPORTED_TYPE,
            message=f"Unknown task type: {task_type}",
            details={"task_type": task_type},
        )
