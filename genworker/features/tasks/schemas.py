"""
Task Schemas
작업 큐에서 주고받는 데이터 구조 정의
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import TaskStatus, TaskType


class CamelModel(BaseModel):
    """body/result JSON 은 camelCase 키를 사용"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        protected_namespaces=(),
    )

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Task(BaseModel):
    """
    워커가 처리하는 작업 (Task Store 레코드의 스냅샷)

    task_type 은 알 수 없는 값도 그대로 보존하여 워커에서 Fatal 로 처리합니다.
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    task_type: Union[TaskType, str]
    user_id: str
    project_id: uuid.UUID
    shape_id: Optional[str] = None
    body: Dict[str, Any] = Field(default_factory=dict)
    status: TaskStatus = TaskStatus.PENDING
    result: Optional[Dict[str, Any]] = None
    retry_count: int = 0
    max_retries: int = 3
    worker_id: Optional[str] = None
    claimed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


# ==================== Task Bodies ====================


class GenerateImageBody(CamelModel):
    """generate_image 본문: { modelId, modelParams, storageAssetId }"""

    model_id: Optional[str] = None
    model_params: Optional[Dict[str, Any]] = None
    storage_asset_id: Optional[str] = None


class UpscaleBody(CamelModel):
    """image_upscale 본문: { sourceAssetId, factor }"""

    source_asset_id: Optional[str] = None
    factor: Optional[Any] = None


class RemoveBackgroundBody(CamelModel):
    """image_remove_background 본문: { sourceAssetId }"""

    source_asset_id: Optional[str] = None


# ==================== Task Results ====================


class TaskResult(CamelModel):
    """
    성공 결과

    metadata 키 예시: width, height, fileSize, title, processingTime,
    sourceAssetId, factor
    """

    asset_id: str
    asset_url: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class TaskFailure(CamelModel):
    """최종 실패 결과"""

    error_message: str
    error_code: str
    error_details: Dict[str, Any] = Field(default_factory=dict)


class TaskUpdate(BaseModel):
    """
    update_task() 에 전달되는 패치

    명시적으로 설정된 필드만 반영됩니다 (None 도 "지우기"로 반영).
    """

    status: Optional[TaskStatus] = None
    result: Optional[Dict[str, Any]] = None
    retry_count: Optional[int] = None
    worker_id: Optional[str] = None
    claimed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class WorkerStatus(CamelModel):
    """워커 상태 (헬스 체크용)"""

    worker_id: str
    is_running: bool
    current_tasks: int
    concurrency: int
    rate_limit: float
