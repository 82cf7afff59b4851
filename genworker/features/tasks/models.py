"""
Generative AI Task Models
비동기 생성 작업 큐 테이블
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import String, DateTime, Integer, Index, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from genworker.core.database.base import Base, JSONType


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskType(str, Enum):
    """작업 타입 (닫힌 집합)"""
    GENERATE_IMAGE = "generate_image"
    IMAGE_UPSCALE = "image_upscale"
    IMAGE_REMOVE_BACKGROUND = "image_remove_background"


class TaskStatus(str, Enum):
    """
    작업 상태

    클레임 여부는 status가 아니라 worker_id / claimed_at 으로만 표현됩니다.
    (워커가 죽으면 pending + claimed_at 이 남아 회수 대상이 됨)
    """
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class GenerativeAITask(Base):
    """
    생성형 AI 작업 모델

    body/result 는 프론트엔드와 공유하는 camelCase JSON 입니다.
    - body (generate_image): { modelId, modelParams, storageAssetId }
    - body (image_upscale): { sourceAssetId, factor }
    - body (image_remove_background): { sourceAssetId }
    - result (성공): { assetId, assetUrl, metadata }
    - result (실패): { errorMessage, errorCode, errorDetails }
    """
    __tablename__ = "generative_ai_tasks"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    task_type: Mapped[TaskType] = mapped_column(
        SQLEnum(
            TaskType,
            name="task_type_enum",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )

    # 소유자 / 프로젝트
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # 완료 시 갱신할 캔버스 shape (선택)
    shape_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    body: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    status: Mapped[TaskStatus] = mapped_column(
        SQLEnum(
            TaskStatus,
            name="task_status_enum",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=TaskStatus.PENDING,
    )
    result: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)

    # 재시도
    retry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_retries: Mapped[int] = mapped_column(Integer, nullable=False, default=3)

    # 워커 임대(lease)
    worker_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    claimed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        Index("idx_status_created", "status", "created_at"),
        Index("idx_user_project", "user_id", "project_id"),
        Index("idx_project_status", "project_id", "status"),
        Index("idx_status_claimed", "status", "claimed_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<GenerativeAITask(id={self.id}, type={self.task_type}, "
            f"status={self.status}, retry={self.retry_count}/{self.max_retries})>"
        )
