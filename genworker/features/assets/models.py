"""
Asset Models
오브젝트 스토리지에 저장된 바이너리 에셋의 메타데이터
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime, BigInteger, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from genworker.core.database.base import Base
from genworker.features.tasks.models import utcnow


class Asset(Base):
    """
    에셋 메타데이터 모델

    실제 파일은 스토리지(R2/로컬)에 있고, DB에는 위치 정보만 저장합니다.
    oss_key 형식: assets/{user_id}/{asset_id}
    """
    __tablename__ = "assets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    asset_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    oss_provider: Mapped[str] = mapped_column(String(50), nullable=False)
    oss_bucket: Mapped[str] = mapped_column(String(255), nullable=False)
    oss_key: Mapped[str] = mapped_column(String(1024), nullable=False)
    oss_etag: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    content_type: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    original_filename: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def __repr__(self):
        return f"<Asset(asset_id={self.asset_id}, user_id={self.user_id}, size={self.file_size})>"
