"""
Canvas Models
프로젝트당 하나의 캔버스와 그 스냅샷
"""
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from genworker.core.database.base import Base, JSONType
from genworker.features.tasks.models import utcnow


class Canvas(Base):
    """
    캔버스 모델

    snapshot: { "clock": int, "documents": [{ "state": record, "lastChangedClock": int }], ... }
    """
    __tablename__ = "canvases"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, unique=True, nullable=False, index=True)
    snapshot: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self):
        return f"<Canvas(id={self.id}, project_id={self.project_id})>"
