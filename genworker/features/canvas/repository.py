"""
Canvas Repository
캔버스 조회 및 스냅샷 저장
"""
import uuid
from typing import Any, Dict, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..tasks.models import utcnow
from .models import Canvas


class CanvasRepository:
    """캔버스 레포지토리 (프로젝트 : 캔버스 = 1 : 1)"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def create_canvas(
        self, project_id: uuid.UUID, snapshot: Optional[Dict[str, Any]] = None
    ) -> uuid.UUID:
        async with self.session_factory() as session:
            canvas = Canvas(project_id=project_id, snapshot=snapshot)
            session.add(canvas)
            await session.commit()
            return canvas.id

    async def get_canvas_id_by_project_id(self, project_id: uuid.UUID) -> Optional[uuid.UUID]:
        """프로젝트의 캔버스 ID (없으면 None)"""
        async with self.session_factory() as session:
            result = await session.execute(
                select(Canvas.id).where(Canvas.project_id == project_id)
            )
            return result.scalar_one_or_none()

    async def get_snapshot(self, canvas_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Canvas.snapshot).where(Canvas.id == canvas_id)
            )
            return result.scalar_one_or_none()

    async def save_snapshot(self, canvas_id: uuid.UUID, snapshot: Dict[str, Any]) -> None:
        async with self.session_factory() as session:
            await session.execute(
                update(Canvas)
                .where(Canvas.id == canvas_id)
                .values(snapshot=snapshot, updated_at=utcnow())
            )
            await session.commit()
