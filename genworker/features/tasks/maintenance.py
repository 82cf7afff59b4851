"""
Task Maintenance
오래된 클레임 해제, 오래된 작업 정리, 캔버스 스냅샷 저장을 주기적으로 수행
"""

import asyncio
import logging
from datetime import timedelta
from typing import Dict, Optional

from ...core.config import settings
from ..canvas.rooms import RoomManager
from .repository import TaskRepository

logger = logging.getLogger(__name__)


class TaskMaintenance:
    """주기적 정리 작업 (워커와 같은 이벤트 루프에서 실행)"""

    def __init__(
        self,
        repository: TaskRepository,
        room_manager: Optional[RoomManager] = None,
        interval: Optional[float] = None,
    ):
        self.repository = repository
        self.room_manager = room_manager
        self.interval = interval if interval is not None else settings.task_maintenance_interval
        self.running = False

    async def run_once(self) -> Dict[str, int]:
        released = await self.repository.release_stale_claims()
        archived = await self.repository.archive_old_tasks(
            timedelta(days=settings.task_archive_days)
        )
        persisted = await self.room_manager.persist_pending() if self.room_manager else 0

        if released or archived:
            logger.info(
                "Task maintenance",
                extra={"released": released, "archived": archived, "persisted": persisted},
            )
        return {"released": released, "archived": archived, "persisted": persisted}

    async def run(self) -> None:
        self.running = True
        while self.running:
            await asyncio.sleep(self.interval)
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Task maintenance failed: {e}", exc_info=True)

    def stop(self) -> None:
        self.running = False
