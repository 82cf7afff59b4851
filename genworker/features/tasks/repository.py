"""
Task Repository
generative_ai_tasks 테이블 데이터 접근 계층 (Task Store)
"""

import logging
import uuid
from datetime import timedelta
from typing import Any, Dict, List, Optional, Protocol, Union

from sqlalchemy import delete, func, select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...core.config import settings
from .models import GenerativeAITask, TaskStatus, TaskType, utcnow
from .schemas import Task, TaskUpdate

logger = logging.getLogger(__name__)


class TaskStore(Protocol):
    """워커가 사용하는 최소 작업 저장소 인터페이스"""

    async def claim_tasks(self, worker_id: str, max_count: int) -> List[Task]: ...

    async def update_task(self, task_id: uuid.UUID, patch: TaskUpdate) -> Optional[Task]: ...


class TaskRepository:
    """
    작업 레포지토리

    여러 워커가 같은 테이블을 공유하며, 클레임은 SELECT ... FOR UPDATE SKIP LOCKED 로
    상호 배제합니다. 클레임된 작업은 status 가 pending 으로 유지되고
    worker_id / claimed_at 으로만 표시됩니다.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        stale_claim_minutes: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.stale_claim_after = timedelta(
            minutes=stale_claim_minutes
            if stale_claim_minutes is not None
            else settings.task_stale_claim_minutes
        )

    async def create_task(
        self,
        task_type: Union[TaskType, str],
        user_id: str,
        project_id: uuid.UUID,
        body: Dict[str, Any],
        shape_id: Optional[str] = None,
        max_retries: Optional[int] = None,
    ) -> Task:
        """작업 생성 (pending)"""
        async with self.session_factory() as session:
            record = GenerativeAITask(
                task_type=TaskType(task_type),
                user_id=user_id,
                project_id=project_id,
                shape_id=shape_id,
                body=body,
                status=TaskStatus.PENDING,
                max_retries=(
                    max_retries if max_retries is not None else settings.task_default_max_retries
                ),
            )
            session.add(record)
            await session.commit()
            await session.refresh(record)
            return Task.model_validate(record)

    async def get_task(self, task_id: uuid.UUID, user_id: Optional[str] = None) -> Optional[Task]:
        """작업 조회 (user_id 지정 시 소유자 작업만)"""
        async with self.session_factory() as session:
            record = await session.get(GenerativeAITask, task_id)
            if record is None or (user_id is not None and record.user_id != user_id):
                return None
            return Task.model_validate(record)

    async def list_tasks(
        self,
        user_id: Optional[str] = None,
        project_id: Optional[uuid.UUID] = None,
        task_type: Optional[Union[TaskType, str]] = None,
        status: Optional[TaskStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Task]:
        """작업 목록 (최신순)"""
        query = select(GenerativeAITask)
        if user_id is not None:
            query = query.where(GenerativeAITask.user_id == user_id)
        if project_id is not None:
            query = query.where(GenerativeAITask.project_id == project_id)
        if task_type is not None:
            query = query.where(GenerativeAITask.task_type == TaskType(task_type))
        if status is not None:
            query = query.where(GenerativeAITask.status == status)
        query = query.order_by(GenerativeAITask.created_at.desc()).limit(limit).offset(offset)

        async with self.session_factory() as session:
            result = await session.execute(query)
            return [Task.model_validate(record) for record in result.scalars().all()]

    async def claim_tasks(self, worker_id: str, max_count: int) -> List[Task]:
        """
        처리 대기 작업 클레임

        pending 이면서 클레임되지 않았거나 클레임이 오래된(stale) 작업을
        생성 순서대로 최대 max_count 개 가져와 worker_id / claimed_at 을 기록합니다.

        Args:
            worker_id: 워커 ID
            max_count: 최대 클레임 수

        Returns:
            List[Task]: 클레임된 작업 (없으면 빈 목록)
        """
        if max_count <= 0:
            return []

        now = utcnow()
        cutoff = now - self.stale_claim_after

        async with self.session_factory() as session:
            candidates = (
                select(GenerativeAITask.id)
                .where(
                    GenerativeAITask.status == TaskStatus.PENDING,
                    or_(
                        GenerativeAITask.claimed_at.is_(None),
                        GenerativeAITask.claimed_at < cutoff,
                    ),
                )
                .order_by(GenerativeAITask.created_at.asc())
                .limit(max_count)
                .with_for_update(skip_locked=True)
            )
            ids = list((await session.execute(candidates)).scalars().all())
            if not ids:
                await session.rollback()
                return []

            await session.execute(
                update(GenerativeAITask)
                .where(GenerativeAITask.id.in_(ids))
                .values(worker_id=worker_id, claimed_at=now, started_at=now, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            await session.commit()

            result = await session.execute(
                select(GenerativeAITask)
                .where(GenerativeAITask.id.in_(ids))
                .order_by(GenerativeAITask.created_at.asc())
                .execution_options(populate_existing=True)
            )
            tasks = [Task.model_validate(record) for record in result.scalars().all()]

        logger.debug(f"Worker {worker_id} claimed {len(tasks)} task(s)")
        return tasks

    async def update_task(self, task_id: uuid.UUID, patch: TaskUpdate) -> Optional[Task]:
        """
        작업 패치 적용

        TaskUpdate 에 명시된 필드만 반영합니다.
        """
        values = patch.changes()
        values["updated_at"] = utcnow()

        async with self.session_factory() as session:
            await session.execute(
                update(GenerativeAITask)
                .where(GenerativeAITask.id == task_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            record = await session.get(GenerativeAITask, task_id, populate_existing=True)
            return Task.model_validate(record) if record else None

    async def release_stale_claims(self, older_than: Optional[timedelta] = None) -> int:
        """
        오래된 클레임 해제

        워커가 죽어 pending + claimed_at 이 남은 작업을 다시 클레임 가능하게 만듭니다.

        Returns:
            int: 해제된 작업 수
        """
        cutoff = utcnow() - (older_than or self.stale_claim_after)
        async with self.session_factory() as session:
            result = await session.execute(
                update(GenerativeAITask)
                .where(
                    GenerativeAITask.status == TaskStatus.PENDING,
                    GenerativeAITask.claimed_at.is_not(None),
                    GenerativeAITask.claimed_at < cutoff,
                )
                .values(worker_id=None, claimed_at=None, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount or 0

    async def archive_old_tasks(self, older_than: Optional[timedelta] = None) -> int:
        """
        완료/실패 후 오래된 작업 삭제

        Returns:
            int: 삭제된 작업 수
        """
        cutoff = utcnow() - (older_than or timedelta(days=settings.task_archive_days))
        async with self.session_factory() as session:
            result = await session.execute(
                delete(GenerativeAITask)
                .where(
                    GenerativeAITask.status.in_([TaskStatus.COMPLETED, TaskStatus.FAILED]),
                    GenerativeAITask.completed_at < cutoff,
                )
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount or 0

    async def get_queue_stats(self) -> Dict[str, int]:
        """
        상태별 작업 수

        claimed 는 pending 중 현재 워커가 잡고 있는 작업 수입니다.
        """
        stats = {status.value: 0 for status in TaskStatus}
        async with self.session_factory() as session:
            result = await session.execute(
                select(GenerativeAITask.status, func.count()).group_by(GenerativeAITask.status)
            )
            for status, count in result.all():
                stats[TaskStatus(status).value] = count

            claimed = await session.execute(
                select(func.count()).where(
                    GenerativeAITask.status == TaskStatus.PENDING,
                    GenerativeAITask.worker_id.is_not(None),
                )
            )
            stats["claimed"] = claimed.scalar_one()
        return stats
