"""
Generative AI Worker Service - Main Application
워커 루프와 상태 확인 엔드포인트를 제공하는 FastAPI 애플리케이션
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Callable, Optional

from fastapi import FastAPI, Request

from .core.config import settings
from .core.database import Base, build_engine, build_session_factory
from .core.exceptions import AppException
from .core.exceptions.handlers import app_exception_handler, generic_exception_handler
from .core.logging import configure_logging
from .features.assets.service import AssetService
from .features.canvas.projection import CanvasProjector
from .features.canvas.repository import CanvasRepository
from .features.canvas.rooms import RoomManager
from .features.tasks.maintenance import TaskMaintenance
from .features.tasks.repository import TaskRepository
from .features.tasks.worker import GenerativeAIWorker
from .infrastructure.ai.factory import get_ai_factory
from .infrastructure.storage import get_storage_service

logger = logging.getLogger(__name__)


@dataclass
class WorkerRuntime:
    """lifespan 동안 유지되는 워커 구성요소"""

    worker: GenerativeAIWorker
    task_repository: TaskRepository
    maintenance: Optional[TaskMaintenance] = None
    room_manager: Optional[RoomManager] = None
    engine: Optional[object] = None
    background: list = field(default_factory=list)

    async def start(self) -> None:
        if settings.worker_enabled:
            await self.worker.start()
            logger.info(f"✓ Worker {self.worker.worker_id} started")
        else:
            logger.info("Worker disabled (WORKER_ENABLED=false)")

        if self.maintenance is not None:
            self.background.append(asyncio.create_task(self.maintenance.run()))

    async def stop(self) -> None:
        await self.worker.stop()
        drained = await self.worker.wait_idle(timeout=settings.worker_shutdown_timeout)
        if not drained:
            logger.warning(
                f"Worker shutdown timed out with {self.worker.in_flight} task(s) in flight"
            )

        if self.maintenance is not None:
            self.maintenance.stop()
        for task in self.background:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        if self.room_manager is not None:
            await self.room_manager.persist_pending()
        if self.engine is not None:
            await self.engine.dispose()


async def build_runtime() -> WorkerRuntime:
    """설정으로부터 워커 구성요소 생성"""
    engine = build_engine()
    if settings.app_env == "dev" and settings.debug:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("✓ Database tables created (development mode)")

    session_factory = build_session_factory(engine)
    task_repository = TaskRepository(session_factory)
    canvas_repository = CanvasRepository(session_factory)
    room_manager = RoomManager(canvas_repository)
    factory = get_ai_factory()

    worker = GenerativeAIWorker(
        task_store=task_repository,
        image_provider=factory.get_image_provider(),
        asset_store=AssetService(get_storage_service(), session_factory),
        title_provider=factory.get_title_provider(),
        projector=CanvasProjector(canvas_repository, room_manager),
    )
    return WorkerRuntime(
        worker=worker,
        task_repository=task_repository,
        maintenance=TaskMaintenance(task_repository, room_manager),
        room_manager=room_manager,
        engine=engine,
    )


def create_app(runtime_factory: Optional[Callable] = None) -> FastAPI:
    """
    애플리케이션 생성

    Args:
        runtime_factory: WorkerRuntime 을 만드는 async 함수 (테스트용)
    """
    runtime_factory = runtime_factory or build_runtime

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        애플리케이션 생명주기 관리

        Startup: 로깅 초기화, 워커/정리 루프 시작
        Shutdown: 워커 중지, 처리 중 작업 대기 (worker_shutdown_timeout)
        """
        configure_logging()
        logger.info(
            f"{settings.app_title} starting",
            extra={"version": settings.app_version, "environment": settings.app_env},
        )

        runtime = await runtime_factory()
        app.state.runtime = runtime
        await runtime.start()

        yield

        logger.info(f"{settings.app_title} shutting down")
        await runtime.stop()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    @app.get("/health", tags=["Health"])
    async def health_check():
        """헬스 체크 엔드포인트"""
        return {
            "status": "ok",
            "service": settings.app_title,
            "version": settings.app_version,
            "environment": settings.app_env,
        }

    @app.get("/worker/status", tags=["Worker"])
    async def worker_status(request: Request):
        """워커 상태와 큐 통계"""
        runtime: WorkerRuntime = request.app.state.runtime
        return {
            "worker": runtime.worker.get_status().model_dump(by_alias=True),
            "queue": await runtime.task_repository.get_queue_stats(),
            "rooms": runtime.room_manager.get_room_stats() if runtime.room_manager else None,
        }

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
    return app


app = create_app()
