"""
Generative AI Worker
Task Store 를 폴링하여 생성형 AI 작업을 동시에 처리하는 워커
"""

import asyncio
import logging
import os
import time
import uuid
from typing import Dict, Optional, Protocol, Set

import structlog

from ...core.config import settings
from ...core.rate_limiter import SimpleRateLimiter
from ...infrastructure.ai.base import ImageProcessingProvider, TitleGenerationProvider
from .exceptions import UnsupportedTaskTypeError
from .outcomes import Success, TaskOutcome, Fatal, classify_exception
from .processors import ProcessorContext, TaskProcessor, build_processors
from .processors.base import AssetStore
from .repository import TaskStore
from .retry import error_message_of, resolve_task_update
from .schemas import Task, TaskResult, WorkerStatus

logger = logging.getLogger(__name__)


class ResultProjector(Protocol):
    """작업 결과를 캔버스 도형에 반영 (CanvasProjector 가 구현)"""

    async def project(self, task: Task, result: TaskResult) -> None: ...


class GenerativeAIWorker:
    """
    생성형 AI 워커

    - 폴링: 빈 슬롯(concurrency - 처리 중 작업 수)만큼 클레임
    - 디스패치: 작업마다 asyncio.Task 생성, 완료 콜백으로 처리 중 집합에서 제거
    - 처리 결과는 Success / Retryable / RateLimited / Fatal 로 분류되어
      resolve_task_update 가 상태 전이를 결정
    - stop() 은 플래그만 내리며 처리 중인 작업은 취소하지 않음
    """

    def __init__(
        self,
        task_store: TaskStore,
        image_provider: Optional[ImageProcessingProvider] = None,
        asset_store: Optional[AssetStore] = None,
        title_provider: Optional[TitleGenerationProvider] = None,
        projector: Optional[ResultProjector] = None,
        poll_interval: Optional[float] = None,
        concurrency: Optional[int] = None,
        rate_limit: Optional[float] = None,
        worker_id: Optional[str] = None,
        processors: Optional[Dict[str, TaskProcessor]] = None,
    ):
        """
        Args:
            task_store: 작업 저장소 (claim_tasks / update_task)
            image_provider: 이미지 처리 Provider
            asset_store: 에셋 저장소
            title_provider: 제목 생성 Provider (옵션)
            projector: 캔버스 반영기 (옵션)
            poll_interval: 폴링 간격 (초)
            concurrency: 최대 동시 처리 작업 수
            rate_limit: 외부 API 초당 요청 수
            worker_id: 워커 ID (None이면 자동 생성)
            processors: 작업 타입별 처리기 (None이면 기본 처리기 생성)
        """
        self.task_store = task_store
        self.projector = projector
        self.poll_interval = poll_interval if poll_interval is not None else settings.worker_poll_interval
        self.concurrency = concurrency or settings.worker_concurrency
        self.worker_id = worker_id or f"worker-{os.getpid()}-{uuid.uuid4().hex[:8]}"
        self.rate_limiter = SimpleRateLimiter(rate_limit or settings.replicate_rate_limit)

        if processors is None:
            if image_provider is None or asset_store is None:
                raise ValueError("image_provider and asset_store are required without processors")
            processors = build_processors(
                ProcessorContext(
                    image_provider=image_provider,
                    asset_store=asset_store,
                    rate_limiter=self.rate_limiter,
                    title_provider=title_provider,
                )
            )
        self.processors = processors

        self.running = False
        self._active_tasks: Set[asyncio.Task] = set()
        self._loop_task: Optional[asyncio.Task] = None

    # ==================== Lifecycle ====================

    @property
    def in_flight(self) -> int:
        """현재 처리 중인 작업 수"""
        return len(self._active_tasks)

    async def start(self) -> None:
        """워커 시작 (이미 실행 중이면 무시, 종료 대기 중인 루프가 있으면 재사용)"""
        if self.running:
            logger.warning(f"[Worker] Worker {self.worker_id} is already running")
            return

        self.running = True
        if self._loop_task is not None and not self._loop_task.done():
            # stop() 직후 재시작: 아직 sleep 중인 기존 루프가 계속 폴링
            logger.info(f"[Worker] Resuming worker {self.worker_id}")
            return

        logger.info(
            f"[Worker] Starting worker {self.worker_id}",
            extra={
                "concurrency": self.concurrency,
                "poll_interval": self.poll_interval,
                "rate_limit": self.rate_limiter.get_rate(),
            },
        )
        self._loop_task = asyncio.create_task(self._run_loop())

    async def stop(self) -> None:
        """워커 중지 (현재 sleep 이후 루프 종료, 처리 중 작업은 계속 진행)"""
        if not self.running:
            return
        logger.info(f"[Worker] Stopping worker {self.worker_id}")
        self.running = False

    async def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        루프와 처리 중 작업이 끝날 때까지 대기

        루프가 먼저 끝나야 이후 디스패치가 없으므로, 루프 종료 후
        그 시점의 처리 중 작업을 다시 기다립니다. timeout 은 전체 대기에 적용됩니다.

        Returns:
            bool: timeout 안에 모두 끝났으면 True
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        def remaining() -> Optional[float]:
            return None if deadline is None else max(0.0, deadline - loop.time())

        if self._loop_task is not None and not self._loop_task.done():
            done, _ = await asyncio.wait({self._loop_task}, timeout=remaining())
            if not done:
                return False

        while self._active_tasks:
            _, not_done = await asyncio.wait(set(self._active_tasks), timeout=remaining())
            if not_done:
                return False
        return True

    def get_status(self) -> WorkerStatus:
        return WorkerStatus(
            worker_id=self.worker_id,
            is_running=self.running,
            current_tasks=self.in_flight,
            concurrency=self.concurrency,
            rate_limit=self.rate_limiter.get_rate(),
        )

    # ==================== Polling ====================

    async def _run_loop(self) -> None:
        structlog.contextvars.bind_contextvars(worker_id=self.worker_id)
        while self.running:
            try:
                await self.poll_once()
                await asyncio.sleep(self.poll_interval)
            except Exception as e:
                logger.error(f"[Worker] Error in worker loop: {e}", exc_info=True)
                await asyncio.sleep(self.poll_interval * 2)

        logger.info(f"[Worker] Worker {self.worker_id} stopped")

    async def poll_once(self) -> int:
        """
        한 번 폴링하여 빈 슬롯만큼 클레임 후 디스패치

        Returns:
            int: 디스패치한 작업 수
        """
        available_slots = self.concurrency - self.in_flight
        if available_slots <= 0:
            return 0

        tasks = await self.task_store.claim_tasks(self.worker_id, available_slots)
        if tasks:
            logger.info(f"[Worker] Claimed {len(tasks)} task(s)")

        for task in tasks:
            self._dispatch(task)
        return len(tasks)

    def _dispatch(self, task: Task) -> None:
        """처리 중 집합에 동기적으로 등록 후 백그라운드 실행"""
        handle = asyncio.create_task(self._handle_task(task, time.monotonic()))
        self._active_tasks.add(handle)
        handle.add_done_callback(self._active_tasks.discard)

    # ==================== Task Handling ====================

    async def _handle_task(self, task: Task, started_at: float) -> None:
        """단일 작업 처리: 실행 -> (캔버스 반영) -> 상태 전이 저장"""
        structlog.contextvars.bind_contextvars(task_id=str(task.id))
        logger.info(f"[Worker] Processing task {task.id} ({task.task_type})")

        outcome = await self._execute(task)

        if isinstance(outcome, Success) and task.shape_id and self.projector is not None:
            await self._project(task, outcome.result)

        processing_time = round(time.monotonic() - started_at, 3)
        update = resolve_task_update(task, outcome, processing_time)

        try:
            await self.task_store.update_task(task.id, update)
        except Exception as e:
            logger.error(
                f"[Worker] Failed to persist outcome for task {task.id}: {e}",
                exc_info=True,
            )
            return

        if isinstance(outcome, Success):
            logger.info(f"[Worker] Task {task.id} completed in {processing_time:.2f}s")

    async def _execute(self, task: Task) -> TaskOutcome:
        task_type = getattr(task.task_type, "value", task.task_type)
        processor = self.processors.get(task_type)
        if processor is None:
            error = UnsupportedTaskTypeError(str(task_type))
            logger.error(f"[Worker] Task {task.id} failed: {error}")
            return Fatal(error)

        try:
            return Success(await processor.process(task))
        except Exception as e:
            logger.error(f"[Worker] Task {task.id} failed: {error_message_of(e)}", exc_info=True)
            return classify_exception(e)

    async def _project(self, task: Task, result: TaskResult) -> None:
        """캔버스 반영 실패는 로그만 남기고 작업은 계속 완료 처리"""
        try:
            await self.projector.project(task, result)
        except Exception as e:
            logger.error(
                f"[Worker] Failed to update canvas for task {task.id}: {e}",
                exc_info=True,
            )
