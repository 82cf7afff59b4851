"""
Task Retry Policy
처리 결과(TaskOutcome)를 작업 상태 전이(TaskUpdate)로 변환
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ...core.exceptions import ErrorCode
from .models import TaskStatus
from .outcomes import Fatal, RateLimited, Retryable, Success, TaskOutcome
from .schemas import Task, TaskFailure, TaskUpdate

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Unknown error"


def error_code_of(error: BaseException) -> str:
    """예외의 에러 코드 (없으면 UNKNOWN_ERROR)"""
    code = getattr(error, "error_code", None) or getattr(error, "code", None)
    if isinstance(code, Enum):
        code = code.value
    if not code:
        return ErrorCode.SYS_UNKNOWN_ERROR.value
    return str(code)


def error_message_of(error: BaseException) -> str:
    return str(error) or DEFAULT_ERROR_MESSAGE


def build_failure(task: Task, error: BaseException) -> TaskFailure:
    """최종 실패 결과 생성 (시도 횟수 = retry_count + 1)"""
    message = error_message_of(error)
    return TaskFailure(
        error_message=message,
        error_code=error_code_of(error),
        error_details={
            "attempts": task.retry_count + 1,
            "lastError": message,
        },
    )


def resolve_task_update(
    task: Task,
    outcome: TaskOutcome,
    processing_time: float,
    now: Optional[datetime] = None,
) -> TaskUpdate:
    """
    작업 결과에 따른 상태 전이 결정

    Args:
        task: 클레임 시점의 작업
        outcome: 처리 결과
        processing_time: 디스패치부터 완료까지 걸린 시간 (초)
        now: 완료 시각 (테스트용)

    Returns:
        TaskUpdate: Task Store 에 반영할 패치
    """
    now = now or datetime.now(timezone.utc)

    if isinstance(outcome, Success):
        result = outcome.result.model_copy(
            update={"metadata": {**outcome.result.metadata, "processingTime": processing_time}}
        )
        return TaskUpdate(
            status=TaskStatus.COMPLETED,
            result=result.to_json_dict(),
            completed_at=now,
        )

    if isinstance(outcome, RateLimited):
        logger.info(f"[Worker] Task {task.id} hit rate limit, retrying without penalty")
        return TaskUpdate(status=TaskStatus.PENDING, worker_id=None, claimed_at=None)

    if isinstance(outcome, Retryable) and task.retry_count < task.max_retries:
        logger.info(
            f"[Worker] Task {task.id} retry {task.retry_count + 1}/{task.max_retries}"
        )
        return TaskUpdate(
            status=TaskStatus.PENDING,
            retry_count=task.retry_count + 1,
            worker_id=None,
            claimed_at=None,
        )

    if isinstance(outcome, (Retryable, Fatal)):
        logger.error(
            f"[Worker] Task {task.id} failed permanently after {task.retry_count} retries",
            extra={"task_id": str(task.id), "error": error_message_of(outcome.error)},
        )
        return TaskUpdate(
            status=TaskStatus.FAILED,
            result=build_failure(task, outcome.error).to_json_dict(),
            completed_at=now,
        )

    raise TypeError(f"Unhandled task outcome: {outcome!r}")
