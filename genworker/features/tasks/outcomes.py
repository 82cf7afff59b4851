"""
Task Outcomes
처리 결과를 태그된 타입으로 표현하고 예외를 분류

처리기(processor)는 예외를 던지고, 워커는 execute 단계에서 이를
Success / Retryable / RateLimited / Fatal 중 하나로 변환합니다.
재시도 정책(retry.resolve_task_update)은 이 타입만 소비합니다.
"""

from dataclasses import dataclass
from typing import Union

import httpx

from .exceptions import UnsupportedTaskTypeError
from .schemas import TaskResult


@dataclass(frozen=True)
class Success:
    """처리 성공"""
    result: TaskResult


@dataclass(frozen=True)
class Retryable:
    """재시도 예산을 소모하는 실패"""
    error: BaseException


@dataclass(frozen=True)
class RateLimited:
    """업스트림 속도 제한 (재시도 예산 소모 없음)"""
    error: BaseException


@dataclass(frozen=True)
class Fatal:
    """재시도해도 의미 없는 실패 (즉시 failed)"""
    error: BaseException


TaskOutcome = Union[Success, Retryable, RateLimited, Fatal]

RATE_LIMIT_STATUS = 429
RATE_LIMIT_MARKERS = ("429", "rate limit")


def is_rate_limit_error(error: BaseException) -> bool:
    """
    HTTP 429 또는 속도 제한 메시지 여부 확인

    - error.status_code / error.status == 429
    - httpx.HTTPStatusError 의 response.status_code == 429
    - 메시지에 "429" 또는 "rate limit" 포함
    """
    for attr in ("status_code", "status"):
        if getattr(error, attr, None) == RATE_LIMIT_STATUS:
            return True

    if isinstance(error, httpx.HTTPStatusError):
        if error.response is not None and error.response.status_code == RATE_LIMIT_STATUS:
            return True

    message = str(error).lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


def classify_exception(error: BaseException) -> TaskOutcome:
    """처리 중 발생한 예외를 결과 타입으로 분류"""
    if is_rate_limit_error(error):
        return RateLimited(error)
    if isinstance(error, UnsupportedTaskTypeError):
        return Fatal(error)
    return Retryable(error)
