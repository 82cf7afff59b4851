"""
작업 결과 분류 및 재시도 정책 단위 테스트
"""

from datetime import datetime, timezone

import httpx
import pytest

from genworker.core.exceptions import ErrorCode
from genworker.features.tasks.exceptions import TaskValidationError, UnsupportedTaskTypeError
from genworker.features.tasks.models import TaskStatus
from genworker.features.tasks.outcomes import (
    Fatal,
    RateLimited,
    Retryable,
    Success,
    classify_exception,
    is_rate_limit_error,
)
from genworker.features.tasks.retry import resolve_task_update
from genworker.features.tasks.schemas import TaskResult
from genworker.infrastructure.ai.exceptions import ProviderError, ProviderRateLimitError

from ..conftest import make_task

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class StatusError(Exception):
    def __init__(self, message="boom", status=None):
        super().__init__(message)
        self.status = status


class TestRateLimitClassification:
    @pytest.mark.parametrize(
        "error",
        [
            ProviderRateLimitError(),
            ProviderError("upstream", status_code=429),
            StatusError(status=429),
            Exception("Request failed with status 429"),
            Exception("Rate limit exceeded"),
        ],
    )
    def test_rate_limited_errors(self, error):
        assert is_rate_limit_error(error)
        assert isinstance(classify_exception(error), RateLimited)

    def test_httpx_status_error_429(self):
        request = httpx.Request("POST", "https://api.replicate.com/v1/predictions")
        response = httpx.Response(429, request=request)
        error = httpx.HTTPStatusError("Too Many Requests", request=request, response=response)

        assert is_rate_limit_error(error)

    @pytest.mark.parametrize(
        "error",
        [
            ProviderError("server exploded", status_code=500),
            TaskValidationError("prompt"),
            Exception("connection reset"),
        ],
    )
    def test_other_errors_are_retryable(self, error):
        assert not is_rate_limit_error(error)
        assert isinstance(classify_exception(error), Retryable)

    def test_unsupported_task_type_is_fatal(self):
        assert isinstance(classify_exception(UnsupportedTaskTypeError("video")), Fatal)


class TestResolveTaskUpdate:
    def test_success_completes_with_processing_time(self):
        task = make_task()
        result = TaskResult(asset_id="asset:1", asset_url="http://test/v1/assets/asset:1", metadata={"width": 1024})

        update = resolve_task_update(task, Success(result), processing_time=1.25, now=NOW)

        assert update.status == TaskStatus.COMPLETED
        assert update.completed_at == NOW
        assert update.result == {
            "assetId": "asset:1",
            "assetUrl": "http://test/v1/assets/asset:1",
            "metadata": {"width": 1024, "processingTime": 1.25},
        }
        assert "retry_count" not in update.changes()

    def test_rate_limited_requeues_without_penalty(self):
        """Given retry_count=2, When 429, Then pending + retry_count 유지 + 리스 해제"""
        task = make_task(retry_count=2, max_retries=3)

        update = resolve_task_update(task, RateLimited(ProviderRateLimitError()), 0.1, now=NOW)

        assert update.changes() == {
            "status": TaskStatus.PENDING,
            "worker_id": None,
            "claimed_at": None,
        }

    def test_rate_limited_even_when_budget_exhausted(self):
        task = make_task(retry_count=3, max_retries=3)

        update = resolve_task_update(task, RateLimited(Exception("rate limit")), 0.1, now=NOW)

        assert update.status == TaskStatus.PENDING
        assert "retry_count" not in update.changes()

    @pytest.mark.parametrize("retry_count", [0, 1, 2])
    def test_retryable_increments_retry_count(self, retry_count):
        task = make_task(retry_count=retry_count, max_retries=3)

        update = resolve_task_update(task, Retryable(Exception("boom")), 0.1, now=NOW)

        assert update.changes() == {
            "status": TaskStatus.PENDING,
            "retry_count": retry_count + 1,
            "worker_id": None,
            "claimed_at": None,
        }

    def test_exhausted_retries_fail_with_diagnostics(self):
        task = make_task(retry_count=3, max_retries=3)
        error = ProviderError("Replicate API error 500", status_code=500)

        update = resolve_task_update(task, Retryable(error), 0.1, now=NOW)

        assert update.status == TaskStatus.FAILED
        assert update.completed_at == NOW
        assert update.result == {
            "errorMessage": "Replicate API error 500",
            "errorCode": ErrorCode.PROVIDER_REQUEST_FAILED.value,
            "errorDetails": {"attempts": 4, "lastError": "Replicate API error 500"},
        }

    def test_plain_exception_defaults_to_unknown_error(self):
        task = make_task(retry_count=0, max_retries=0)

        update = resolve_task_update(task, Retryable(RuntimeError("kaput")), 0.1, now=NOW)

        assert update.result["errorCode"] == "UNKNOWN_ERROR"
        assert update.result["errorDetails"]["attempts"] == 1

    def test_empty_message_defaults_to_unknown_error_message(self):
        task = make_task(retry_count=0, max_retries=0)

        update = resolve_task_update(task, Retryable(RuntimeError()), 0.1, now=NOW)

        assert update.result["errorMessage"] == "Unknown error"

    def test_fatal_fails_immediately(self):
        task = make_task(task_type="video_generate", retry_count=0, max_retries=3)

        update = resolve_task_update(task, Fatal(UnsupportedTaskTypeError("video_generate")), 0.1, now=NOW)

        assert update.status == TaskStatus.FAILED
        assert update.result["errorCode"] == ErrorCode.TASK_UNSUPPORTED_TYPE.value
        assert update.result["errorMessage"] == "Unknown task type: video_generate"

    def test_unknown_outcome_rejected(self):
        with pytest.raises(TypeError):
            resolve_task_update(make_task(), object(), 0.1, now=NOW)
