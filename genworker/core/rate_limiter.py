"""
Simple Rate Limiter
요청 간 최소 간격을 보장하는 인프로세스 속도 제한기

Redis 없이 같은 프로세스 안의 워커가 외부 API(Replicate 등)의
초당 요청 한도를 넘지 않도록 연속 요청 사이에 최소 지연을 둡니다.
토큰 버킷/버스트 허용은 없으며, 동시에 대기 중인 호출 간 순서 보장도 없습니다.
"""

import asyncio
import logging
import time

logger = logging.getLogger(__name__)


class SimpleRateLimiter:
    """
    최소 지연 기반 속도 제한기 (단일 슬롯)

    같은 Provider 한도를 공유하는 모든 호출은 동일 인스턴스를 통해
    외부 요청 직전에 acquire()를 호출해야 합니다.

    Attributes:
        min_delay: 요청 간 최소 간격 (밀리초)
    """

    def __init__(self, requests_per_second: float):
        """
        Args:
            requests_per_second: 초당 최대 요청 수 (예: 50 → 20ms 간격)
        """
        self.min_delay = self._to_delay(requests_per_second)
        self._last_request_time = 0.0

    @staticmethod
    def _to_delay(requests_per_second: float) -> float:
        if requests_per_second <= 0:
            raise ValueError(
                f"requests_per_second must be positive, got {requests_per_second}"
            )
        return 1000.0 / requests_per_second

    @staticmethod
    def _now_ms() -> float:
        return time.monotonic() * 1000.0

    async def acquire(self) -> None:
        """
        요청 허가 획득

        마지막 허가 이후 경과 시간이 최소 지연보다 짧으면 남은 시간만큼 대기한 뒤
        새 허가 시각을 기록합니다. 예외를 발생시키지 않습니다.
        """
        elapsed = self._now_ms() - self._last_request_time

        if elapsed < self.min_delay:
            wait_ms = self.min_delay - elapsed
            logger.debug(f"Rate limiter waiting {wait_ms:.1f}ms")
            await asyncio.sleep(wait_ms / 1000.0)

        self._last_request_time = self._now_ms()

    def set_rate(self, requests_per_second: float) -> None:
        """
        런타임에 속도 변경 (이미 대기 중인 acquire()에는 영향 없음)

        Args:
            requests_per_second: 새 초당 요청 수
        """
        self.min_delay = self._to_delay(requests_per_second)
        logger.info(f"Rate limit updated: {requests_per_second} req/sec")

    def get_rate(self) -> float:
        """현재 초당 요청 수"""
        return 1000.0 / self.min_delay
