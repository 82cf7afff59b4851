"""
SimpleRateLimiter 단위 테스트
"""

import time

import pytest

from genworker.core.rate_limiter import SimpleRateLimiter


class TestSimpleRateLimiter:
    def test_min_delay_from_rate(self):
        limiter = SimpleRateLimiter(50)
        assert limiter.min_delay == pytest.approx(20.0)
        assert limiter.get_rate() == pytest.approx(50.0)

    @pytest.mark.parametrize("rate", [0, -1])
    def test_non_positive_rate_rejected(self, rate):
        with pytest.raises(ValueError):
            SimpleRateLimiter(rate)

    @pytest.mark.asyncio
    async def test_first_acquire_does_not_wait(self):
        limiter = SimpleRateLimiter(1)

        start = time.monotonic()
        await limiter.acquire()

        assert time.monotonic() - start < 0.5

    @pytest.mark.asyncio
    async def test_consecutive_grants_are_spaced(self):
        """Given 20 req/s, When 4번 연속 획득, Then 각 허가 간격 >= 50ms"""
        limiter = SimpleRateLimiter(20)
        grants = []

        for _ in range(4):
            await limiter.acquire()
            grants.append(time.monotonic())

        gaps = [b - a for a, b in zip(grants, grants[1:])]
        # asyncio.sleep 타이머 해상도 허용
        assert all(gap >= 0.045 for gap in gaps)

    @pytest.mark.asyncio
    async def test_set_rate_applies_to_later_calls(self):
        limiter = SimpleRateLimiter(1)
        limiter.set_rate(100)

        assert limiter.get_rate() == pytest.approx(100.0)
        await limiter.acquire()
        start = time.monotonic()
        await limiter.acquire()
        assert time.monotonic() - start < 0.5

    def test_set_rate_rejects_zero(self):
        limiter = SimpleRateLimiter(10)
        with pytest.raises(ValueError):
            limiter.set_rate(0)
        assert limiter.get_rate() == pytest.approx(10.0)
