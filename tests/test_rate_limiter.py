import asyncio

import pytest

from infrastructure.api.rate_limiter import RateLimiter, RateWindow


class FakeClock:
    """Virtual time: sleeping just moves the clock forward."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _limiter(clock: FakeClock, profiles) -> RateLimiter:
    return RateLimiter(profiles, clock=clock, sleep=clock.sleep)


def _max_in_window(times, seconds):
    return max(sum(1 for t in times if start <= t < start + seconds) for start in times)


@pytest.mark.asyncio
async def test_calls_under_the_caps_do_not_wait():
    clock = FakeClock()
    limiter = _limiter(clock, {"default": (RateWindow(1.0, 5),)})
    for _ in range(5):
        await limiter.acquire()
    assert clock.sleeps == []
    assert limiter.total_calls == 5


@pytest.mark.asyncio
async def test_waits_exactly_until_oldest_timestamp_leaves_the_window():
    clock = FakeClock()
    limiter = _limiter(clock, {"default": (RateWindow(1.0, 2), RateWindow(10.0, 3))})

    issued = []
    for _ in range(4):
        await limiter.acquire()
        issued.append(clock.now)

    # Third call waits out the 1 s window, fourth waits out the 10 s window.
    assert clock.sleeps == [1.0, 9.0]
    assert issued == [0.0, 0.0, 1.0, 10.0]
    assert limiter.total_waits == 2


@pytest.mark.asyncio
async def test_no_window_ever_exceeds_its_cap():
    clock = FakeClock()
    limiter = _limiter(clock, {"default": (RateWindow(1.0, 20), RateWindow(60.0, 100))})

    issued = []
    for _ in range(150):
        await limiter.acquire()
        issued.append(clock.now)

    assert _max_in_window(issued, 1.0) <= 20
    assert _max_in_window(issued, 60.0) <= 100
    # The 101st call is the first that has to wait for the minute window.
    assert issued[100] == pytest.approx(60.0)


@pytest.mark.asyncio
async def test_match_ids_bucket_has_its_own_caps_but_shares_the_log():
    clock = FakeClock()
    limiter = _limiter(clock, {
        "default": (RateWindow(1.0, 1),),
        "match_ids": (RateWindow(10.0, 5),),
    })

    for _ in range(3):
        await limiter.acquire("match_ids")
    assert clock.sleeps == []

    await limiter.acquire()
    assert clock.sleeps == [1.0]


@pytest.mark.asyncio
async def test_unknown_bucket_falls_back_to_default_profile():
    clock = FakeClock()
    limiter = _limiter(clock, {"default": (RateWindow(1.0, 1),)})
    await limiter.acquire("nope")
    await limiter.acquire("nope")
    assert clock.sleeps == [1.0]


@pytest.mark.asyncio
async def test_concurrent_acquires_are_serialised():
    clock = FakeClock()
    limiter = _limiter(clock, {"default": (RateWindow(1.0, 3),)})

    issued = []

    async def call():
        await limiter.acquire()
        issued.append(clock.now)

    await asyncio.gather(*(call() for _ in range(7)))
    assert _max_in_window(issued, 1.0) <= 3
    assert len(issued) == 7


@pytest.mark.asyncio
async def test_status_and_reset():
    clock = FakeClock()
    limiter = RateLimiter.from_settings(clock=clock, sleep=clock.sleep)
    await limiter.acquire()
    await limiter.acquire("match_ids")

    status = limiter.get_status()
    assert status["default_1s_used"] == 2
    assert status["default_1s_limit"] == 20
    assert status["default_60s_limit"] == 100
    assert status["match_ids_10s_limit"] == 2000

    await limiter.reset()
    assert limiter.get_status()["default_1s_used"] == 0


def test_default_profile_is_required():
    with pytest.raises(ValueError):
        RateLimiter({"match_ids": (RateWindow(10.0, 5),)})
