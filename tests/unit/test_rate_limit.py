import threading

import pytest

from eventboard.core.rate_limit import FixedWindowRateLimiter, RateLimitConfig


class FakeClock:
    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, delta_ms: int) -> None:
        self.now_ms += delta_ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_limiter(
    clock: FakeClock,
    max_requests: int = 3,
    window_ms: int = 1000,
    **kwargs,
) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(
        RateLimitConfig(max_requests=max_requests, window_ms=window_ms),
        clock=clock,
        **kwargs,
    )


def test_fresh_identifier_is_admitted(clock: FakeClock) -> None:
    limiter = make_limiter(clock)

    assert limiter.is_allowed("new-user") is True
    assert limiter.get_remaining_requests("new-user") == 2


def test_blocks_after_ceiling(clock: FakeClock) -> None:
    limiter = make_limiter(clock)

    results = [limiter.is_allowed("u1") for _ in range(4)]

    assert results == [True, True, True, False]


def test_rejected_calls_do_not_consume_quota(clock: FakeClock) -> None:
    limiter = make_limiter(clock)
    for _ in range(3):
        limiter.is_allowed("u1")
    reset_at = limiter.get_reset_time("u1")

    for _ in range(5):
        assert limiter.is_allowed("u1") is False

    assert limiter.get_remaining_requests("u1") == 0
    assert limiter.get_reset_time("u1") == reset_at


def test_window_rollover_resets_count(clock: FakeClock) -> None:
    limiter = make_limiter(clock, window_ms=1000)
    for _ in range(3):
        limiter.is_allowed("u2")
    assert limiter.is_allowed("u2") is False

    clock.advance(1001)

    assert limiter.is_allowed("u2") is True
    assert limiter.get_remaining_requests("u2") == 2


def test_window_expires_exactly_at_reset_time(clock: FakeClock) -> None:
    limiter = make_limiter(clock, max_requests=1, window_ms=1000)
    assert limiter.is_allowed("edge") is True
    assert limiter.is_allowed("edge") is False

    clock.advance(999)
    assert limiter.is_allowed("edge") is False

    clock.advance(1)
    assert limiter.get_remaining_requests("edge") == 1
    assert limiter.get_reset_time("edge") == 0
    assert limiter.is_allowed("edge") is True


def test_identifiers_are_isolated(clock: FakeClock) -> None:
    limiter = make_limiter(clock)
    assert [limiter.is_allowed("u3") for _ in range(4)] == [True, True, True, False]

    assert [limiter.is_allowed("u4") for _ in range(3)] == [True, True, True]


def test_reset_time_semantics(clock: FakeClock) -> None:
    limiter = make_limiter(clock, window_ms=5000)
    assert limiter.get_reset_time("u5") == 0

    started_at = clock()
    limiter.is_allowed("u5")
    clock.advance(200)
    limiter.is_allowed("u5")

    # The window is anchored at the first admission, not the latest one.
    assert limiter.get_reset_time("u5") == started_at + 5000


def test_independent_instances_do_not_share_state(clock: FakeClock) -> None:
    strict = make_limiter(clock, max_requests=1)
    lenient = make_limiter(clock, max_requests=5)

    assert strict.is_allowed("shared") is True
    assert strict.is_allowed("shared") is False

    assert lenient.get_remaining_requests("shared") == 5
    assert all(lenient.is_allowed("shared") for _ in range(5))
    assert lenient.is_allowed("shared") is False
    assert strict.get_remaining_requests("shared") == 0


def test_read_only_queries_do_not_create_records(clock: FakeClock) -> None:
    limiter = make_limiter(clock)

    assert limiter.get_remaining_requests("ghost") == 3
    assert limiter.get_reset_time("ghost") == 0
    assert len(limiter) == 0


def test_empty_identifier_is_its_own_bucket(clock: FakeClock) -> None:
    limiter = make_limiter(clock, max_requests=1)

    assert limiter.is_allowed("") is True
    assert limiter.is_allowed("") is False
    assert limiter.is_allowed("someone") is True


def test_boundary_burst_is_accepted(clock: FakeClock) -> None:
    limiter = make_limiter(clock, max_requests=3, window_ms=1000)
    clock.advance(0)
    limiter.is_allowed("burst")
    clock.advance(998)
    assert limiter.is_allowed("burst") is True
    assert limiter.is_allowed("burst") is True

    clock.advance(2)
    assert [limiter.is_allowed("burst") for _ in range(3)] == [True, True, True]


def test_sweep_removes_expired_records(clock: FakeClock) -> None:
    limiter = make_limiter(clock, window_ms=1000)
    limiter.is_allowed("old")
    clock.advance(600)
    limiter.is_allowed("recent")

    clock.advance(500)
    assert limiter.sweep() == 1
    assert len(limiter) == 1
    assert limiter.get_remaining_requests("recent") == 2


def test_sweep_honours_grace_period(clock: FakeClock) -> None:
    limiter = make_limiter(clock, window_ms=1000)
    limiter.is_allowed("old")
    clock.advance(1500)

    assert limiter.sweep(grace_ms=1000) == 0
    clock.advance(500)
    assert limiter.sweep(grace_ms=1000) == 1
    assert len(limiter) == 0


def test_full_store_keeps_live_counts_and_rejects_newcomers(clock: FakeClock) -> None:
    limiter = make_limiter(clock, max_requests=1, max_entries=2)
    assert limiter.is_allowed("regular") is True
    assert limiter.is_allowed("regular") is False

    assert limiter.is_allowed("x") is True
    assert limiter.is_allowed("y") is False

    assert [limiter.is_allowed("regular") for _ in range(3)] == [False, False, False]
    assert len(limiter) == 2
    assert limiter.get_reset_time("y") == 0


def test_full_store_drops_expired_records_to_make_room(clock: FakeClock) -> None:
    limiter = make_limiter(clock, max_requests=1, window_ms=1000, max_entries=2)
    limiter.is_allowed("stale")
    clock.advance(1000)
    assert limiter.is_allowed("regular") is True

    assert limiter.is_allowed("newcomer") is True

    assert len(limiter) == 2
    assert limiter.get_reset_time("stale") == 0
    assert limiter.is_allowed("regular") is False


def test_full_store_admits_again_once_windows_expire(clock: FakeClock) -> None:
    limiter = make_limiter(clock, max_requests=1, window_ms=1000, max_entries=1)
    limiter.is_allowed("first")
    assert limiter.is_allowed("second") is False

    clock.advance(1000)

    assert limiter.is_allowed("second") is True
    assert len(limiter) == 1


def test_invalid_config_is_rejected() -> None:
    with pytest.raises(ValueError):
        RateLimitConfig(max_requests=0, window_ms=1000)
    with pytest.raises(ValueError):
        RateLimitConfig(max_requests=1, window_ms=0)


def test_invalid_max_entries_is_rejected(clock: FakeClock) -> None:
    with pytest.raises(ValueError):
        make_limiter(clock, max_entries=0)


def test_concurrent_checks_never_exceed_ceiling(clock: FakeClock) -> None:
    limiter = make_limiter(clock, max_requests=50, window_ms=60_000)
    admitted: list[bool] = []
    admitted_lock = threading.Lock()
    barrier = threading.Barrier(8)

    def worker() -> None:
        barrier.wait()
        local = [limiter.is_allowed("hot-key") for _ in range(25)]
        with admitted_lock:
            admitted.extend(local)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert admitted.count(True) == 50
    assert admitted.count(False) == 150


def test_default_clock_uses_epoch_milliseconds() -> None:
    limiter = FixedWindowRateLimiter(RateLimitConfig(max_requests=1, window_ms=60_000))

    limiter.is_allowed("wall-clock")

    reset_at = limiter.get_reset_time("wall-clock")
    # Roughly "now + 60s" in epoch milliseconds (after 2020-01-01).
    assert reset_at > 1_577_836_800_000 + 60_000
