import asyncio
import contextlib

import pytest

from eventboard import main
from eventboard.core.config import Settings
from eventboard.core.rate_limit import FixedWindowRateLimiter, RateLimitConfig
from eventboard.main import create_app, sweep_rate_limits
from eventboard.services.admission import AdmissionPolicies


class FakeClock:
    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms


def make_policies(clock: FakeClock) -> AdmissionPolicies:
    return AdmissionPolicies(
        event_creation=FixedWindowRateLimiter(
            RateLimitConfig(max_requests=1, window_ms=1000), clock=clock
        ),
        event_join=FixedWindowRateLimiter(
            RateLimitConfig(max_requests=1, window_ms=1000), clock=clock
        ),
    )


@pytest.mark.asyncio
async def test_sweep_loop_drops_expired_records() -> None:
    clock = FakeClock()
    policies = make_policies(clock)
    policies.event_join.is_allowed("join:old")
    clock.now_ms += 1000

    task = asyncio.create_task(sweep_rate_limits(policies, 0.01, 0))
    try:
        for _ in range(100):
            if len(policies.event_join) == 0:
                break
            await asyncio.sleep(0.01)
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    assert len(policies.event_join) == 0
    assert task.cancelled()


@pytest.mark.asyncio
async def test_sweep_loop_keeps_live_records() -> None:
    clock = FakeClock()
    policies = make_policies(clock)
    policies.event_join.is_allowed("join:live")

    task = asyncio.create_task(sweep_rate_limits(policies, 0.01, 0))
    await asyncio.sleep(0.05)
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task

    assert policies.event_join.get_remaining_requests("join:live") == 0


@pytest.mark.asyncio
async def test_lifespan_starts_and_cancels_sweep_task(monkeypatch: pytest.MonkeyPatch) -> None:
    closed: list[object] = []
    engine = object()

    async def fake_close_engine(value: object) -> None:
        closed.append(value)

    monkeypatch.setattr(main, "init_engine", lambda: engine)
    monkeypatch.setattr(main, "close_engine", fake_close_engine)
    settings = Settings(
        _env_file=None,
        app_env="test",
        discord_webhook_url=None,
        rate_limit_sweep_interval_seconds=3600,
    )
    app = create_app(settings=settings, admission=make_policies(FakeClock()))

    async with app.router.lifespan_context(app):
        sweep_task = app.state.sweep_task
        assert sweep_task is not None
        assert not sweep_task.done()

    assert sweep_task.cancelled()
    assert closed == [engine]


@pytest.mark.asyncio
async def test_lifespan_without_sweep_interval_starts_no_task(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_close_engine(value: object) -> None:
        return None

    monkeypatch.setattr(main, "init_engine", lambda: object())
    monkeypatch.setattr(main, "close_engine", fake_close_engine)
    settings = Settings(
        _env_file=None,
        app_env="test",
        discord_webhook_url=None,
        rate_limit_sweep_interval_seconds=0,
    )
    app = create_app(settings=settings, admission=make_policies(FakeClock()))

    async with app.router.lifespan_context(app):
        assert app.state.sweep_task is None
