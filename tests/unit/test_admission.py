from uuid import uuid4

import pytest

from eventboard.core.config import Settings
from eventboard.core.rate_limit import FixedWindowRateLimiter, RateLimitConfig
from eventboard.domain.enums import AdmissionAction
from eventboard.services.admission import (
    AdmissionPolicies,
    admission_identifier,
    build_admission_policies,
)
from eventboard.services.errors import AdmissionDeniedError

DAY_MS = 24 * 60 * 60 * 1000


class FakeClock:
    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms


def make_policies(clock: FakeClock, creation_limit_enabled: bool = False) -> AdmissionPolicies:
    return AdmissionPolicies(
        event_creation=FixedWindowRateLimiter(
            RateLimitConfig(max_requests=2, window_ms=DAY_MS), clock=clock
        ),
        event_join=FixedWindowRateLimiter(
            RateLimitConfig(max_requests=3, window_ms=DAY_MS), clock=clock
        ),
        creation_limit_enabled=creation_limit_enabled,
    )


def test_identifier_is_scoped_by_action() -> None:
    user_id = uuid4()
    assert admission_identifier(AdmissionAction.JOIN_EVENT, user_id) == f"join:{user_id}"
    assert admission_identifier(AdmissionAction.CREATE_EVENT, user_id) == f"create:{user_id}"


def test_join_limit_is_enforced_per_user() -> None:
    policies = make_policies(FakeClock())
    first, second = uuid4(), uuid4()

    assert [policies.check_event_join(first) for _ in range(4)] == [True, True, True, False]
    assert policies.check_event_join(second) is True


def test_creation_limit_is_skipped_when_disabled() -> None:
    policies = make_policies(FakeClock(), creation_limit_enabled=False)
    user_id = uuid4()

    assert all(policies.check_event_creation(user_id) for _ in range(10))
    assert len(policies.event_creation) == 0


def test_creation_and_join_limits_do_not_share_state() -> None:
    policies = make_policies(FakeClock(), creation_limit_enabled=True)
    user_id = uuid4()

    assert policies.check_event_creation(user_id) is True
    assert policies.check_event_creation(user_id) is True
    assert policies.check_event_creation(user_id) is False

    assert policies.check_event_join(user_id) is True


def test_quota_snapshot_reports_remaining_and_reset() -> None:
    clock = FakeClock()
    policies = make_policies(clock)
    user_id = uuid4()
    policies.check_event_join(user_id)

    snapshot = policies.quota(user_id)

    assert snapshot.event_join.limit == 3
    assert snapshot.event_join.remaining == 2
    assert snapshot.event_join.reset_at_ms == clock.now_ms + DAY_MS
    assert snapshot.event_join.enforced is True
    assert snapshot.event_creation.remaining == 2
    assert snapshot.event_creation.reset_at_ms == 0
    assert snapshot.event_creation.enforced is False


def test_sweep_covers_both_limiters() -> None:
    clock = FakeClock()
    policies = make_policies(clock, creation_limit_enabled=True)
    policies.check_event_join(uuid4())
    policies.check_event_creation(uuid4())

    clock.now_ms += DAY_MS

    assert policies.sweep() == 2


def test_build_from_settings_uses_configured_windows() -> None:
    settings = Settings(
        _env_file=None,
        event_join_limit=5,
        event_join_window_seconds=3600,
        event_creation_limit=1,
        event_creation_limit_enabled=True,
        rate_limit_max_entries=100,
    )

    policies = build_admission_policies(settings, clock=FakeClock())

    assert policies.event_join.config == RateLimitConfig(max_requests=5, window_ms=3_600_000)
    assert policies.event_creation.config.max_requests == 1
    assert policies.creation_limit_enabled is True


@pytest.mark.parametrize(
    ("action", "window_ms", "expected"),
    [
        (AdmissionAction.JOIN_EVENT, DAY_MS, "Daily event join limit reached (3 events per day)"),
        (AdmissionAction.JOIN_EVENT, 3_600_000, "Event join limit reached (3 events per hour)"),
        (AdmissionAction.JOIN_EVENT, 90_000, "Event join limit reached (3 events per 90 seconds)"),
        (AdmissionAction.JOIN_EVENT, 500, "Event join limit reached (3 events per 500 ms)"),
        (AdmissionAction.JOIN_EVENT, 1_500, "Event join limit reached (3 events per 1500 ms)"),
        (
            AdmissionAction.CREATE_EVENT,
            DAY_MS,
            "Daily event creation limit reached (3 events per day)",
        ),
    ],
)
def test_denied_error_message(action: AdmissionAction, window_ms: int, expected: str) -> None:
    error = AdmissionDeniedError(action=action, limit=3, window_ms=window_ms, reset_at_ms=0)
    assert str(error) == expected
