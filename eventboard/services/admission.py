from dataclasses import dataclass
from uuid import UUID

import structlog

from eventboard.core.config import Settings
from eventboard.core.rate_limit import Clock, FixedWindowRateLimiter, RateLimitConfig
from eventboard.domain.enums import AdmissionAction

logger = structlog.get_logger()


def admission_identifier(action: AdmissionAction, user_id: UUID | str) -> str:
    return f"{action.value}:{user_id}"


@dataclass(frozen=True, slots=True)
class ActionQuota:
    limit: int
    remaining: int
    reset_at_ms: int
    enforced: bool = True


@dataclass(frozen=True, slots=True)
class QuotaSnapshot:
    event_creation: ActionQuota
    event_join: ActionQuota


class AdmissionPolicies:
    """Named limiter instances guarding event creation and event joins.

    Each application builds its own instance; the two limiters never share
    state even when their identifiers collide.
    """

    def __init__(
        self,
        event_creation: FixedWindowRateLimiter,
        event_join: FixedWindowRateLimiter,
        creation_limit_enabled: bool = False,
    ) -> None:
        self.event_creation = event_creation
        self.event_join = event_join
        self.creation_limit_enabled = creation_limit_enabled

    def limiter_for(self, action: AdmissionAction) -> FixedWindowRateLimiter:
        if action == AdmissionAction.JOIN_EVENT:
            return self.event_join
        return self.event_creation

    def check_event_creation(self, user_id: UUID | str) -> bool:
        if not self.creation_limit_enabled:
            return True
        return self._check(AdmissionAction.CREATE_EVENT, user_id)

    def check_event_join(self, user_id: UUID | str) -> bool:
        return self._check(AdmissionAction.JOIN_EVENT, user_id)

    def reset_time(self, action: AdmissionAction, user_id: UUID | str) -> int:
        return self.limiter_for(action).get_reset_time(admission_identifier(action, user_id))

    def quota(self, user_id: UUID | str) -> QuotaSnapshot:
        return QuotaSnapshot(
            event_creation=self._action_quota(
                AdmissionAction.CREATE_EVENT,
                user_id,
                enforced=self.creation_limit_enabled,
            ),
            event_join=self._action_quota(AdmissionAction.JOIN_EVENT, user_id),
        )

    def sweep(self, grace_ms: int = 0) -> int:
        return self.event_creation.sweep(grace_ms) + self.event_join.sweep(grace_ms)

    def _check(self, action: AdmissionAction, user_id: UUID | str) -> bool:
        identifier = admission_identifier(action, user_id)
        allowed = self.limiter_for(action).is_allowed(identifier)
        if not allowed:
            logger.info("admission_denied", action=action.value, user_id=str(user_id))
        return allowed

    def _action_quota(
        self,
        action: AdmissionAction,
        user_id: UUID | str,
        enforced: bool = True,
    ) -> ActionQuota:
        limiter = self.limiter_for(action)
        identifier = admission_identifier(action, user_id)
        return ActionQuota(
            limit=limiter.config.max_requests,
            remaining=limiter.get_remaining_requests(identifier),
            reset_at_ms=limiter.get_reset_time(identifier),
            enforced=enforced,
        )


def build_admission_policies(
    settings: Settings,
    clock: Clock | None = None,
) -> AdmissionPolicies:
    return AdmissionPolicies(
        event_creation=FixedWindowRateLimiter(
            RateLimitConfig(
                max_requests=settings.event_creation_limit,
                window_ms=settings.event_creation_window_seconds * 1000,
            ),
            clock=clock,
            max_entries=settings.rate_limit_max_entries,
        ),
        event_join=FixedWindowRateLimiter(
            RateLimitConfig(
                max_requests=settings.event_join_limit,
                window_ms=settings.event_join_window_seconds * 1000,
            ),
            clock=clock,
            max_entries=settings.rate_limit_max_entries,
        ),
        creation_limit_enabled=settings.event_creation_limit_enabled,
    )
