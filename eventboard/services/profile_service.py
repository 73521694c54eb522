from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from eventboard.core.sanitize import sanitize_user_bio
from eventboard.domain.enums import EventStatus
from eventboard.infra.db.models import User
from eventboard.infra.db.repositories import (
    EventRepository,
    ParticipantRepository,
    UserRepository,
)
from eventboard.services.errors import UserNotFoundError
from eventboard.services.event_service import CurrentUser

logger = structlog.get_logger()

_EDITABLE_FIELDS = ("bio", "profile_image_url")


@dataclass(slots=True)
class ProfileStats:
    events_created: int
    events_participated: int
    upcoming_events: int


@dataclass(slots=True)
class PublicProfile:
    user: User
    stats: ProfileStats


class ProfileService:
    def __init__(
        self,
        session: AsyncSession,
        users: UserRepository | None = None,
        events: EventRepository | None = None,
        participants: ParticipantRepository | None = None,
    ) -> None:
        self.session = session
        self.users = users or UserRepository(session)
        self.events = events or EventRepository(session)
        self.participants = participants or ParticipantRepository(session)

    async def get_own_profile(self, user: CurrentUser) -> User:
        profile = await self.users.get_or_create(user.id, user.display_name, user.email)
        await self.session.commit()
        return profile

    async def update_profile(self, user: CurrentUser, changes: Mapping[str, Any]) -> User:
        """Apply ``changes`` to the caller's profile.

        Only keys present in ``changes`` are written; an empty bio clears it.
        """
        profile = await self.users.get_or_create(user.id, user.display_name, user.email)
        if "bio" in changes:
            bio = sanitize_user_bio(changes["bio"]).strip() if changes["bio"] else ""
            profile.bio = bio or None
        if "profile_image_url" in changes:
            url = changes["profile_image_url"]
            profile.profile_image_url = str(url) if url else None
        await self.session.commit()
        await self.session.refresh(profile)

        updated = sorted(key for key in changes if key in _EDITABLE_FIELDS)
        logger.info("profile_updated", user_id=str(user.id), fields=updated)
        return profile

    async def get_public_profile(self, user_id: UUID) -> PublicProfile:
        profile = await self.users.get_by_id(user_id)
        if profile is None:
            raise UserNotFoundError(user_id)
        stats = ProfileStats(
            events_created=await self.events.count_by_creator(user_id),
            events_participated=await self.participants.count_by_user(user_id),
            upcoming_events=await self.events.count_by_creator(
                user_id, status=EventStatus.UPCOMING
            ),
        )
        return PublicProfile(user=profile, stats=stats)
