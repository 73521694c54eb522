from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventboard.core.sanitize import sanitize_event_description, sanitize_review_content
from eventboard.domain.enums import AdmissionAction, DateRange, EventStatus, MyEventsFilter
from eventboard.domain.state_machine import EventLifecycle
from eventboard.infra.db.models import Event, Participant, Review, User
from eventboard.infra.db.repositories import (
    EventRepository,
    ParticipantRepository,
    ReviewRepository,
    UserRepository,
)
from eventboard.infra.discord import EventAnnouncement, EventAnnouncer, NoopAnnouncer
from eventboard.services.admission import AdmissionPolicies
from eventboard.services.errors import (
    AdmissionDeniedError,
    AlreadyJoinedError,
    AlreadyReviewedError,
    EventDateError,
    EventNotFoundError,
    EventPermissionError,
    EventStateError,
    NotParticipantError,
    ReviewNotAllowedError,
)

logger = structlog.get_logger()

DEFAULT_USER_NAME = "Campus Student"

_LISTING_STATUSES: dict[DateRange, tuple[EventStatus, ...]] = {
    DateRange.TODAY: (EventStatus.UPCOMING,),
    DateRange.WEEK: (EventStatus.UPCOMING,),
    DateRange.PAST: (EventStatus.STARTED, EventStatus.FINISHED),
    DateRange.ALL: (EventStatus.UPCOMING, EventStatus.STARTED),
}

_MY_EVENTS_STATUSES: dict[MyEventsFilter, tuple[EventStatus, ...]] = {
    MyEventsFilter.ALL: tuple(EventStatus),
    MyEventsFilter.ACTIVE: (EventStatus.UPCOMING, EventStatus.STARTED),
    MyEventsFilter.STARTED: (EventStatus.STARTED,),
}


@dataclass(frozen=True, slots=True)
class CurrentUser:
    id: UUID
    name: str | None = None
    email: str | None = None

    @property
    def display_name(self) -> str:
        if self.name and self.name.strip():
            return self.name.strip()
        if self.email:
            return self.email.split("@", 1)[0]
        return DEFAULT_USER_NAME


@dataclass(slots=True)
class EventDetails:
    event: Event
    participant_count: int
    creator_name: str | None


@dataclass(slots=True)
class JoinResult:
    participant: Participant
    remaining_joins: int


@dataclass(slots=True)
class MyEvents:
    created: list[EventDetails] = field(default_factory=list)
    joined: list[EventDetails] = field(default_factory=list)


class EventService:
    def __init__(
        self,
        session: AsyncSession,
        events: EventRepository | None = None,
        participants: ParticipantRepository | None = None,
        reviews: ReviewRepository | None = None,
        users: UserRepository | None = None,
        admission: AdmissionPolicies | None = None,
        announcer: EventAnnouncer | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self.session = session
        self.events = events or EventRepository(session)
        self.participants = participants or ParticipantRepository(session)
        self.reviews = reviews or ReviewRepository(session)
        self.users = users or UserRepository(session)
        self.admission = admission
        self.announcer = announcer or NoopAnnouncer()
        self._now = now or (lambda: datetime.now(UTC))

    async def create_event(
        self,
        user: CurrentUser,
        title: str,
        event_date: datetime,
        description: str | None = None,
        location: str | None = None,
        image_urls: list[str] | None = None,
    ) -> EventDetails:
        event_date = self._assert_future(event_date)
        self._admit(AdmissionAction.CREATE_EVENT, user.id)

        creator = await self._ensure_user(user)
        event = await self.events.create(
            creator_id=user.id,
            title=title.strip(),
            description=self._clean_description(description),
            location=location.strip() if location else None,
            event_date=event_date,
            image_urls=list(image_urls or []),
        )
        await self.session.commit()
        await self.session.refresh(event)
        logger.info("event_created", event_id=str(event.id), creator_id=str(user.id))

        await self._safe_announce(event, creator.name)
        return EventDetails(event=event, participant_count=0, creator_name=creator.name)

    async def get_event(self, event_id: UUID) -> EventDetails:
        event = await self._get_event_or_raise(event_id)
        return (await self._with_counts([event]))[0]

    async def list_events(
        self,
        date_range: DateRange = DateRange.ALL,
        limit: int = 20,
        offset: int = 0,
    ) -> list[EventDetails]:
        now = self._now()
        date_from: datetime | None = now
        date_to: datetime | None = None
        if date_range == DateRange.TODAY:
            date_to = now + timedelta(days=1)
        elif date_range == DateRange.WEEK:
            date_to = now + timedelta(days=7)
        elif date_range == DateRange.PAST:
            date_from, date_to = None, now

        events = await self.events.list_filtered(
            statuses=_LISTING_STATUSES[date_range],
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset,
        )
        return await self._with_counts(events)

    async def update_event(
        self,
        user_id: UUID,
        event_id: UUID,
        title: str,
        event_date: datetime,
        description: str | None = None,
        location: str | None = None,
        image_urls: list[str] | None = None,
    ) -> EventDetails:
        event = await self._get_event_or_raise(event_id)
        self._assert_creator(event, user_id, "edit")
        if not EventLifecycle.is_editable(event.status):
            raise EventStateError(event.id, event.status, "You can only edit upcoming events")

        event.title = title.strip()
        event.event_date = self._assert_future(event_date)
        event.description = self._clean_description(description)
        event.location = location.strip() if location else None
        event.image_urls = list(image_urls or [])

        await self.session.commit()
        await self.session.refresh(event)
        return (await self._with_counts([event]))[0]

    async def delete_event(self, user_id: UUID, event_id: UUID) -> None:
        event = await self._get_event_or_raise(event_id)
        self._assert_creator(event, user_id, "delete")
        if not EventLifecycle.is_editable(event.status):
            raise EventStateError(event.id, event.status, "You can only delete upcoming events")

        await self.events.delete(event)
        await self.session.commit()
        logger.info("event_deleted", event_id=str(event_id), creator_id=str(user_id))

    async def update_status(
        self,
        user_id: UUID,
        event_id: UUID,
        status: EventStatus,
        started_at: datetime | None = None,
    ) -> EventDetails:
        event = await self._get_event_or_raise(event_id)
        self._assert_creator(event, user_id, "update the status of")

        previous = event.status
        event.status = EventLifecycle.transition(previous, status)
        if started_at is not None:
            event.started_at = self._as_aware(started_at)
        elif event.status == EventStatus.STARTED and previous != EventStatus.STARTED:
            event.started_at = self._now()

        await self.session.commit()
        await self.session.refresh(event)
        logger.info(
            "event_status_changed",
            event_id=str(event.id),
            previous=previous.value,
            current=event.status.value,
        )
        return (await self._with_counts([event]))[0]

    async def join_event(self, user: CurrentUser, event_id: UUID) -> JoinResult:
        event = await self._get_event_or_raise(event_id)
        if not EventLifecycle.is_joinable(event.status):
            detail = (
                "Cannot join finished events"
                if event.status == EventStatus.FINISHED
                else "Cannot join events that have already started"
            )
            raise EventStateError(event.id, event.status, detail)
        if self._as_aware(event.event_date) < self._now():
            raise EventStateError(event.id, event.status, "Cannot join past events")

        # Duplicate joins are rejected before admission so they do not use quota.
        if await self.participants.get(event.id, user.id) is not None:
            raise AlreadyJoinedError(event.id)

        self._admit(AdmissionAction.JOIN_EVENT, user.id)

        await self._ensure_user(user)
        try:
            participant = await self.participants.create(event_id=event.id, user_id=user.id)
            await self.session.commit()
        except IntegrityError as exc:
            # A concurrent join won the insert; the quota spent above is not refunded.
            await self.session.rollback()
            raise AlreadyJoinedError(event.id) from exc

        logger.info("event_joined", event_id=str(event.id), user_id=str(user.id))
        return JoinResult(participant=participant, remaining_joins=self._remaining_joins(user.id))

    async def leave_event(self, user_id: UUID, event_id: UUID) -> None:
        participant = await self.participants.get(event_id, user_id)
        if participant is None:
            raise NotParticipantError(event_id)

        await self.participants.delete(participant)
        await self.session.commit()
        logger.info("event_left", event_id=str(event_id), user_id=str(user_id))

    async def list_participants(self, event_id: UUID) -> list[Participant]:
        await self._get_event_or_raise(event_id)
        return await self.participants.list_by_event(event_id)

    async def list_reviews(self, event_id: UUID) -> list[Review]:
        await self._get_event_or_raise(event_id)
        return await self.reviews.list_by_event(event_id)

    async def create_review(
        self,
        user: CurrentUser,
        event_id: UUID,
        content: str,
        photo_urls: list[str] | None = None,
    ) -> Review:
        event = await self._get_event_or_raise(event_id)
        if not EventLifecycle.is_reviewable(event.status):
            raise EventStateError(event.id, event.status, "Can only review finished events")

        if event.creator_id != user.id:
            if await self.participants.get(event.id, user.id) is None:
                raise ReviewNotAllowedError(event.id)

        if await self.reviews.get(event.id, user.id) is not None:
            raise AlreadyReviewedError(event.id)

        cleaned_content = sanitize_review_content(content).strip()
        if not cleaned_content:
            raise ValueError("Review content cannot be empty.")

        await self._ensure_user(user)
        try:
            review = await self.reviews.create(
                event_id=event.id,
                user_id=user.id,
                content=cleaned_content,
                photo_urls=list(photo_urls or []),
            )
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise AlreadyReviewedError(event.id) from exc
        return review

    async def list_my_events(
        self,
        user_id: UUID,
        status_filter: MyEventsFilter = MyEventsFilter.ALL,
    ) -> MyEvents:
        statuses = _MY_EVENTS_STATUSES[status_filter]
        created = await self.events.list_by_creator(user_id, statuses)
        joined = await self.events.list_joined_by_user(user_id, statuses)
        return MyEvents(
            created=await self._with_counts(created),
            joined=await self._with_counts(joined),
        )

    def _admit(self, action: AdmissionAction, user_id: UUID) -> None:
        if self.admission is None:
            return
        if action == AdmissionAction.JOIN_EVENT:
            allowed = self.admission.check_event_join(user_id)
        else:
            allowed = self.admission.check_event_creation(user_id)
        if allowed:
            return

        limiter = self.admission.limiter_for(action)
        raise AdmissionDeniedError(
            action=action,
            limit=limiter.config.max_requests,
            window_ms=limiter.config.window_ms,
            reset_at_ms=self.admission.reset_time(action, user_id),
        )

    def _remaining_joins(self, user_id: UUID) -> int:
        if self.admission is None:
            return 0
        return self.admission.quota(user_id).event_join.remaining

    async def _ensure_user(self, user: CurrentUser) -> User:
        return await self.users.upsert(user.id, name=user.display_name, email=user.email)

    async def _get_event_or_raise(self, event_id: UUID) -> Event:
        event = await self.events.get_by_id(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    async def _with_counts(self, events: list[Event]) -> list[EventDetails]:
        counts = await self.events.participant_counts([event.id for event in events])
        return [
            EventDetails(
                event=event,
                participant_count=counts.get(event.id, 0),
                creator_name=event.creator.name if event.creator is not None else None,
            )
            for event in events
        ]

    async def _safe_announce(self, event: Event, creator_name: str) -> None:
        announcement = EventAnnouncement(
            id=event.id,
            title=event.title,
            event_date=event.event_date,
            description=event.description,
            location=event.location,
            creator_name=creator_name,
            image_urls=list(event.image_urls or []),
        )
        try:
            await self.announcer.announce_event(announcement)
        except Exception:
            logger.warning("event_announcement_failed", event_id=str(event.id), exc_info=True)

    def _assert_future(self, event_date: datetime) -> datetime:
        event_date = self._as_aware(event_date)
        if event_date <= self._now():
            raise EventDateError()
        return event_date

    @staticmethod
    def _assert_creator(event: Event, user_id: UUID, action: str) -> None:
        if event.creator_id != user_id:
            raise EventPermissionError(event.id, action)

    @staticmethod
    def _as_aware(moment: datetime) -> datetime:
        if moment.tzinfo is None:
            return moment.replace(tzinfo=UTC)
        return moment

    @staticmethod
    def _clean_description(description: str | None) -> str | None:
        if not description:
            return None
        cleaned = sanitize_event_description(description).strip()
        return cleaned or None
