from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventboard.domain.enums import EventStatus
from eventboard.infra.db.models import Event, Participant, Review, User


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        return await self.session.get(User, user_id)

    async def upsert(self, user_id: UUID, name: str, email: str | None = None) -> User:
        user = await self.get_by_id(user_id)
        if user is None:
            user = User(id=user_id, name=name, email=email)
            self.session.add(user)
        else:
            user.name = name
            if email is not None:
                user.email = email
        await self.session.flush()
        return user

    async def get_or_create(self, user_id: UUID, name: str, email: str | None = None) -> User:
        user = await self.get_by_id(user_id)
        if user is not None:
            return user
        user = User(id=user_id, name=name, email=email)
        self.session.add(user)
        await self.session.flush()
        return user


class EventRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, event_id: UUID) -> Event | None:
        return await self.session.get(Event, event_id)

    async def list_filtered(
        self,
        statuses: Sequence[EventStatus],
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Event]:
        stmt: Select[tuple[Event]] = select(Event).where(Event.status.in_(statuses))
        if date_from is not None:
            stmt = stmt.where(Event.event_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(Event.event_date < date_to)
        stmt = stmt.order_by(Event.event_date.asc(), Event.id.asc()).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_creator(
        self, creator_id: UUID, statuses: Sequence[EventStatus]
    ) -> list[Event]:
        stmt: Select[tuple[Event]] = (
            select(Event)
            .where(Event.creator_id == creator_id, Event.status.in_(statuses))
            .order_by(Event.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_joined_by_user(
        self, user_id: UUID, statuses: Sequence[EventStatus]
    ) -> list[Event]:
        stmt: Select[tuple[Event]] = (
            select(Event)
            .join(Participant, Participant.event_id == Event.id)
            .where(
                Participant.user_id == user_id,
                Event.creator_id != user_id,
                Event.status.in_(statuses),
            )
            .order_by(Event.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_creator(
        self, creator_id: UUID, status: EventStatus | None = None
    ) -> int:
        stmt = select(func.count(Event.id)).where(Event.creator_id == creator_id)
        if status is not None:
            stmt = stmt.where(Event.status == status)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def participant_counts(self, event_ids: Sequence[UUID]) -> dict[UUID, int]:
        if not event_ids:
            return {}
        stmt = (
            select(Participant.event_id, func.count(Participant.id))
            .where(Participant.event_id.in_(event_ids))
            .group_by(Participant.event_id)
        )
        result = await self.session.execute(stmt)
        return {event_id: int(count) for event_id, count in result.all()}

    async def create(
        self,
        creator_id: UUID,
        title: str,
        description: str | None,
        location: str | None,
        event_date: datetime,
        image_urls: list[str],
    ) -> Event:
        event = Event(
            creator_id=creator_id,
            title=title,
            description=description,
            location=location,
            event_date=event_date,
            image_urls=image_urls,
            status=EventStatus.UPCOMING,
        )
        self.session.add(event)
        await self.session.flush()
        await self.session.refresh(event)
        return event

    async def delete(self, event: Event) -> None:
        await self.session.delete(event)
        await self.session.flush()


class ParticipantRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, event_id: UUID, user_id: UUID) -> Participant | None:
        stmt: Select[tuple[Participant]] = (
            select(Participant)
            .where(Participant.event_id == event_id, Participant.user_id == user_id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, event_id: UUID, user_id: UUID) -> Participant:
        participant = Participant(event_id=event_id, user_id=user_id)
        self.session.add(participant)
        await self.session.flush()
        await self.session.refresh(participant)
        return participant

    async def delete(self, participant: Participant) -> None:
        await self.session.delete(participant)
        await self.session.flush()

    async def count_by_user(self, user_id: UUID) -> int:
        stmt = select(func.count(Participant.id)).where(Participant.user_id == user_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def list_by_event(self, event_id: UUID) -> list[Participant]:
        stmt: Select[tuple[Participant]] = (
            select(Participant)
            .where(Participant.event_id == event_id)
            .order_by(Participant.joined_at.asc(), Participant.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class ReviewRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, event_id: UUID, user_id: UUID) -> Review | None:
        stmt: Select[tuple[Review]] = (
            select(Review)
            .where(Review.event_id == event_id, Review.user_id == user_id)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_event(self, event_id: UUID) -> list[Review]:
        stmt: Select[tuple[Review]] = (
            select(Review)
            .where(Review.event_id == event_id)
            .order_by(Review.created_at.desc(), Review.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(
        self,
        event_id: UUID,
        user_id: UUID,
        content: str,
        photo_urls: list[str],
    ) -> Review:
        review = Review(
            event_id=event_id,
            user_id=user_id,
            content=content,
            photo_urls=photo_urls,
        )
        self.session.add(review)
        await self.session.flush()
        await self.session.refresh(review)
        return review
