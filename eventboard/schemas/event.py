from datetime import datetime
from uuid import UUID

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field

from eventboard.domain.enums import EventStatus


class EventWriteRequest(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    location: str | None = Field(default=None, max_length=200)
    event_date: datetime
    image_urls: list[AnyHttpUrl] = Field(default_factory=list, max_length=1)

    def image_url_strings(self) -> list[str]:
        return [str(url) for url in self.image_urls]


class CreateEventRequest(EventWriteRequest):
    pass


class UpdateEventRequest(EventWriteRequest):
    pass


class UpdateEventStatusRequest(BaseModel):
    status: EventStatus
    started_at: datetime | None = None


class EventResponse(BaseModel):
    id: UUID
    title: str
    description: str | None
    location: str | None
    event_date: datetime
    image_urls: list[str]
    creator_id: UUID
    creator_name: str | None = None
    status: EventStatus
    started_at: datetime | None
    participant_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EventListResponse(BaseModel):
    items: list[EventResponse]
    limit: int
    offset: int
