from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class EventAnnouncement:
    id: UUID
    title: str
    event_date: datetime
    description: str | None = None
    location: str | None = None
    creator_name: str | None = None
    image_urls: list[str] = field(default_factory=list)
