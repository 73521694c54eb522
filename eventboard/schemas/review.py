from datetime import datetime
from uuid import UUID

from pydantic import AnyHttpUrl, BaseModel, Field


class CreateReviewRequest(BaseModel):
    content: str = Field(min_length=1, max_length=1000)
    photo_urls: list[AnyHttpUrl] = Field(default_factory=list)


class ReviewResponse(BaseModel):
    id: UUID
    event_id: UUID
    user_id: UUID
    user_name: str | None
    content: str
    photo_urls: list[str]
    created_at: datetime


class ReviewListResponse(BaseModel):
    items: list[ReviewResponse]
