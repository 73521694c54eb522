from datetime import datetime
from uuid import UUID

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field


class UpdateProfileRequest(BaseModel):
    bio: str | None = Field(default=None, max_length=500)
    profile_image_url: AnyHttpUrl | None = None


class ProfileResponse(BaseModel):
    id: UUID
    name: str
    email: str | None
    bio: str | None
    profile_image_url: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileStatsResponse(BaseModel):
    events_created: int
    events_participated: int
    upcoming_events: int


class PublicProfileResponse(BaseModel):
    id: UUID
    name: str
    bio: str | None
    profile_image_url: str | None
    created_at: datetime
    stats: ProfileStatsResponse
