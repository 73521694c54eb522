from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ParticipantResponse(BaseModel):
    id: UUID
    user_id: UUID
    user_name: str | None
    profile_image_url: str | None
    joined_at: datetime


class ParticipantListResponse(BaseModel):
    items: list[ParticipantResponse]


class JoinEventResponse(BaseModel):
    success: bool = True
    participant: ParticipantResponse
    remaining_joins: int
