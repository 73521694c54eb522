from pydantic import BaseModel

from eventboard.schemas.event import EventResponse


class MyEventsResponse(BaseModel):
    created: list[EventResponse]
    joined: list[EventResponse]


class ActionQuotaResponse(BaseModel):
    limit: int
    remaining: int
    reset_at_ms: int
    enforced: bool


class QuotaResponse(BaseModel):
    event_creation: ActionQuotaResponse
    event_join: ActionQuotaResponse
