from uuid import UUID

from fastapi import APIRouter, Depends

from eventboard.api.converters import to_participant_response
from eventboard.api.deps import (
    SERVICE_ERRORS,
    get_current_user,
    get_event_service,
    raise_for_service_error,
)
from eventboard.schemas.participant import JoinEventResponse, ParticipantListResponse
from eventboard.services.event_service import CurrentUser, EventService

router = APIRouter()


@router.post("/{event_id}/join", response_model=JoinEventResponse)
async def join_event(
    event_id: UUID,
    service: EventService = Depends(get_event_service),
    user: CurrentUser = Depends(get_current_user),
) -> JoinEventResponse:
    try:
        result = await service.join_event(user=user, event_id=event_id)
    except SERVICE_ERRORS as exc:
        raise_for_service_error(exc)
    return JoinEventResponse(
        participant=to_participant_response(result.participant),
        remaining_joins=result.remaining_joins,
    )


@router.delete("/{event_id}/join")
async def leave_event(
    event_id: UUID,
    service: EventService = Depends(get_event_service),
    user: CurrentUser = Depends(get_current_user),
) -> dict[str, bool]:
    try:
        await service.leave_event(user_id=user.id, event_id=event_id)
    except SERVICE_ERRORS as exc:
        raise_for_service_error(exc)
    return {"success": True}


@router.get("/{event_id}/participants", response_model=ParticipantListResponse)
async def list_participants(
    event_id: UUID,
    service: EventService = Depends(get_event_service),
) -> ParticipantListResponse:
    try:
        participants = await service.list_participants(event_id)
    except SERVICE_ERRORS as exc:
        raise_for_service_error(exc)
    return ParticipantListResponse(
        items=[to_participant_response(participant) for participant in participants]
    )
