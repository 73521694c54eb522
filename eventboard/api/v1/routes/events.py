from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from eventboard.api.converters import to_event_response
from eventboard.api.deps import (
    SERVICE_ERRORS,
    get_current_user,
    get_event_service,
    raise_for_service_error,
)
from eventboard.domain.enums import DateRange
from eventboard.schemas.event import (
    CreateEventRequest,
    EventListResponse,
    EventResponse,
    UpdateEventRequest,
    UpdateEventStatusRequest,
)
from eventboard.services.event_service import CurrentUser, EventService

router = APIRouter()


@router.get("", response_model=EventListResponse)
async def list_events(
    date_range: DateRange = Query(default=DateRange.ALL),
    limit: int = Query(default=20, ge=1, le=50),
    offset: int = Query(default=0, ge=0),
    service: EventService = Depends(get_event_service),
) -> EventListResponse:
    events = await service.list_events(date_range=date_range, limit=limit, offset=offset)
    return EventListResponse(
        items=[to_event_response(details) for details in events],
        limit=limit,
        offset=offset,
    )


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: CreateEventRequest,
    service: EventService = Depends(get_event_service),
    user: CurrentUser = Depends(get_current_user),
) -> EventResponse:
    try:
        details = await service.create_event(
            user=user,
            title=payload.title,
            event_date=payload.event_date,
            description=payload.description,
            location=payload.location,
            image_urls=payload.image_url_strings(),
        )
    except SERVICE_ERRORS as exc:
        raise_for_service_error(exc)
    return to_event_response(details)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: UUID,
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    try:
        details = await service.get_event(event_id)
    except SERVICE_ERRORS as exc:
        raise_for_service_error(exc)
    return to_event_response(details)


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: UUID,
    payload: UpdateEventRequest,
    service: EventService = Depends(get_event_service),
    user: CurrentUser = Depends(get_current_user),
) -> EventResponse:
    try:
        details = await service.update_event(
            user_id=user.id,
            event_id=event_id,
            title=payload.title,
            event_date=payload.event_date,
            description=payload.description,
            location=payload.location,
            image_urls=payload.image_url_strings(),
        )
    except SERVICE_ERRORS as exc:
        raise_for_service_error(exc)
    return to_event_response(details)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: UUID,
    service: EventService = Depends(get_event_service),
    user: CurrentUser = Depends(get_current_user),
) -> Response:
    try:
        await service.delete_event(user_id=user.id, event_id=event_id)
    except SERVICE_ERRORS as exc:
        raise_for_service_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{event_id}/status", response_model=EventResponse)
async def update_event_status(
    event_id: UUID,
    payload: UpdateEventStatusRequest,
    service: EventService = Depends(get_event_service),
    user: CurrentUser = Depends(get_current_user),
) -> EventResponse:
    try:
        details = await service.update_status(
            user_id=user.id,
            event_id=event_id,
            status=payload.status,
            started_at=payload.started_at,
        )
    except SERVICE_ERRORS as exc:
        raise_for_service_error(exc)
    return to_event_response(details)
