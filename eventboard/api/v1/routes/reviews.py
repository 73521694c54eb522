from uuid import UUID

from fastapi import APIRouter, Depends, status

from eventboard.api.converters import to_review_response
from eventboard.api.deps import (
    SERVICE_ERRORS,
    get_current_user,
    get_event_service,
    raise_for_service_error,
)
from eventboard.schemas.review import CreateReviewRequest, ReviewListResponse, ReviewResponse
from eventboard.services.event_service import CurrentUser, EventService

router = APIRouter()


@router.get("/{event_id}/reviews", response_model=ReviewListResponse)
async def list_reviews(
    event_id: UUID,
    service: EventService = Depends(get_event_service),
) -> ReviewListResponse:
    try:
        reviews = await service.list_reviews(event_id)
    except SERVICE_ERRORS as exc:
        raise_for_service_error(exc)
    return ReviewListResponse(items=[to_review_response(review) for review in reviews])


@router.post(
    "/{event_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    event_id: UUID,
    payload: CreateReviewRequest,
    service: EventService = Depends(get_event_service),
    user: CurrentUser = Depends(get_current_user),
) -> ReviewResponse:
    try:
        review = await service.create_review(
            user=user,
            event_id=event_id,
            content=payload.content,
            photo_urls=[str(url) for url in payload.photo_urls],
        )
    except SERVICE_ERRORS as exc:
        raise_for_service_error(exc)
    return to_review_response(review)
