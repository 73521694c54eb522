from eventboard.schemas.event import EventResponse
from eventboard.schemas.participant import ParticipantResponse
from eventboard.schemas.review import ReviewResponse
from eventboard.services.event_service import EventDetails


def to_event_response(details: EventDetails) -> EventResponse:
    response = EventResponse.model_validate(details.event)
    return response.model_copy(
        update={
            "creator_name": details.creator_name,
            "participant_count": details.participant_count,
        }
    )


def to_participant_response(participant) -> ParticipantResponse:
    user = participant.user
    return ParticipantResponse(
        id=participant.id,
        user_id=participant.user_id,
        user_name=user.name if user is not None else None,
        profile_image_url=user.profile_image_url if user is not None else None,
        joined_at=participant.joined_at,
    )


def to_review_response(review) -> ReviewResponse:
    user = review.user
    return ReviewResponse(
        id=review.id,
        event_id=review.event_id,
        user_id=review.user_id,
        user_name=user.name if user is not None else None,
        content=review.content,
        photo_urls=list(review.photo_urls or []),
        created_at=review.created_at,
    )
