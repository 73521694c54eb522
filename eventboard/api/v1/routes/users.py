from uuid import UUID

from fastapi import APIRouter, Depends

from eventboard.api.deps import SERVICE_ERRORS, get_profile_service, raise_for_service_error
from eventboard.schemas.profile import ProfileStatsResponse, PublicProfileResponse
from eventboard.services.profile_service import ProfileService

router = APIRouter()


@router.get("/{user_id}", response_model=PublicProfileResponse)
async def get_public_profile(
    user_id: UUID,
    service: ProfileService = Depends(get_profile_service),
) -> PublicProfileResponse:
    try:
        profile = await service.get_public_profile(user_id)
    except SERVICE_ERRORS as exc:
        raise_for_service_error(exc)
    user = profile.user
    return PublicProfileResponse(
        id=user.id,
        name=user.name,
        bio=user.bio,
        profile_image_url=user.profile_image_url,
        created_at=user.created_at,
        stats=ProfileStatsResponse(
            events_created=profile.stats.events_created,
            events_participated=profile.stats.events_participated,
            upcoming_events=profile.stats.upcoming_events,
        ),
    )
