from fastapi import APIRouter, Depends, Query

from eventboard.api.converters import to_event_response
from eventboard.api.deps import (
    get_admission,
    get_current_user,
    get_event_service,
    get_profile_service,
)
from eventboard.domain.enums import MyEventsFilter
from eventboard.schemas.me import ActionQuotaResponse, MyEventsResponse, QuotaResponse
from eventboard.schemas.profile import ProfileResponse, UpdateProfileRequest
from eventboard.services.admission import ActionQuota, AdmissionPolicies
from eventboard.services.event_service import CurrentUser, EventService
from eventboard.services.profile_service import ProfileService

router = APIRouter()


def _to_action_quota(quota: ActionQuota) -> ActionQuotaResponse:
    return ActionQuotaResponse(
        limit=quota.limit,
        remaining=quota.remaining,
        reset_at_ms=quota.reset_at_ms,
        enforced=quota.enforced,
    )


@router.get("/events", response_model=MyEventsResponse)
async def list_my_events(
    status_filter: MyEventsFilter = Query(default=MyEventsFilter.ALL, alias="status"),
    service: EventService = Depends(get_event_service),
    user: CurrentUser = Depends(get_current_user),
) -> MyEventsResponse:
    result = await service.list_my_events(user_id=user.id, status_filter=status_filter)
    return MyEventsResponse(
        created=[to_event_response(details) for details in result.created],
        joined=[to_event_response(details) for details in result.joined],
    )


@router.get("/quota", response_model=QuotaResponse)
async def get_quota(
    admission: AdmissionPolicies = Depends(get_admission),
    user: CurrentUser = Depends(get_current_user),
) -> QuotaResponse:
    snapshot = admission.quota(user.id)
    return QuotaResponse(
        event_creation=_to_action_quota(snapshot.event_creation),
        event_join=_to_action_quota(snapshot.event_join),
    )


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    service: ProfileService = Depends(get_profile_service),
    user: CurrentUser = Depends(get_current_user),
) -> ProfileResponse:
    profile = await service.get_own_profile(user)
    return ProfileResponse.model_validate(profile)


@router.patch("/profile", response_model=ProfileResponse)
async def update_profile(
    payload: UpdateProfileRequest,
    service: ProfileService = Depends(get_profile_service),
    user: CurrentUser = Depends(get_current_user),
) -> ProfileResponse:
    profile = await service.update_profile(user, payload.model_dump(exclude_unset=True))
    return ProfileResponse.model_validate(profile)
