import math
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventboard.core.db import get_db_session
from eventboard.core.rate_limit import epoch_millis
from eventboard.domain.exceptions import InvalidEventTransition
from eventboard.services.admission import AdmissionPolicies
from eventboard.services.errors import (
    AdmissionDeniedError,
    AlreadyJoinedError,
    AlreadyReviewedError,
    EventDateError,
    EventNotFoundError,
    EventPermissionError,
    EventStateError,
    NotParticipantError,
    ReviewNotAllowedError,
    UserNotFoundError,
)
from eventboard.services.event_service import CurrentUser, EventService
from eventboard.services.profile_service import ProfileService

# Every error the services raise on purpose; anything else propagates.
SERVICE_ERRORS = (
    AdmissionDeniedError,
    AlreadyJoinedError,
    AlreadyReviewedError,
    EventDateError,
    EventNotFoundError,
    EventPermissionError,
    EventStateError,
    InvalidEventTransition,
    NotParticipantError,
    ReviewNotAllowedError,
    UserNotFoundError,
    ValueError,
)


def get_admission(request: Request) -> AdmissionPolicies:
    return request.app.state.admission


async def get_event_service(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> EventService:
    return EventService(
        session=session,
        admission=request.app.state.admission,
        announcer=request.app.state.announcer,
    )


async def get_profile_service(
    session: AsyncSession = Depends(get_db_session),
) -> ProfileService:
    return ProfileService(session=session)


async def get_current_user(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    x_user_name: str | None = Header(default=None, alias="X-User-Name", max_length=100),
    x_user_email: str | None = Header(default=None, alias="X-User-Email", max_length=320),
) -> CurrentUser:
    # Identity is asserted by the auth gateway in front of this service.
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    try:
        user_id = UUID(x_user_id.strip())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        ) from exc
    return CurrentUser(id=user_id, name=x_user_name, email=x_user_email)


def retry_after_seconds(reset_at_ms: int, now_ms: int | None = None) -> int:
    now_ms = epoch_millis() if now_ms is None else now_ms
    return max(1, math.ceil((reset_at_ms - now_ms) / 1000))


def raise_for_service_error(exc: Exception) -> None:
    if isinstance(exc, AdmissionDeniedError):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=str(exc),
            headers={"Retry-After": str(retry_after_seconds(exc.reset_at_ms))},
        ) from exc
    if isinstance(exc, (EventNotFoundError, NotParticipantError, UserNotFoundError)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, (EventPermissionError, ReviewNotAllowedError)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, InvalidEventTransition):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if isinstance(exc, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    raise exc
