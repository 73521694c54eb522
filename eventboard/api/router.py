from fastapi import APIRouter

from eventboard.api.v1.routes import events, health, me, participation, reviews, users

api_router = APIRouter()
api_router.include_router(health.router, prefix="/v1", tags=["health"])
api_router.include_router(events.router, prefix="/v1/events", tags=["events"])
api_router.include_router(participation.router, prefix="/v1/events", tags=["participation"])
api_router.include_router(reviews.router, prefix="/v1/events", tags=["reviews"])
api_router.include_router(me.router, prefix="/v1/me", tags=["me"])
api_router.include_router(users.router, prefix="/v1/users", tags=["users"])
