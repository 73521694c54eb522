import asyncio

import httpx
import structlog

from eventboard.core.config import get_settings
from eventboard.core.db import close_engine, get_session_factory, init_engine
from eventboard.core.logging import setup_logging
from eventboard.domain.enums import DateRange
from eventboard.infra.discord import DiscordWebhookAnnouncer, EventAnnouncement
from eventboard.services.event_service import EventService

logger = structlog.get_logger()


async def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)
    if not settings.discord_webhook_url:
        logger.error("digest_skipped", reason="DISCORD_WEBHOOK_URL is not configured")
        return

    engine = init_engine()
    try:
        session_factory = get_session_factory()
        async with session_factory() as session:
            service = EventService(session)
            todays_events = await service.list_events(date_range=DateRange.TODAY, limit=50)

        announcements = [
            EventAnnouncement(
                id=details.event.id,
                title=details.event.title,
                event_date=details.event.event_date,
                description=details.event.description,
                location=details.event.location,
                creator_name=details.creator_name,
                image_urls=list(details.event.image_urls or []),
            )
            for details in todays_events
        ]
        async with httpx.AsyncClient(timeout=settings.discord_timeout_seconds) as client:
            announcer = DiscordWebhookAnnouncer(
                client=client,
                webhook_url=settings.discord_webhook_url,
                app_url=settings.public_app_url,
            )
            await announcer.announce_digest(announcements)
    finally:
        await close_engine(engine)


if __name__ == "__main__":
    asyncio.run(main())
