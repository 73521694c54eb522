from collections.abc import Sequence
from typing import Any, Protocol

import httpx
import structlog

from eventboard.infra.discord.embeds import build_digest_embed, build_event_embed
from eventboard.infra.discord.models import EventAnnouncement

logger = structlog.get_logger()


class AnnouncementError(RuntimeError):
    pass


class EventAnnouncer(Protocol):
    async def announce_event(self, event: EventAnnouncement) -> None: ...

    async def announce_digest(self, events: Sequence[EventAnnouncement]) -> None: ...


class NoopAnnouncer:
    async def announce_event(self, event: EventAnnouncement) -> None:
        _ = event
        return None

    async def announce_digest(self, events: Sequence[EventAnnouncement]) -> None:
        _ = events
        return None


class DiscordWebhookAnnouncer:
    """Posts embeds to a Discord channel through an incoming webhook."""

    def __init__(self, client: httpx.AsyncClient, webhook_url: str, app_url: str) -> None:
        self.client = client
        self.webhook_url = webhook_url
        self.app_url = app_url

    async def announce_event(self, event: EventAnnouncement) -> None:
        await self._post({"embeds": [build_event_embed(event, self.app_url)]})
        logger.info("event_announced", event_id=str(event.id), title=event.title)

    async def announce_digest(self, events: Sequence[EventAnnouncement]) -> None:
        if not events:
            await self._post({"content": "No events scheduled for today"})
            return
        await self._post({"embeds": [build_digest_embed(events)]})
        logger.info("event_digest_announced", event_count=len(events))

    async def _post(self, payload: dict[str, Any]) -> None:
        try:
            response = await self.client.post(self.webhook_url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise AnnouncementError(f"Discord webhook request failed: {exc}") from exc
