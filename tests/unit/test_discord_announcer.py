import json
from datetime import UTC, datetime
from uuid import uuid4

import httpx
import pytest

from eventboard.infra.discord import (
    AnnouncementError,
    DiscordWebhookAnnouncer,
    EventAnnouncement,
)
from eventboard.infra.discord.embeds import build_digest_embed, build_event_embed

WEBHOOK_URL = "https://discord.example.com/api/webhooks/1/token"
EVENT_DATE = datetime(2026, 10, 20, 18, 30, tzinfo=UTC)


def make_announcement(**overrides) -> EventAnnouncement:
    values = {
        "id": uuid4(),
        "title": "Pizza & Code",
        "event_date": EVENT_DATE,
        "description": "Free pizza for everyone who ships a PR.",
        "location": "Room 101",
        "creator_name": "Ada",
        "image_urls": ["https://cdn.example.com/pizza.png"],
    }
    values.update(overrides)
    return EventAnnouncement(**values)


def test_event_embed_links_back_to_event() -> None:
    event = make_announcement()

    embed = build_event_embed(event, "https://events.example.com/")

    assert embed["title"] == "🎉 New Event: Pizza & Code"
    assert embed["url"] == f"https://events.example.com/events/{event.id}"
    assert embed["fields"][0]["value"] == f"<t:{int(EVENT_DATE.timestamp())}:F>"
    assert embed["image"] == {"url": "https://cdn.example.com/pizza.png"}
    assert embed["footer"] == {"text": "Campus Micro-Event Board"}


def test_event_embed_defaults_for_missing_fields() -> None:
    event = make_announcement(description=None, location=None, creator_name=None, image_urls=[])

    embed = build_event_embed(event, "https://events.example.com")

    assert embed["description"] == "No description provided"
    assert embed["fields"][1]["value"] == "TBD"
    assert embed["fields"][2]["value"] == "Campus Student"
    assert "image" not in embed


def test_digest_embed_caps_field_count() -> None:
    events = [make_announcement(title=f"Event {i}") for i in range(30)]

    embed = build_digest_embed(events)

    assert len(embed["fields"]) == 25
    assert embed["fields"][0]["name"].startswith("Event 0 - <t:")
    assert embed["fields"][0]["value"].startswith("📍 Room 101\n")


@pytest.mark.asyncio
async def test_announce_event_posts_embed() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(204)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        announcer = DiscordWebhookAnnouncer(client, WEBHOOK_URL, "https://events.example.com")
        await announcer.announce_event(make_announcement())

    assert len(requests) == 1
    assert str(requests[0].url) == WEBHOOK_URL
    payload = json.loads(requests[0].content)
    assert payload["embeds"][0]["title"] == "🎉 New Event: Pizza & Code"


@pytest.mark.asyncio
async def test_empty_digest_posts_plain_message() -> None:
    payloads: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payloads.append(json.loads(request.content))
        return httpx.Response(204)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        announcer = DiscordWebhookAnnouncer(client, WEBHOOK_URL, "https://events.example.com")
        await announcer.announce_digest([])

    assert payloads == [{"content": "No events scheduled for today"}]


@pytest.mark.asyncio
async def test_webhook_failure_raises_announcement_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "boom"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        announcer = DiscordWebhookAnnouncer(client, WEBHOOK_URL, "https://events.example.com")
        with pytest.raises(AnnouncementError):
            await announcer.announce_event(make_announcement())
