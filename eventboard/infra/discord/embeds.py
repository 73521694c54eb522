from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from eventboard.infra.discord.models import EventAnnouncement

EVENT_EMBED_COLOR = 0x0099FF
DIGEST_EMBED_COLOR = 0x00FF00
EMBED_FOOTER = "Campus Micro-Event Board"
DEFAULT_ORGANIZER = "Campus Student"
DIGEST_DESCRIPTION_CHARS = 100
# Discord rejects embeds with more than 25 fields.
MAX_EMBED_FIELDS = 25


def _discord_timestamp(moment: datetime, style: str) -> str:
    return f"<t:{int(moment.timestamp())}:{style}>"


def build_event_embed(
    event: EventAnnouncement,
    app_url: str,
    now: datetime | None = None,
) -> dict[str, Any]:
    embed: dict[str, Any] = {
        "title": f"🎉 New Event: {event.title}",
        "description": event.description or "No description provided",
        "url": f"{app_url.rstrip('/')}/events/{event.id}",
        "color": EVENT_EMBED_COLOR,
        "fields": [
            {
                "name": "📅 Date & Time",
                "value": _discord_timestamp(event.event_date, "F"),
                "inline": True,
            },
            {"name": "📍 Location", "value": event.location or "TBD", "inline": True},
            {
                "name": "👤 Organizer",
                "value": event.creator_name or DEFAULT_ORGANIZER,
                "inline": True,
            },
        ],
        "footer": {"text": EMBED_FOOTER},
        "timestamp": (now or datetime.now(UTC)).isoformat(),
    }
    if event.image_urls:
        embed["image"] = {"url": event.image_urls[0]}
    return embed


def build_digest_embed(
    events: Sequence[EventAnnouncement],
    now: datetime | None = None,
) -> dict[str, Any]:
    fields = []
    for event in events[:MAX_EMBED_FIELDS]:
        summary = (event.description or "No description")[:DIGEST_DESCRIPTION_CHARS]
        fields.append(
            {
                "name": f"{event.title} - {_discord_timestamp(event.event_date, 't')}",
                "value": f"📍 {event.location or 'TBD'}\n{summary}...",
                "inline": False,
            }
        )

    return {
        "title": "📅 Today's Events",
        "color": DIGEST_EMBED_COLOR,
        "fields": fields,
        "timestamp": (now or datetime.now(UTC)).isoformat(),
    }
