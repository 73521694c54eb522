"""Discord announcement adapters."""

from eventboard.infra.discord.announcer import (
    AnnouncementError,
    DiscordWebhookAnnouncer,
    EventAnnouncer,
    NoopAnnouncer,
)
from eventboard.infra.discord.models import EventAnnouncement

__all__ = [
    "AnnouncementError",
    "DiscordWebhookAnnouncer",
    "EventAnnouncement",
    "EventAnnouncer",
    "NoopAnnouncer",
]
