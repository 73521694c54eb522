from uuid import UUID

from eventboard.domain.enums import AdmissionAction, EventStatus


class EventNotFoundError(LookupError):
    def __init__(self, event_id: UUID) -> None:
        super().__init__(f"Event '{event_id}' not found")
        self.event_id = event_id


class EventPermissionError(PermissionError):
    def __init__(self, event_id: UUID, action: str) -> None:
        super().__init__(f"You don't have permission to {action} event '{event_id}'")
        self.event_id = event_id
        self.action = action


class EventStateError(ValueError):
    def __init__(self, event_id: UUID, status: EventStatus, detail: str) -> None:
        super().__init__(detail)
        self.event_id = event_id
        self.status = status


class EventDateError(ValueError):
    def __init__(self, detail: str = "Event date must be in the future") -> None:
        super().__init__(detail)


class AlreadyJoinedError(ValueError):
    def __init__(self, event_id: UUID) -> None:
        super().__init__("Already joined this event")
        self.event_id = event_id


class NotParticipantError(LookupError):
    def __init__(self, event_id: UUID) -> None:
        super().__init__("Not a participant of this event")
        self.event_id = event_id


class ReviewNotAllowedError(PermissionError):
    def __init__(self, event_id: UUID) -> None:
        super().__init__("Only participants and creators can review events")
        self.event_id = event_id


class AlreadyReviewedError(ValueError):
    def __init__(self, event_id: UUID) -> None:
        super().__init__("You have already reviewed this event")
        self.event_id = event_id


class UserNotFoundError(LookupError):
    def __init__(self, user_id: UUID) -> None:
        super().__init__("User not found")
        self.user_id = user_id


def _describe_window(window_ms: int) -> str:
    if window_ms % 1000:
        return f"per {window_ms} ms"
    seconds = window_ms // 1000
    if seconds == 24 * 60 * 60:
        return "per day"
    if seconds == 3600:
        return "per hour"
    if seconds % 3600 == 0:
        return f"per {seconds // 3600} hours"
    return f"per {seconds} seconds"


class AdmissionDeniedError(Exception):
    def __init__(
        self,
        action: AdmissionAction,
        limit: int,
        window_ms: int,
        reset_at_ms: int,
    ) -> None:
        noun = "join" if action == AdmissionAction.JOIN_EVENT else "creation"
        window = _describe_window(window_ms)
        prefix = "Daily event" if window == "per day" else "Event"
        super().__init__(f"{prefix} {noun} limit reached ({limit} events {window})")
        self.action = action
        self.limit = limit
        self.window_ms = window_ms
        self.reset_at_ms = reset_at_ms
