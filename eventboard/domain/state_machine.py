from eventboard.domain.enums import EventStatus
from eventboard.domain.exceptions import InvalidEventTransition


class EventLifecycle:
    """State machine for event lifecycle: upcoming -> started -> finished."""

    _allowed_transitions: frozenset[tuple[EventStatus, EventStatus]] = frozenset(
        {
            (EventStatus.UPCOMING, EventStatus.STARTED),
            (EventStatus.UPCOMING, EventStatus.FINISHED),
            (EventStatus.STARTED, EventStatus.FINISHED),
        }
    )

    @classmethod
    def transition(cls, current: EventStatus, target: EventStatus) -> EventStatus:
        # Idempotent semantics for repeated UI actions.
        if current == target:
            return current
        if (current, target) not in cls._allowed_transitions:
            raise InvalidEventTransition(current=current, target=target)
        return target

    @staticmethod
    def is_joinable(status: EventStatus) -> bool:
        return status == EventStatus.UPCOMING

    @staticmethod
    def is_editable(status: EventStatus) -> bool:
        return status == EventStatus.UPCOMING

    @staticmethod
    def is_reviewable(status: EventStatus) -> bool:
        return status == EventStatus.FINISHED
