from eventboard.domain.enums import EventStatus


class InvalidEventTransition(ValueError):
    def __init__(self, current: EventStatus, target: EventStatus) -> None:
        super().__init__(
            f"Cannot move event from '{current.value}' to '{target.value}'."
        )
        self.current = current
        self.target = target
