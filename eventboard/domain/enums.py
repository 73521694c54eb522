from enum import Enum


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    STARTED = "started"
    FINISHED = "finished"


class DateRange(str, Enum):
    TODAY = "today"
    WEEK = "week"
    ALL = "all"
    PAST = "past"


class MyEventsFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    STARTED = "started"


class AdmissionAction(str, Enum):
    CREATE_EVENT = "create"
    JOIN_EVENT = "join"
