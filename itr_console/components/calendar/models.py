from dataclasses import dataclass, field
from datetime import date, datetime

from itr_console.domain.entities import ScheduledEvent


@dataclass
class EventsForDayInput:
    day: date


@dataclass
class UpcomingEventsInput:
    now: datetime
    days: int = 7


@dataclass
class EventsOutput:
    events: list[ScheduledEvent] = field(default_factory=list)
    success: bool = False
    error: str | None = None
