"""
Calendar component.
"""

from .component import run_events_for_day, run_upcoming
from .models import EventsForDayInput, EventsOutput, UpcomingEventsInput
from .ports import EventRepoPort

__all__ = [
    "run_events_for_day",
    "run_upcoming",
    "EventsForDayInput",
    "EventsOutput",
    "UpcomingEventsInput",
    "EventRepoPort",
]
