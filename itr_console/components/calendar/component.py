"""Calendar component - scheduled activations and trainings."""

import logging
from datetime import UTC, datetime, time, timedelta

from itr_console.domain.errors import BackendError

from .models import EventsForDayInput, EventsOutput, UpcomingEventsInput
from .ports import EventRepoPort

logger = logging.getLogger(__name__)


def _fetch(repo: EventRepoPort, start: datetime, end: datetime) -> EventsOutput:
    try:
        events = repo.list_between(start, end)
    except BackendError as e:
        logger.error(f"Failed to load events: {e.message}")
        return EventsOutput(success=False, error=e.message)
    return EventsOutput(events=sorted(events, key=lambda ev: ev.start_time), success=True)


def run_events_for_day(inp: EventsForDayInput, *, repo: EventRepoPort) -> EventsOutput:
    start = datetime.combine(inp.day, time.min, tzinfo=UTC)
    return _fetch(repo, start, start + timedelta(days=1))


def run_upcoming(inp: UpcomingEventsInput, *, repo: EventRepoPort) -> EventsOutput:
    if inp.days <= 0:
        return EventsOutput(success=False, error="days must be positive")
    return _fetch(repo, inp.now, inp.now + timedelta(days=inp.days))
