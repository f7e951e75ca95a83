from datetime import datetime
from typing import Protocol

from itr_console.domain.entities import ScheduledEvent


class EventRepoPort(Protocol):
    def list_between(self, start: datetime, end: datetime) -> list[ScheduledEvent]: ...
