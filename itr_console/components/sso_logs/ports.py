from datetime import datetime
from typing import Protocol

from itr_console.domain.entities import SsoLog


class SsoLogRepoPort(Protocol):
    def save(self, log: SsoLog) -> None: ...

    def list_recent(self, limit: int = 200) -> list[SsoLog]: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
