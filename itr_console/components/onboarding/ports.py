from datetime import datetime
from typing import Protocol

from itr_console.domain.entities import Company, Onboarding


class OnboardingRepoPort(Protocol):
    def save(self, onboarding: Onboarding) -> None: ...

    def list_recent(self, limit: int | None = None) -> list[Onboarding]: ...


class CompanyRepoPort(Protocol):
    def list_all(self) -> list[Company]: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
