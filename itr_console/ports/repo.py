from datetime import datetime
from typing import Protocol

from itr_console.domain.entities import (
    Certification,
    Company,
    Onboarding,
    Profile,
    ScheduledEvent,
    SsoLog,
)


class CompanyRepoPort(Protocol):
    def find_by_invitation_code(self, code: str) -> list[Company]:
        """Exact-match lookup. Raises BackendError on transport failure."""
        ...

    def get_by_id(self, company_id: str) -> Company | None:
        ...

    def list_all(self) -> list[Company]:
        ...


class ProfileRepoPort(Protocol):
    def get_by_id(self, profile_id: str) -> Profile | None:
        ...

    def save(self, profile: Profile) -> None:
        ...


class OnboardingRepoPort(Protocol):
    def save(self, onboarding: Onboarding) -> None:
        ...

    def list_recent(self, limit: int | None = None) -> list[Onboarding]:
        """Newest first, company name joined."""
        ...


class SsoLogRepoPort(Protocol):
    def save(self, log: SsoLog) -> None:
        ...

    def list_recent(self, limit: int = 200) -> list[SsoLog]:
        """Newest first, company name joined."""
        ...


class EventRepoPort(Protocol):
    def list_between(self, start: datetime, end: datetime) -> list[ScheduledEvent]:
        """Events starting in [start, end), ordered by start time."""
        ...


class CertificationRepoPort(Protocol):
    def list_all(self) -> list[Certification]:
        ...
