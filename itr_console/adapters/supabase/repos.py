"""Row repositories over the hosted REST API (PostgREST query syntax)."""

from datetime import UTC, datetime

from itr_console.adapters.rows import (
    certification_from_row,
    company_from_row,
    event_from_row,
    onboarding_from_row,
    onboarding_to_row,
    profile_from_row,
    profile_to_row,
    sso_log_from_row,
    sso_log_to_row,
)
from itr_console.domain.entities import (
    Certification,
    Company,
    Onboarding,
    Profile,
    ScheduledEvent,
    SsoLog,
)

from .client import SupabaseClient


def _ts(value: datetime) -> str:
    return value.astimezone(UTC).isoformat()


class _RestRepo:
    def __init__(self, client: SupabaseClient, access_token: str | None = None):
        self.client = client
        # Row-level security runs as the signed-in user when a token is set
        self.access_token = access_token


class SupabaseCompanyRepo(_RestRepo):
    def find_by_invitation_code(self, code: str) -> list[Company]:
        rows = self.client.select(
            "itr_companies",
            {"select": "*", "invitation_code": f"eq.{code}"},
            self.access_token,
        )
        return [company_from_row(r) for r in rows]

    def get_by_id(self, company_id: str) -> Company | None:
        rows = self.client.select(
            "itr_companies", {"select": "*", "id": f"eq.{company_id}"}, self.access_token
        )
        return company_from_row(rows[0]) if rows else None

    def list_all(self) -> list[Company]:
        rows = self.client.select("itr_companies", {"select": "*", "order": "name"}, self.access_token)
        return [company_from_row(r) for r in rows]


class SupabaseProfileRepo(_RestRepo):
    def get_by_id(self, profile_id: str) -> Profile | None:
        rows = self.client.select(
            "profiles", {"select": "*", "id": f"eq.{profile_id}"}, self.access_token
        )
        return profile_from_row(rows[0]) if rows else None

    def save(self, profile: Profile) -> None:
        self.client.insert("profiles", profile_to_row(profile), self.access_token, upsert=True)


class SupabaseOnboardingRepo(_RestRepo):
    def save(self, onboarding: Onboarding) -> None:
        self.client.insert("onboardings", onboarding_to_row(onboarding), self.access_token)

    def list_recent(self, limit: int | None = None) -> list[Onboarding]:
        params = {"select": "*,itr_companies(name)", "order": "created_at.desc"}
        if limit is not None:
            params["limit"] = str(limit)
        rows = self.client.select("onboardings", params, self.access_token)
        return [onboarding_from_row(r) for r in rows]


class SupabaseSsoLogRepo(_RestRepo):
    def save(self, log: SsoLog) -> None:
        self.client.insert("sso_logs", sso_log_to_row(log), self.access_token)

    def list_recent(self, limit: int = 200) -> list[SsoLog]:
        rows = self.client.select(
            "sso_logs",
            {"select": "*,itr_companies(name)", "order": "created_at.desc", "limit": str(limit)},
            self.access_token,
        )
        return [sso_log_from_row(r) for r in rows]


class SupabaseEventRepo(_RestRepo):
    def list_between(self, start: datetime, end: datetime) -> list[ScheduledEvent]:
        # Both bounds filter one column, and a params dict cannot repeat a key
        rows = self.client.select(
            "events",
            {
                "select": "*",
                "and": f"(start_time.gte.{_ts(start)},start_time.lt.{_ts(end)})",
                "order": "start_time.asc",
            },
            self.access_token,
        )
        return [event_from_row(r) for r in rows]


class SupabaseCertificationRepo(_RestRepo):
    def list_all(self) -> list[Certification]:
        rows = self.client.select(
            "certifications",
            {"select": "*,products(name)", "order": "level.asc,name.asc"},
            self.access_token,
        )
        return [certification_from_row(r) for r in rows]
