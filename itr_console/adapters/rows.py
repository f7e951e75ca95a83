"""
Row <-> entity mapping shared by the SQLite and hosted backends.

Both backends hand back plain dicts keyed by column name. The hosted REST
API embeds joined tables as nested objects (``{"itr_companies": {"name": ...}}``)
while SQLite returns a flat ``company_name`` column; both are accepted.
"""

import json
from datetime import date, datetime
from typing import Any

from itr_console.domain.entities import (
    Certification,
    Company,
    Onboarding,
    Profile,
    ScheduledEvent,
    SsoLog,
)


def _json(value: Any, default: Any) -> Any:
    if value is None:
        return default
    if isinstance(value, str):
        return json.loads(value) if value else default
    return value


def _joined(row: dict[str, Any], table: str, column: str, flat_key: str) -> str | None:
    nested = row.get(table)
    if isinstance(nested, dict):
        return nested.get(column)
    return row.get(flat_key)


def _iso(value: datetime | date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _date(value: Any) -> date | None:
    # Hosted rows may carry full timestamps in date columns
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


# --- Companies ---

def company_from_row(row: dict[str, Any]) -> Company:
    return Company(
        id=row["id"],
        name=row["name"],
        invitation_code=row.get("invitation_code"),
        created_at=row["created_at"],
    )


def company_to_row(company: Company) -> dict[str, Any]:
    return {
        "id": company.id,
        "name": company.name,
        "invitation_code": company.invitation_code,
        "created_at": _iso(company.created_at),
    }


# --- Profiles ---

def profile_from_row(row: dict[str, Any]) -> Profile:
    return Profile(
        id=row["id"],
        email=row.get("email"),
        first_name=row.get("first_name"),
        last_name=row.get("last_name"),
        itr_company_id=row.get("itr_company_id"),
        company=row.get("company"),
        role=row.get("role") or "user",
        avatar_url=row.get("avatar_url"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def profile_to_row(profile: Profile) -> dict[str, Any]:
    return {
        "id": profile.id,
        "email": profile.email,
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "itr_company_id": profile.itr_company_id,
        "company": profile.company,
        "role": profile.role,
        "avatar_url": profile.avatar_url,
        "created_at": _iso(profile.created_at),
        "updated_at": _iso(profile.updated_at),
    }


# --- Onboardings ---

def onboarding_from_row(row: dict[str, Any]) -> Onboarding:
    return Onboarding(
        id=row["id"],
        client_name=row["client_name"],
        itr_company_id=row.get("itr_company_id"),
        itr_company_name=_joined(row, "itr_companies", "name", "company_name"),
        contact_email=row.get("contact_email"),
        contact_phone=row.get("contact_phone"),
        contact_person=row["contact_person"],
        products=_json(row.get("products"), []),
        doctor_count=row.get("doctor_count") or 0,
        paramedical_count=row.get("paramedical_count") or 0,
        secretary_count=row.get("secretary_count") or 0,
        is_msp=bool(row.get("is_msp")),
        ob_fees_activated=bool(row.get("ob_fees_activated", True)),
        desired_date=_date(row.get("desired_date")),
        scheduled_date=_date(row.get("scheduled_date")),
        assigned_to=row.get("assigned_to"),
        comments=row.get("comments"),
        status=row.get("status") or "pending",
        created_by=row.get("created_by"),
        created_at=row["created_at"],
        updated_at=row.get("updated_at") or row["created_at"],
    )


def onboarding_to_row(onboarding: Onboarding) -> dict[str, Any]:
    """Insert payload; the joined company name is not a column."""
    return {
        "id": onboarding.id,
        "client_name": onboarding.client_name,
        "itr_company_id": onboarding.itr_company_id,
        "contact_email": onboarding.contact_email,
        "contact_phone": onboarding.contact_phone,
        "contact_person": onboarding.contact_person,
        "products": list(onboarding.products),
        "doctor_count": onboarding.doctor_count,
        "paramedical_count": onboarding.paramedical_count,
        "secretary_count": onboarding.secretary_count,
        "is_msp": onboarding.is_msp,
        "ob_fees_activated": onboarding.ob_fees_activated,
        "desired_date": _iso(onboarding.desired_date),
        "scheduled_date": _iso(onboarding.scheduled_date),
        "assigned_to": onboarding.assigned_to,
        "comments": onboarding.comments,
        "status": onboarding.status,
        "created_by": onboarding.created_by,
        "created_at": _iso(onboarding.created_at),
        "updated_at": _iso(onboarding.updated_at),
    }


# --- SSO logs ---

def sso_log_from_row(row: dict[str, Any]) -> SsoLog:
    return SsoLog(
        id=row["id"],
        event_type=row["event_type"],
        ip_address=row.get("ip_address"),
        user_agent=row.get("user_agent"),
        itr_company_id=row.get("itr_company_id"),
        company_name=_joined(row, "itr_companies", "name", "company_name"),
        user_id=row.get("user_id"),
        metadata=_json(row.get("metadata"), {}),
        created_at=row["created_at"],
    )


def sso_log_to_row(log: SsoLog) -> dict[str, Any]:
    return {
        "id": log.id,
        "event_type": log.event_type,
        "ip_address": log.ip_address,
        "user_agent": log.user_agent,
        "itr_company_id": log.itr_company_id,
        "user_id": log.user_id,
        "metadata": log.metadata,
        "created_at": _iso(log.created_at),
    }


# --- Events & certifications ---

def event_from_row(row: dict[str, Any]) -> ScheduledEvent:
    return ScheduledEvent(
        id=row["id"],
        title=row["title"],
        description=row.get("description"),
        start_time=row["start_time"],
        end_time=row["end_time"],
        onboarding_id=row.get("onboarding_id"),
        created_by=row.get("created_by"),
    )


def certification_from_row(row: dict[str, Any]) -> Certification:
    return Certification(
        id=row["id"],
        name=row["name"],
        level=row.get("level") or 1,
        product_id=row.get("product_id"),
        product_name=_joined(row, "products", "name", "product_name"),
    )
