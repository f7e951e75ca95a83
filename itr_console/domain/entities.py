from datetime import UTC, date, datetime
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
OnboardingStatus = Literal["pending", "inprogress", "scheduled", "completed", "rejected"]
ProfileRole = Literal["user", "trainer", "admin"]
AuthEventType = Literal[
    "INITIAL_SESSION",
    "SIGNED_IN",
    "SIGNED_OUT",
    "TOKEN_REFRESHED",
    "USER_UPDATED",
]

ONBOARDING_STATUSES: tuple[OnboardingStatus, ...] = (
    "pending",
    "inprogress",
    "scheduled",
    "completed",
    "rejected",
)


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- Companies & Profiles ---

class Company(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    invitation_code: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class Profile(BaseModel):
    id: str  # Same id as the identity provider user
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    itr_company_id: str | None = None
    company: str | None = None
    role: str = "user"
    avatar_url: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or (self.email or "")


# --- Onboardings ---

class Onboarding(BaseModel):
    id: str = Field(default_factory=_new_id)
    client_name: str
    itr_company_id: str | None = None
    itr_company_name: str | None = None  # Joined from itr_companies on reads
    contact_email: str | None = None
    contact_phone: str | None = None
    contact_person: str
    products: list[str] = Field(default_factory=list)
    doctor_count: int = 0
    paramedical_count: int = 0
    secretary_count: int = 0
    is_msp: bool = False
    ob_fees_activated: bool = True
    desired_date: date | None = None
    scheduled_date: date | None = None
    assigned_to: str | None = None
    comments: str | None = None
    status: OnboardingStatus = "pending"
    created_by: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


# --- Scheduling & Training ---

class ScheduledEvent(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    onboarding_id: str | None = None
    created_by: str | None = None


class Certification(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    level: int = 1
    product_id: str | None = None
    product_name: str | None = None


# --- Audit ---

class SsoLog(BaseModel):
    id: str = Field(default_factory=_new_id)
    event_type: str
    ip_address: str | None = None
    user_agent: str | None = None
    itr_company_id: str | None = None
    company_name: str | None = None  # Joined from itr_companies on reads
    user_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)


# --- Identity provider entities ---

class AuthUser(BaseModel):
    id: str
    email: str
    user_metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)


class AuthSession(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: AuthUser

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now
