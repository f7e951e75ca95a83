import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from pydantic import BaseModel, Field, field_validator

from itr_console.domain.entities import Company, Onboarding

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

UNASSIGNED_CONTACT = "Not assigned"


class OnboardingDraft(BaseModel):
    """Onboarding creation form, validated before anything is written."""

    client_name: str = Field(min_length=2)
    itr_company_id: str = Field(min_length=1)
    contact_email: str
    contact_phone: str = Field(min_length=10)
    trainer: str | None = None
    bdc_date: date  # Purchase order date; required by the form, not stored
    products: list[str] = Field(min_length=1)
    doctor_count: int = Field(default=0, ge=0)
    paramedical_count: int = Field(default=0, ge=0)
    secretary_count: int = Field(default=0, ge=0)
    is_msp: bool = False
    ob_fees_activated: bool = True
    preferred_date: date | None = None
    comments: str | None = None

    @field_validator("client_name", "itr_company_id", "contact_phone", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("contact_email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = v.strip()
        if not _EMAIL_RE.match(v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("trainer", "comments", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


@dataclass
class CreateOnboardingInput:
    data: dict[str, Any]
    created_by: str | None = None


@dataclass
class CreateOnboardingOutput:
    onboarding: Onboarding | None = None
    success: bool = False
    error: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)


@dataclass
class ListOnboardingsInput:
    status: str = "all"
    search: str = ""


@dataclass
class ListOnboardingsOutput:
    onboardings: list[Onboarding] = field(default_factory=list)
    success: bool = False
    error: str | None = None


@dataclass
class DashboardOutput:
    counts: dict[str, int] = field(default_factory=dict)
    recent: list[Onboarding] = field(default_factory=list)
    total: int = 0
    success: bool = False
    error: str | None = None


@dataclass
class ListCompaniesOutput:
    companies: list[Company] = field(default_factory=list)
    success: bool = False
    error: str | None = None
