from dataclasses import dataclass
from typing import Literal

VerifyErrorCode = Literal["validation", "not_found", "lookup_failed"]


@dataclass(frozen=True)
class CompanyData:
    """Company resolved from an invitation code."""

    id: str
    name: str


@dataclass
class VerifyInvitationInput:
    code: str


@dataclass
class VerifyInvitationOutput:
    company: CompanyData | None = None
    success: bool = False
    error: str | None = None
    error_code: VerifyErrorCode | None = None
