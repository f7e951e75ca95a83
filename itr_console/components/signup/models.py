"""
Sign-up flow models.

The flow state is an explicit tagged union instead of independent flags:
a mode (SignupMode or LoginMode) that carries its own step. Only SignupMode
has steps (CompanyStep then ProfileStep); LoginMode carries a LoginStep with
the email draft.
"""

from dataclasses import dataclass, field, replace
from typing import Literal

from itr_console.components.invitation import CompanyData
from itr_console.domain.notices import Notice

LinkErrorCode = Literal["validation", "rate_limited", "provider"]


@dataclass(frozen=True)
class ProfileFormData:
    first_name: str = ""
    last_name: str = ""
    email: str = ""

    def normalized(self) -> "ProfileFormData":
        return ProfileFormData(
            first_name=self.first_name.strip(),
            last_name=self.last_name.strip(),
            email=self.email.strip(),
        )

    def missing_fields(self) -> list[str]:
        norm = self.normalized()
        return [
            name
            for name, value in (
                ("first_name", norm.first_name),
                ("last_name", norm.last_name),
                ("email", norm.email),
            )
            if not value
        ]


# --- Steps ---

@dataclass(frozen=True)
class CompanyStep:
    invitation_code: str = ""

    name = "company"


@dataclass(frozen=True)
class ProfileStep:
    company: CompanyData
    profile: ProfileFormData = field(default_factory=ProfileFormData)
    invitation_code: str = ""  # Restored when going back

    name = "profile"


@dataclass(frozen=True)
class LoginStep:
    email: str = ""

    name = "login"


# --- Modes ---

@dataclass(frozen=True)
class SignupMode:
    step: CompanyStep | ProfileStep = field(default_factory=CompanyStep)

    name = "signup"


@dataclass(frozen=True)
class LoginMode:
    step: LoginStep = field(default_factory=LoginStep)

    name = "login"


@dataclass(frozen=True)
class SignUpState:
    mode: SignupMode | LoginMode = field(default_factory=SignupMode)
    loading: bool = False
    link_sent_to: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.mode.name, self.mode.step.name)

    @property
    def company(self) -> CompanyData | None:
        step = self.mode.step
        return step.company if isinstance(step, ProfileStep) else None

    def with_loading(self, loading: bool) -> "SignUpState":
        return replace(self, loading=loading)


class InvalidTransition(ValueError):
    """Action not allowed in the current flow state."""


# --- Session initiator I/O ---

@dataclass
class SignupLinkInput:
    profile: ProfileFormData
    company: CompanyData
    redirect_to: str | None = None


@dataclass
class LoginLinkInput:
    email: str
    redirect_to: str | None = None


@dataclass
class LinkOutput:
    email: str | None = None
    success: bool = False
    error: str | None = None
    error_code: LinkErrorCode | None = None
    missing_fields: list[str] = field(default_factory=list)


@dataclass
class FlowResult:
    success: bool
    notice: Notice | None = None
    error_code: str | None = None
