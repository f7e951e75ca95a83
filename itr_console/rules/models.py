from typing import Literal

from pydantic import BaseModel, Field

from itr_console.domain.entities import ONBOARDING_STATUSES


class AuthRules(BaseModel):
    invitation_code_length: int = Field(default=8, ge=1)
    auth_route: str = "/auth"
    default_redirect: str = "/"
    otp_ttl_minutes: int = Field(default=60, ge=1)
    session_ttl_minutes: int = Field(default=60, ge=1)


class BackendRules(BaseModel):
    provider: Literal["sqlite", "supabase"] = "sqlite"
    request_timeout_seconds: float = 10.0


class WindowLimit(BaseModel):
    window_seconds: int
    max_requests: int | None = None


class RateLimitRules(BaseModel):
    magic_link: WindowLimit = WindowLimit(window_seconds=60, max_requests=3)


class OnboardingRules(BaseModel):
    status_values: list[str] = Field(default_factory=lambda: list(ONBOARDING_STATUSES))
    products: list[str] = Field(default_factory=list)
    recent_limit: int = 3


class ChatRules(BaseModel):
    default_assistant_id: str | None = None
    api_base_url: str = "https://api.openai.com/v1"
    poll_interval_seconds: float = 1.0
    max_polls: int = 30


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    auth: AuthRules = AuthRules()
    backend: BackendRules = BackendRules()
    rate_limits: RateLimitRules = RateLimitRules()
    onboarding: OnboardingRules = OnboardingRules()
    chat: ChatRules = ChatRules()
    ops: OpsRules = OpsRules()
