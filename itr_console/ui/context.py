from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

if TYPE_CHECKING:
    from itr_console.app_shell.rate_limit import RateLimiter
    from itr_console.ports.identity import IdentityProviderPort

from itr_console.adapters.auth.tokens import JWTTokenAdapter
from itr_console.adapters.clock import SystemClock
from itr_console.adapters.dev_email import DevEmailAdapter
from itr_console.adapters.openai_assistant import OpenAIAssistantAdapter
from itr_console.adapters.sqlite.repos import (
    SQLiteCertificationRepo,
    SQLiteCompanyRepo,
    SQLiteEventRepo,
    SQLiteOnboardingRepo,
    SQLiteProfileRepo,
    SQLiteSsoLogRepo,
)
from itr_console.app_shell.config import Settings
from itr_console.ports.repo import (
    CertificationRepoPort,
    CompanyRepoPort,
    EventRepoPort,
    OnboardingRepoPort,
    ProfileRepoPort,
    SsoLogRepoPort,
)
from itr_console.rules.models import Rules


@dataclass
class ServiceContext:
    """Process-wide adapters shared by every console session."""

    settings: Settings
    rules: Rules
    company_repo: CompanyRepoPort
    profile_repo: ProfileRepoPort
    onboarding_repo: OnboardingRepoPort
    sso_log_repo: SsoLogRepoPort
    event_repo: EventRepoPort
    certification_repo: CertificationRepoPort
    rate_limiter: RateLimiter
    assistant: OpenAIAssistantAdapter
    email: DevEmailAdapter
    tokens: JWTTokenAdapter
    supabase: Any = None  # SupabaseClient when backend.provider is "supabase"
    clock: Any = None  # For testing/injection

    @classmethod
    def create(cls, settings: Settings, rules: Rules) -> ServiceContext:
        from itr_console.app_shell.rate_limit import RateLimiter

        clock = SystemClock()
        supabase = None

        if rules.backend.provider == "supabase":
            from itr_console.adapters.supabase.client import SupabaseClient
            from itr_console.adapters.supabase.repos import (
                SupabaseCertificationRepo,
                SupabaseCompanyRepo,
                SupabaseEventRepo,
                SupabaseOnboardingRepo,
                SupabaseProfileRepo,
                SupabaseSsoLogRepo,
            )

            supabase = SupabaseClient(
                settings.supabase_url,
                settings.supabase_anon_key,
                timeout=rules.backend.request_timeout_seconds,
            )
            company_repo: CompanyRepoPort = SupabaseCompanyRepo(supabase)
            profile_repo: ProfileRepoPort = SupabaseProfileRepo(supabase)
            onboarding_repo: OnboardingRepoPort = SupabaseOnboardingRepo(supabase)
            sso_log_repo: SsoLogRepoPort = SupabaseSsoLogRepo(supabase)
            event_repo: EventRepoPort = SupabaseEventRepo(supabase)
            certification_repo: CertificationRepoPort = SupabaseCertificationRepo(supabase)
        else:
            db_path = settings.db_path
            company_repo = SQLiteCompanyRepo(db_path)
            profile_repo = SQLiteProfileRepo(db_path)
            onboarding_repo = SQLiteOnboardingRepo(db_path)
            sso_log_repo = SQLiteSsoLogRepo(db_path)
            event_repo = SQLiteEventRepo(db_path)
            certification_repo = SQLiteCertificationRepo(db_path)

        assistant = OpenAIAssistantAdapter(
            settings.openai_api_key,
            base_url=rules.chat.api_base_url,
            poll_interval=rules.chat.poll_interval_seconds,
            max_polls=rules.chat.max_polls,
        )

        return cls(
            settings=settings,
            rules=rules,
            company_repo=company_repo,
            profile_repo=profile_repo,
            onboarding_repo=onboarding_repo,
            sso_log_repo=sso_log_repo,
            event_repo=event_repo,
            certification_repo=certification_repo,
            rate_limiter=RateLimiter(rules.rate_limits),
            assistant=assistant,
            email=DevEmailAdapter(),
            tokens=JWTTokenAdapter(settings.secret_key),
            supabase=supabase,
            clock=clock,
        )

    def new_identity(self) -> IdentityProviderPort:
        """Identity provider for one console session (sessions never share tokens)."""
        if self.supabase is not None:
            from itr_console.adapters.supabase.identity import SupabaseIdentityProvider

            return SupabaseIdentityProvider(self.supabase, clock=self.clock)

        from itr_console.adapters.local_identity import LocalIdentityProvider

        auth = self.rules.auth
        return LocalIdentityProvider(
            self.settings.db_path,
            email=self.email,
            tokens=self.tokens,
            api_url=self.settings.api_url,
            profile_repo=self.profile_repo,
            otp_ttl_minutes=auth.otp_ttl_minutes,
            session_ttl_minutes=auth.session_ttl_minutes,
            clock=self.clock,
        )

    def auth_redirect_url(self, redirect: str | None = None) -> str:
        """Where emailed sign-in links send the browser back to."""
        url = f"{self.settings.site_url}{self.rules.auth.auth_route}"
        if redirect and redirect != self.rules.auth.default_redirect:
            url += f"?redirect={quote(redirect, safe='/')}"
        return url
