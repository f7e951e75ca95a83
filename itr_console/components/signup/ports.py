from typing import Any, Protocol

from itr_console.domain.entities import Company


class IdentityPort(Protocol):
    def sign_in_with_otp(
        self,
        email: str,
        redirect_to: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None: ...


class CompanyRepoPort(Protocol):
    def find_by_invitation_code(self, code: str) -> list[Company]: ...


class RateLimiterPort(Protocol):
    def check_magic_link(self, email: str) -> bool: ...


class SsoRecorderPort(Protocol):
    def record(
        self,
        event_type: str,
        *,
        company_id: str | None = None,
        user_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None: ...
