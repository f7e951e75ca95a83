from typing import Any, Protocol

from itr_console.domain.entities import AuthSession


class IdentityPort(Protocol):
    def get_session(self) -> AuthSession | None: ...

    def set_session(self, access_token: str, refresh_token: str) -> AuthSession: ...


class SsoRecorderPort(Protocol):
    def record(
        self,
        event_type: str,
        *,
        company_id: str | None = None,
        user_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None: ...
