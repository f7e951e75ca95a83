from typing import Protocol

from itr_console.domain.entities import AuthSession
from itr_console.domain.notices import Notice
from itr_console.ports.identity import AuthStateCallback, Subscription


class IdentityPort(Protocol):
    def get_session(self) -> AuthSession | None: ...

    def sign_out(self) -> None: ...

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription: ...


class NoticePort(Protocol):
    def notify(self, notice: Notice) -> None: ...
