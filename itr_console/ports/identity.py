"""
Identity provider port.

The hosted identity service owns users, one-time email links and session
tokens. The console only asks it to send links, to establish a session from
callback tokens, to report the current session and to sign out. State changes
are pushed to subscribers, mirroring the provider SDK's auth listener.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from itr_console.domain.entities import AuthEventType, AuthSession

AuthStateCallback = Callable[[AuthEventType, AuthSession | None], None]


@dataclass
class Subscription:
    """Handle returned by on_auth_state_change."""

    unsubscribe: Callable[[], None]


class IdentityProviderPort(Protocol):
    def sign_in_with_otp(
        self,
        email: str,
        redirect_to: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Ask the provider to email a one-time sign-in link. Raises IdentityError."""
        ...

    def get_session(self) -> AuthSession | None:
        """Current session for this client, refreshed if needed."""
        ...

    def set_session(self, access_token: str, refresh_token: str) -> AuthSession:
        """Establish a session from callback tokens. Raises IdentityError."""
        ...

    def sign_out(self) -> None:
        """End the current session. Raises IdentityError."""
        ...

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        ...
