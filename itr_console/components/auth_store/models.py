from dataclasses import dataclass

from itr_console.domain.entities import AuthSession, AuthUser


@dataclass(frozen=True)
class AuthSnapshot:
    """Immutable view of the store handed to listeners and route guards."""

    session: AuthSession | None = None
    loading: bool = True

    @property
    def user(self) -> AuthUser | None:
        return self.session.user if self.session is not None else None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None
