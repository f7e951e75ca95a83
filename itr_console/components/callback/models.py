from dataclasses import dataclass, field
from typing import Literal

CallbackState = Literal["idle", "processing-callback", "authenticated", "error"]


@dataclass(frozen=True)
class AuthCallbackParams:
    """Auth parameters carried by a sign-in link landing URL."""

    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None
    token_type: str | None = None
    type: str | None = None
    error: str | None = None
    error_code: str | None = None
    error_description: str | None = None

    @property
    def has_error(self) -> bool:
        return bool(self.error or self.error_code or self.error_description)

    @property
    def has_tokens(self) -> bool:
        return bool(self.access_token)

    @property
    def is_empty(self) -> bool:
        return not (self.has_error or self.has_tokens)


@dataclass
class CallbackOutcome:
    state: CallbackState
    redirect_to: str | None = None
    error_message: str | None = None
    clean_url: str | None = None
    transitions: list[CallbackState] = field(default_factory=list)

    @property
    def should_redirect(self) -> bool:
        return self.state == "authenticated" and self.redirect_to is not None
