from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from itr_console.components.auth_store import AuthSnapshot, AuthStore
from itr_console.components.callback import CallbackHandler
from itr_console.components.sso_logs import SsoLogRecorder
from itr_console.domain.entities import AuthUser, Profile
from itr_console.domain.errors import BackendError
from itr_console.ports.identity import IdentityProviderPort
from itr_console.ports.notices import NoticePort

if TYPE_CHECKING:
    from itr_console.ui.context import ServiceContext


@dataclass
class AppState:
    """Per-page console session: its own identity client, auth store and audit recorder."""

    identity: IdentityProviderPort
    auth: AuthStore
    sso: SsoLogRecorder
    callback: CallbackHandler
    _profile: Profile | None = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        ctx: ServiceContext,
        notices: NoticePort | None = None,
        client_ip: str | None = None,
        user_agent: str | None = None,
    ) -> AppState:
        identity = ctx.new_identity()
        sso = SsoLogRecorder(
            ctx.sso_log_repo, ctx.clock, ip_address=client_ip, user_agent=user_agent
        )
        state = cls(
            identity=identity,
            auth=AuthStore(identity, notices=notices),
            sso=sso,
            callback=CallbackHandler(
                identity, sso=sso, default_redirect=ctx.rules.auth.default_redirect
            ),
        )
        state.auth.subscribe(state._on_auth_change)
        return state

    @property
    def current_user(self) -> AuthUser | None:
        return self.auth.user

    def profile(self, ctx: ServiceContext) -> Profile | None:
        """Profile row of the signed-in user, cached until sign-out."""
        user = self.current_user
        if user is None:
            self._profile = None
            return None
        if self._profile is None or self._profile.id != user.id:
            try:
                self._profile = ctx.profile_repo.get_by_id(user.id)
            except BackendError:
                return None
        return self._profile

    def _on_auth_change(self, snapshot: AuthSnapshot) -> None:
        if not snapshot.loading and snapshot.session is None:
            self._profile = None
            self.callback.reset()

    def logout(self) -> bool:
        self._profile = None
        return self.auth.sign_out()
