"""
Auth state store.

Single owner of the current session for one console session. Created at the
application root and passed to whatever needs it. The store subscribes to
the identity provider before asking for the initial session, so no event is
missed; `loading` clears on whichever of the two resolves first, exactly
once.
"""

import logging
from collections.abc import Callable
from threading import Lock

from itr_console.domain import notices
from itr_console.domain.entities import AuthEventType, AuthSession, AuthUser
from itr_console.domain.errors import IdentityError
from itr_console.ports.identity import Subscription

from .models import AuthSnapshot
from .ports import IdentityPort, NoticePort

logger = logging.getLogger(__name__)

Listener = Callable[[AuthSnapshot], None]

SESSION_EVENTS: frozenset[str] = frozenset(
    {"INITIAL_SESSION", "SIGNED_IN", "TOKEN_REFRESHED", "USER_UPDATED"}
)


class AuthStore:
    def __init__(self, identity: IdentityPort, notices: NoticePort | None = None):
        self.identity = identity
        self.notices = notices
        self._session: AuthSession | None = None
        self._loading = True
        self._listeners: list[Listener] = []
        self._subscription: Subscription | None = None
        self._lock = Lock()

    # --- read side ---

    @property
    def session(self) -> AuthSession | None:
        return self._session

    @property
    def user(self) -> AuthUser | None:
        return self._session.user if self._session is not None else None

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def snapshot(self) -> AuthSnapshot:
        return AuthSnapshot(session=self._session, loading=self._loading)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns the function that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # --- lifecycle ---

    def start(self) -> None:
        if self._subscription is not None:
            return
        self._subscription = self.identity.on_auth_state_change(self._on_event)

        try:
            session = self.identity.get_session()
        except IdentityError as e:
            logger.error(f"Initial session check failed: {e.message}")
            session = None

        with self._lock:
            if not self._loading:
                # An event already resolved the store
                return
            self._session = session
            self._loading = False
            snapshot = self.snapshot
        logger.info(f"Initial session check resolved (authenticated={session is not None})")
        self._emit(snapshot)

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def sign_out(self) -> bool:
        try:
            self.identity.sign_out()
        except IdentityError as e:
            logger.error(f"Sign-out failed: {e.message}")
            self._notify(notices.error("Sign-out error", e.message))
            return False

        with self._lock:
            self._session = None
            self._loading = False
            snapshot = self.snapshot
        self._emit(snapshot)
        self._notify(notices.info("Signed out", "You have been signed out."))
        return True

    # --- internals ---

    def _on_event(self, event: AuthEventType, session: AuthSession | None) -> None:
        with self._lock:
            if event == "SIGNED_OUT":
                self._session = None
            elif event in SESSION_EVENTS:
                self._session = session
            else:
                logger.warning(f"Ignoring unknown auth event {event}")
                return
            self._loading = False
            snapshot = self.snapshot
        logger.info(f"Auth event {event}")
        self._emit(snapshot)

    def _emit(self, snapshot: AuthSnapshot) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(snapshot)

    def _notify(self, notice: notices.Notice) -> None:
        if self.notices is not None:
            self.notices.notify(notice)
