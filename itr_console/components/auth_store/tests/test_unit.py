"""
Auth store unit tests.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from itr_console.components.auth_store import AuthSnapshot, AuthStore
from itr_console.domain.entities import AuthEventType, AuthSession, AuthUser
from itr_console.domain.errors import IdentityError
from itr_console.domain.notices import Notice
from itr_console.ports.identity import AuthStateCallback, Subscription

# --- Mock Implementations ---


def _session(email: str = "ada@acme.test") -> AuthSession:
    return AuthSession(
        access_token=f"access-{email}",
        refresh_token="refresh",
        expires_at=datetime.now(UTC) + timedelta(hours=1),
        user=AuthUser(id=f"id-{email}", email=email),
    )


class MockIdentity:
    """Identity provider whose events are fired by the test."""

    def __init__(self, session: AuthSession | None = None) -> None:
        self.session = session
        self.callbacks: list[AuthStateCallback] = []
        self.sign_out_error: IdentityError | None = None
        self.on_get_session = None

    def get_session(self) -> AuthSession | None:
        if self.on_get_session is not None:
            self.on_get_session()
        return self.session

    def sign_out(self) -> None:
        if self.sign_out_error is not None:
            raise self.sign_out_error
        self.session = None
        self.fire("SIGNED_OUT", None)

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        self.callbacks.append(callback)
        return Subscription(unsubscribe=lambda: self.callbacks.remove(callback))

    def fire(self, event: AuthEventType, session: AuthSession | None) -> None:
        for cb in list(self.callbacks):
            cb(event, session)


class MockNotices:
    def __init__(self) -> None:
        self.posted: list[Notice] = []

    def notify(self, notice: Notice) -> None:
        self.posted.append(notice)


@pytest.fixture
def identity() -> MockIdentity:
    return MockIdentity()


@pytest.fixture
def notices() -> MockNotices:
    return MockNotices()


@pytest.fixture
def store(identity: MockIdentity, notices: MockNotices) -> AuthStore:
    return AuthStore(identity, notices=notices)


class TestLoading:
    def test_loading_until_started(self, store: AuthStore) -> None:
        assert store.loading is True
        assert store.snapshot == AuthSnapshot(session=None, loading=True)

    def test_initial_check_without_session_clears_loading(self, store: AuthStore) -> None:
        store.start()

        assert store.loading is False
        assert store.session is None

    def test_initial_check_with_session(self, identity: MockIdentity, store: AuthStore) -> None:
        identity.session = _session()

        store.start()

        assert store.loading is False
        assert store.user is not None
        assert store.user.email == "ada@acme.test"

    def test_event_before_initial_check_wins(self, identity: MockIdentity, store: AuthStore) -> None:
        fresh = _session("fresh@acme.test")
        identity.session = _session("stale@acme.test")
        identity.on_get_session = lambda: identity.fire("SIGNED_IN", fresh)
        seen: list[AuthSnapshot] = []
        store.subscribe(seen.append)

        store.start()

        assert store.session == fresh
        assert [s.loading for s in seen] == [False]

    def test_loading_clears_exactly_once(self, identity: MockIdentity, store: AuthStore) -> None:
        seen: list[AuthSnapshot] = []
        store.subscribe(seen.append)
        store.start()

        identity.fire("SIGNED_IN", _session())
        identity.fire("TOKEN_REFRESHED", _session())

        assert [s.loading for s in seen] == [False, False, False]

    def test_failed_initial_check_still_resolves(self, identity: MockIdentity, store: AuthStore) -> None:
        def boom() -> None:
            raise IdentityError("network down")

        identity.on_get_session = boom

        store.start()

        assert store.loading is False
        assert store.session is None


class TestEvents:
    @pytest.mark.parametrize("event", ["SIGNED_IN", "TOKEN_REFRESHED", "USER_UPDATED", "INITIAL_SESSION"])
    def test_session_events_replace_session(
        self, identity: MockIdentity, store: AuthStore, event: AuthEventType
    ) -> None:
        store.start()
        session = _session()

        identity.fire(event, session)

        assert store.session == session

    def test_signed_out_clears_session(self, identity: MockIdentity, store: AuthStore) -> None:
        identity.session = _session()
        store.start()

        identity.fire("SIGNED_OUT", None)

        assert store.session is None
        assert store.snapshot.is_authenticated is False

    def test_unsubscribe_stops_notifications(self, identity: MockIdentity, store: AuthStore) -> None:
        seen: list[AuthSnapshot] = []
        unsubscribe = store.subscribe(seen.append)
        store.start()

        unsubscribe()
        identity.fire("SIGNED_IN", _session())

        assert len(seen) == 1

    def test_stop_detaches_from_provider(self, identity: MockIdentity, store: AuthStore) -> None:
        store.start()
        assert len(identity.callbacks) == 1

        store.stop()

        assert identity.callbacks == []


class TestSignOut:
    def test_sign_out_clears_session_and_notifies(
        self, identity: MockIdentity, store: AuthStore, notices: MockNotices
    ) -> None:
        identity.session = _session()
        store.start()

        assert store.sign_out() is True

        assert store.session is None
        assert notices.posted[-1].title == "Signed out"
        assert notices.posted[-1].is_error is False

    def test_sign_out_failure_keeps_session(
        self, identity: MockIdentity, store: AuthStore, notices: MockNotices
    ) -> None:
        identity.session = _session()
        identity.sign_out_error = IdentityError("Session not found")
        store.start()

        assert store.sign_out() is False

        assert store.session is not None
        assert notices.posted[-1].is_error is True
        assert notices.posted[-1].message == "Session not found"
