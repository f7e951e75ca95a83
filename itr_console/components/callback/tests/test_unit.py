"""
Callback component unit tests.

Tests for parsing sign-in link landings and the handler state machine.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from itr_console.components.callback import (
    CallbackHandler,
    callback_error_message,
    parse_auth_callback,
    resolve_redirect,
    sanitize_callback_url,
)
from itr_console.domain.entities import AuthSession, AuthUser
from itr_console.domain.errors import IdentityError

# --- Mock Implementations ---


def _session(user_id: str = "user-1") -> AuthSession:
    return AuthSession(
        access_token="access",
        refresh_token="refresh",
        expires_at=datetime.now(UTC) + timedelta(hours=1),
        user=AuthUser(
            id=user_id,
            email="ada@acme.test",
            user_metadata={"itr_company_id": "company-acme"},
        ),
    )


class MockIdentity:
    def __init__(self, session: AuthSession | None = None, error: IdentityError | None = None):
        self.session = session
        self.error = error
        self.set_session_calls: list[tuple[str, str]] = []

    def get_session(self) -> AuthSession | None:
        return self.session

    def set_session(self, access_token: str, refresh_token: str) -> AuthSession:
        self.set_session_calls.append((access_token, refresh_token))
        if self.error is not None:
            raise self.error
        self.session = _session()
        return self.session


class MockSsoRecorder:
    def __init__(self) -> None:
        self.events: list[str] = []

    def record(self, event_type: str, **kwargs: Any) -> None:
        self.events.append(event_type)


BASE = "http://localhost:8550/auth"


# --- Boundary parsing ---


class TestParseAuthCallback:
    def test_error_fragment_is_decoded(self) -> None:
        params = parse_auth_callback(f"{BASE}#error=access_denied&error_description=Link+expired")

        assert params.has_error is True
        assert params.error == "access_denied"
        assert callback_error_message(params) == "Link expired"

    def test_percent_escapes_are_decoded(self) -> None:
        params = parse_auth_callback(
            f"{BASE}?error=server_error&error_description=Email%20link%20is%20invalid%2C%20sorry"
        )

        assert callback_error_message(params) == "Email link is invalid, sorry"

    def test_fragment_wins_over_query(self) -> None:
        params = parse_auth_callback(f"{BASE}?error=from_query#error=from_fragment")

        assert params.error == "from_fragment"

    def test_tokens_in_fragment(self) -> None:
        params = parse_auth_callback(
            f"{BASE}?redirect=/onboardings#access_token=a.b.c&refresh_token=r1"
            "&expires_in=3600&token_type=bearer&type=magiclink"
        )

        assert params.has_tokens is True
        assert params.access_token == "a.b.c"
        assert params.refresh_token == "r1"
        assert params.expires_in == 3600
        assert params.type == "magiclink"

    def test_plain_url_is_empty(self) -> None:
        assert parse_auth_callback(f"{BASE}?redirect=/").is_empty is True

    def test_error_message_falls_back_to_code(self) -> None:
        assert callback_error_message(parse_auth_callback(f"{BASE}#error=a&error_code=otp_expired")) == "otp_expired"
        assert callback_error_message(parse_auth_callback(f"{BASE}#error=access_denied")) == "access_denied"


class TestSanitizeCallbackUrl:
    def test_fragment_and_auth_params_removed(self) -> None:
        url = f"{BASE}?redirect=/calendar&error=x&error_description=y#access_token=t"

        assert sanitize_callback_url(url) == f"{BASE}?redirect=/calendar"

    def test_url_without_query(self) -> None:
        assert sanitize_callback_url(f"{BASE}#error=access_denied") == BASE


class TestResolveRedirect:
    @pytest.mark.parametrize(
        "url,expected",
        [
            (f"{BASE}?redirect=/onboardings", "/onboardings"),
            (f"{BASE}?redirect=%2Fcalendar", "/calendar"),
            (BASE, "/"),
            (f"{BASE}?redirect=", "/"),
            (f"{BASE}?redirect=https://evil.test/", "/"),
            (f"{BASE}?redirect=//evil.test", "/"),
        ],
    )
    def test_same_site_paths_only(self, url: str, expected: str) -> None:
        assert resolve_redirect(url) == expected

    def test_custom_default(self) -> None:
        assert resolve_redirect(BASE, default="/profile") == "/profile"


# --- Handler state machine ---


class TestCallbackHandler:
    def test_error_in_url_moves_to_error(self) -> None:
        sso = MockSsoRecorder()
        handler = CallbackHandler(MockIdentity(), sso=sso)

        outcome = handler.mount(f"{BASE}#error=access_denied&error_description=Link+expired")

        assert outcome.state == "error"
        assert outcome.error_message == "Link expired"
        assert outcome.transitions == ["idle", "processing-callback", "error"]
        assert outcome.clean_url == BASE
        assert "#" not in outcome.clean_url
        assert outcome.should_redirect is False
        assert sso.events == ["callback_failed"]

    def test_tokens_establish_session(self) -> None:
        identity = MockIdentity()
        handler = CallbackHandler(identity)

        outcome = handler.mount(
            f"{BASE}?redirect=/training#access_token=acc&refresh_token=ref&type=magiclink"
        )

        assert identity.set_session_calls == [("acc", "ref")]
        assert outcome.state == "authenticated"
        assert outcome.transitions == ["idle", "processing-callback", "authenticated"]
        assert outcome.redirect_to == "/training"
        assert outcome.clean_url == f"{BASE}?redirect=/training"

    def test_provider_rejection_is_an_error(self) -> None:
        identity = MockIdentity(error=IdentityError("Invalid Refresh Token", code="invalid_grant"))
        handler = CallbackHandler(identity)

        outcome = handler.mount(f"{BASE}#access_token=acc&refresh_token=ref")

        assert outcome.state == "error"
        assert outcome.error_message == "Invalid Refresh Token"

    def test_missing_refresh_token_is_an_error(self) -> None:
        identity = MockIdentity()
        handler = CallbackHandler(identity)

        outcome = handler.mount(f"{BASE}#access_token=acc")

        assert outcome.state == "error"
        assert identity.set_session_calls == []

    @pytest.mark.parametrize(
        "url,expected",
        [
            (f"{BASE}?redirect=/onboardings", "/onboardings"),
            (BASE, "/"),
        ],
    )
    def test_existing_session_redirects_immediately(self, url: str, expected: str) -> None:
        handler = CallbackHandler(MockIdentity(session=_session()))

        outcome = handler.mount(url)

        assert outcome.state == "authenticated"
        assert outcome.transitions == ["idle", "authenticated"]
        assert outcome.redirect_to == expected
        assert outcome.should_redirect is True

    def test_no_data_no_session_stays_idle(self) -> None:
        handler = CallbackHandler(MockIdentity())

        outcome = handler.mount(f"{BASE}?redirect=/")

        assert outcome.state == "idle"
        assert outcome.transitions == ["idle"]
        assert outcome.redirect_to is None

    def test_remount_on_clean_url_does_not_reprocess(self) -> None:
        identity = MockIdentity()
        handler = CallbackHandler(identity)
        first = handler.mount(f"{BASE}#access_token=acc&refresh_token=ref")

        second = handler.mount(first.clean_url or "")

        assert second is first
        assert len(identity.set_session_calls) == 1

    def test_reset_after_sign_out_checks_again(self) -> None:
        identity = MockIdentity()
        handler = CallbackHandler(identity)
        first = handler.mount(f"{BASE}?access_token=acc&refresh_token=ref")
        identity.session = None

        handler.reset()
        again = handler.mount(first.clean_url or "")

        assert again.state == "idle"
        assert again.should_redirect is False

    def test_clean_load_after_error_starts_idle(self) -> None:
        handler = CallbackHandler(MockIdentity())
        failed = handler.mount(f"{BASE}?error=access_denied&error_description=Link+expired")
        assert failed.state == "error"

        outcome = handler.mount(f"{BASE}?redirect=/onboardings")

        assert outcome.state == "idle"
        assert outcome.transitions == ["idle"]
        assert outcome.should_redirect is False
        assert handler.state == "idle"
