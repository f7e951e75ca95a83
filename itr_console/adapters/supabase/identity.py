"""Hosted identity provider (GoTrue REST)."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import jwt
from jose.exceptions import JWTError

from itr_console.adapters.auth.events import AuthEventHub
from itr_console.adapters.clock import SystemClock
from itr_console.domain.entities import AuthSession, AuthUser
from itr_console.domain.errors import IdentityError
from itr_console.ports.clock import ClockPort
from itr_console.ports.identity import AuthStateCallback, Subscription

from .client import SupabaseClient

logger = logging.getLogger(__name__)


def user_from_payload(body: dict[str, Any]) -> AuthUser:
    data: dict[str, Any] = {
        "id": body["id"],
        "email": body.get("email") or "",
        "user_metadata": body.get("user_metadata") or {},
    }
    if body.get("created_at"):
        data["created_at"] = body["created_at"]
    return AuthUser(**data)


class SupabaseIdentityProvider:
    """One instance per console session; holds that session's tokens."""

    def __init__(self, client: SupabaseClient, clock: ClockPort | None = None):
        self.client = client
        self.clock = clock if clock is not None else SystemClock()
        self._session: AuthSession | None = None
        self._hub = AuthEventHub()

    def _expiry(self, access_token: str, body: dict[str, Any] | None = None) -> datetime:
        if body and body.get("expires_at"):
            return datetime.fromtimestamp(int(body["expires_at"]), UTC)
        if body and body.get("expires_in"):
            return self.clock.now_utc() + timedelta(seconds=int(body["expires_in"]))
        try:
            claims = jwt.get_unverified_claims(access_token)
        except JWTError as e:
            raise IdentityError("Invalid JWT", code="bad_jwt") from e
        if "exp" not in claims:
            raise IdentityError("Invalid JWT", code="bad_jwt")
        return datetime.fromtimestamp(int(claims["exp"]), UTC)

    def _session_from_token_response(self, body: dict[str, Any]) -> AuthSession:
        return AuthSession(
            access_token=body["access_token"],
            refresh_token=body["refresh_token"],
            token_type=body.get("token_type") or "bearer",
            expires_at=self._expiry(body["access_token"], body),
            user=user_from_payload(body["user"]),
        )

    def _refresh(self, refresh_token: str) -> AuthSession:
        body = self.client.auth(
            "POST",
            "token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        return self._session_from_token_response(body)

    def sign_in_with_otp(
        self,
        email: str,
        redirect_to: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"email": email.strip(), "create_user": True}
        if data:
            payload["data"] = data
        params = {"redirect_to": redirect_to} if redirect_to else None
        self.client.auth("POST", "otp", json=payload, params=params)
        logger.info("Sign-in link requested from identity service")

    def set_session(self, access_token: str, refresh_token: str) -> AuthSession:
        expires_at = self._expiry(access_token)
        if expires_at <= self.clock.now_utc():
            session = self._refresh(refresh_token)
        else:
            user = user_from_payload(self.client.auth("GET", "user", access_token=access_token))
            session = AuthSession(
                access_token=access_token,
                refresh_token=refresh_token,
                expires_at=expires_at,
                user=user,
            )
        self._session = session
        self._hub.emit("SIGNED_IN", session)
        return session

    def get_session(self) -> AuthSession | None:
        session = self._session
        if session is None:
            return None
        if not session.is_expired(self.clock.now_utc()):
            return session

        try:
            refreshed = self._refresh(session.refresh_token)
        except IdentityError as e:
            logger.warning(f"Session refresh failed: {e.message}")
            self._session = None
            self._hub.emit("SIGNED_OUT", None)
            return None

        self._session = refreshed
        self._hub.emit("TOKEN_REFRESHED", refreshed)
        return refreshed

    def get_user(self, access_token: str) -> AuthUser | None:
        try:
            return user_from_payload(self.client.auth("GET", "user", access_token=access_token))
        except IdentityError:
            return None

    def sign_out(self) -> None:
        session = self._session
        if session is not None:
            self.client.auth("POST", "logout", access_token=session.access_token)
        self._session = None
        self._hub.emit("SIGNED_OUT", None)

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        return self._hub.subscribe(callback)
