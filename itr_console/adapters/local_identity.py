"""
Local identity provider.

Development stand-in for the hosted identity service, backed by the SQLite
database. One-time links are stored hashed and delivered through the email
port; following a link hits the API verify endpoint, which consumes the
token and redirects back to the console with session tokens in the query
string, carrying the same parameters the hosted service produces.

One instance per console session: it holds that session's current
AuthSession and its listeners. Token state lives in the database so the
API process and the console process see the same links and refresh tokens.
"""

import json
import logging
import re
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import urlencode
from uuid import uuid4

from itr_console.adapters.auth.events import AuthEventHub
from itr_console.adapters.auth.tokens import JWTTokenAdapter, hash_token, new_opaque_token
from itr_console.adapters.clock import SystemClock
from itr_console.adapters.sqlite.repos import dict_factory
from itr_console.domain.entities import AuthSession, AuthUser, Profile
from itr_console.domain.errors import BackendError, IdentityError
from itr_console.ports.clock import ClockPort
from itr_console.ports.email import EmailPort
from itr_console.ports.identity import AuthStateCallback, Subscription
from itr_console.ports.repo import ProfileRepoPort

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

LINK_EXPIRED_MESSAGE = "Email link is invalid or has expired"


def _parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


class LocalIdentityProvider:
    def __init__(
        self,
        db_path: str,
        *,
        email: EmailPort,
        tokens: JWTTokenAdapter,
        api_url: str,
        profile_repo: ProfileRepoPort | None = None,
        otp_ttl_minutes: int = 60,
        session_ttl_minutes: int = 60,
        refresh_ttl_days: int = 30,
        clock: ClockPort | None = None,
    ):
        self.db_path = db_path
        self.email = email
        self.tokens = tokens
        self.api_url = api_url.rstrip("/")
        self.profile_repo = profile_repo
        self.otp_ttl = timedelta(minutes=otp_ttl_minutes)
        self.session_ttl = timedelta(minutes=session_ttl_minutes)
        self.refresh_ttl = timedelta(days=refresh_ttl_days)
        self.clock = clock if clock is not None else SystemClock()
        self._session: AuthSession | None = None
        self._hub = AuthEventHub()

    # --- storage ---

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise IdentityError(f"Identity store unavailable: {e}", code="unexpected_failure") from e
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise IdentityError(str(e), code="unexpected_failure") from e
        finally:
            conn.close()

    def _user_from_row(self, row: dict[str, Any]) -> AuthUser:
        return AuthUser(
            id=row["id"],
            email=row["email"],
            user_metadata=json.loads(row["user_metadata"] or "{}"),
            created_at=row["created_at"],
        )

    def _get_user(self, conn: sqlite3.Connection, user_id: str) -> AuthUser | None:
        row = conn.execute("SELECT * FROM auth_users WHERE id = ?", (user_id,)).fetchone()
        return self._user_from_row(row) if row else None

    def _upsert_user(
        self, conn: sqlite3.Connection, email: str, metadata: dict[str, Any] | None
    ) -> tuple[AuthUser, bool]:
        row = conn.execute("SELECT * FROM auth_users WHERE email = ?", (email,)).fetchone()
        if row:
            user = self._user_from_row(row)
            if metadata:
                merged = {**user.user_metadata, **metadata}
                conn.execute(
                    "UPDATE auth_users SET user_metadata = ? WHERE id = ?",
                    (json.dumps(merged), user.id),
                )
                user = user.model_copy(update={"user_metadata": merged})
            return user, False

        user = AuthUser(
            id=str(uuid4()),
            email=email,
            user_metadata=metadata or {},
            created_at=self.clock.now_utc(),
        )
        conn.execute(
            "INSERT INTO auth_users (id, email, user_metadata, created_at) VALUES (?, ?, ?, ?)",
            (user.id, user.email, json.dumps(user.user_metadata), user.created_at.isoformat()),
        )
        return user, True

    def _issue_session(self, conn: sqlite3.Connection, user: AuthUser) -> AuthSession:
        now = self.clock.now_utc()
        access = self.tokens.create_access_token(
            {"sub": user.id, "email": user.email, "user_metadata": user.user_metadata},
            expires_delta=self.session_ttl,
            now_utc=now,
        )
        refresh = new_opaque_token()
        conn.execute(
            "INSERT INTO auth_refresh_tokens (token_hash, user_id, expires_at, created_at) "
            "VALUES (?, ?, ?, ?)",
            (hash_token(refresh), user.id, (now + self.refresh_ttl).isoformat(), now.isoformat()),
        )
        return AuthSession(
            access_token=access,
            refresh_token=refresh,
            expires_at=now + self.session_ttl,
            user=user,
        )

    def _live_refresh_row(self, conn: sqlite3.Connection, refresh_token: str) -> dict[str, Any]:
        row = conn.execute(
            "SELECT * FROM auth_refresh_tokens WHERE token_hash = ?", (hash_token(refresh_token),)
        ).fetchone()
        if (
            not row
            or row["revoked_at"]
            or _parse_ts(row["expires_at"]) <= self.clock.now_utc()
        ):
            raise IdentityError(
                "Invalid Refresh Token: Refresh Token Not Found", code="refresh_token_not_found"
            )
        return row

    def _revoke(self, conn: sqlite3.Connection, refresh_token: str) -> None:
        conn.execute(
            "UPDATE auth_refresh_tokens SET revoked_at = ? WHERE token_hash = ?",
            (self.clock.now_utc().isoformat(), hash_token(refresh_token)),
        )

    def _rotate(self, refresh_token: str) -> AuthSession:
        with self._conn() as conn:
            row = self._live_refresh_row(conn, refresh_token)
            user = self._get_user(conn, row["user_id"])
            if user is None:
                raise IdentityError("User not found", code="user_not_found")
            self._revoke(conn, refresh_token)
            return self._issue_session(conn, user)

    # --- link issuance / verification ---

    def sign_in_with_otp(
        self,
        email: str,
        redirect_to: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        email = email.strip().lower()
        if not _EMAIL_RE.match(email):
            raise IdentityError(
                "Unable to validate email address: invalid format", code="validation_failed"
            )

        token = new_opaque_token()
        now = self.clock.now_utc()
        with self._conn() as conn:
            conn.execute(
                "INSERT INTO auth_otp_tokens "
                "(token_hash, email, user_metadata, redirect_to, expires_at, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    hash_token(token),
                    email,
                    json.dumps(data) if data else None,
                    redirect_to,
                    (now + self.otp_ttl).isoformat(),
                    now.isoformat(),
                ),
            )

        query = {"token": token, "type": "magiclink"}
        if redirect_to:
            query["redirect_to"] = redirect_to
        link = f"{self.api_url}/api/auth/verify?{urlencode(query)}"
        result = self.email.send_email(
            recipient=email,
            subject="Your sign-in link",
            body_html=f'<p>Follow this link to sign in:</p><p><a href="{link}">Sign in</a></p>',
            body_text=f"Follow this link to sign in: {link}",
        )
        if not result.delivered:
            logger.error(f"Sign-in link email failed: {result.error}")
            raise IdentityError("Error sending magic link email", code="email_send_failed")
        logger.info("Sign-in link issued")

    def verify_otp(self, token: str) -> tuple[AuthSession, str | None]:
        """Consume a one-time link token. Returns the new session and the link's redirect."""
        now = self.clock.now_utc()
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM auth_otp_tokens WHERE token_hash = ?", (hash_token(token),)
            ).fetchone()
            if not row or row["used_at"] or _parse_ts(row["expires_at"]) <= now:
                logger.warning("Rejected invalid or expired sign-in link")
                raise IdentityError(LINK_EXPIRED_MESSAGE, code="otp_expired", status_code=403)

            conn.execute(
                "UPDATE auth_otp_tokens SET used_at = ? WHERE token_hash = ?",
                (now.isoformat(), row["token_hash"]),
            )
            metadata = json.loads(row["user_metadata"]) if row["user_metadata"] else None
            user, created = self._upsert_user(conn, row["email"], metadata)
            session = self._issue_session(conn, user)

        if created:
            logger.info(f"Created identity user {user.id}")
        self._ensure_profile(user)
        return session, row["redirect_to"]

    def _ensure_profile(self, user: AuthUser) -> None:
        # Sign-up links carry the profile; create the row on first use
        if self.profile_repo is None or not user.user_metadata.get("itr_company_id"):
            return
        meta = user.user_metadata
        try:
            if self.profile_repo.get_by_id(user.id) is not None:
                return
            self.profile_repo.save(
                Profile(
                    id=user.id,
                    email=user.email,
                    first_name=meta.get("first_name"),
                    last_name=meta.get("last_name"),
                    itr_company_id=meta.get("itr_company_id"),
                    company=meta.get("itr_company_name"),
                )
            )
        except BackendError as e:
            # The token is already spent; the session stands without a profile
            logger.error(f"Profile creation failed for user {user.id}: {e.message}")
            return
        logger.info(f"Profile created for user {user.id}")

    def get_user(self, access_token: str) -> AuthUser | None:
        payload = self.tokens.decode_access_token(access_token)
        if not payload or "sub" not in payload:
            return None
        with self._conn() as conn:
            return self._get_user(conn, payload["sub"])

    # --- session (per console) ---

    def set_session(self, access_token: str, refresh_token: str) -> AuthSession:
        payload = self.tokens.decode_access_token(access_token)
        with self._conn() as conn:
            row = self._live_refresh_row(conn, refresh_token)
            if payload is not None and payload.get("sub") != row["user_id"]:
                raise IdentityError("Session tokens do not match", code="bad_jwt")
            user = self._get_user(conn, row["user_id"])
        if user is None:
            raise IdentityError("User not found", code="user_not_found")

        if payload is None:
            # Access token expired or unreadable; the refresh token still vouches
            session = self._rotate(refresh_token)
        else:
            session = AuthSession(
                access_token=access_token,
                refresh_token=refresh_token,
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
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
            refreshed = self._rotate(session.refresh_token)
        except IdentityError as e:
            logger.warning(f"Session refresh failed: {e.message}")
            self._session = None
            self._hub.emit("SIGNED_OUT", None)
            return None

        self._session = refreshed
        self._hub.emit("TOKEN_REFRESHED", refreshed)
        return refreshed

    def sign_out(self) -> None:
        session = self._session
        if session is not None:
            with self._conn() as conn:
                self._revoke(conn, session.refresh_token)
        self._session = None
        self._hub.emit("SIGNED_OUT", None)

    def on_auth_state_change(self, callback: AuthStateCallback) -> Subscription:
        return self._hub.subscribe(callback)
