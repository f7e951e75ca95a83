import hashlib
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import jwt

ALGORITHM = "HS256"


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def new_opaque_token() -> str:
    return secrets.token_urlsafe(32)


class JWTTokenAdapter:
    """Signs and checks access tokens for the local identity provider."""

    def __init__(self, secret_key: str, algorithm: str = ALGORITHM):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def create_access_token(
        self,
        data: dict[str, Any],
        expires_delta: timedelta | None = None,
        now_utc: datetime | None = None,
    ) -> str:
        """
        Create a JWT access token.

        Args:
            data: Claims to encode in the token
            expires_delta: Optional custom expiration delta
            now_utc: Current UTC time (for testing/determinism). Defaults to datetime.now(UTC).
        """
        to_encode = data.copy()
        current_time = now_utc if now_utc is not None else datetime.now(UTC)
        expire = current_time + (expires_delta or timedelta(minutes=15))
        to_encode.update({"exp": expire, "iat": current_time})
        encoded: str = jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
        return encoded

    def decode_access_token(self, token: str) -> dict[str, Any] | None:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            return cast(dict[str, Any], payload)
        except jwt.JWTError:
            return None
