"""
Thin synchronous client for the hosted backend's REST surfaces.

- /rest/v1  row operations (PostgREST)
- /auth/v1  identity service (GoTrue)

Transport failures and non-2xx answers are turned into BackendError (rows) or
IdentityError (auth) carrying the service's own message.
"""

import logging
from typing import Any

import httpx

from itr_console.domain.errors import BackendError, IdentityError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> tuple[str, str | None]:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}", None
    if not isinstance(body, dict):
        return str(body), None
    message = (
        body.get("msg")
        or body.get("message")
        or body.get("error_description")
        or body.get("error")
        or f"HTTP {response.status_code}"
    )
    code = body.get("error_code") or body.get("code")
    return str(message), str(code) if code is not None else None


class SupabaseClient:
    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self._http = httpx.Client(
            base_url=self.url,
            headers={"apikey": anon_key},
            timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
            transport=transport,
        )

    def _auth_header(self, access_token: str | None) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token or self.anon_key}"}

    # --- rows ---

    def select(
        self,
        table: str,
        params: dict[str, str],
        access_token: str | None = None,
    ) -> list[dict[str, Any]]:
        try:
            r = self._http.get(
                f"/rest/v1/{table}", params=params, headers=self._auth_header(access_token)
            )
        except httpx.HTTPError as e:
            raise BackendError(f"Backend unreachable: {e}") from e
        if r.status_code >= 400:
            message, _ = _error_message(r)
            raise BackendError(message, status_code=r.status_code)
        data = r.json()
        return data if isinstance(data, list) else [data]

    def insert(
        self,
        table: str,
        rows: dict[str, Any] | list[dict[str, Any]],
        access_token: str | None = None,
        upsert: bool = False,
    ) -> None:
        prefer = ["return=minimal"]
        if upsert:
            prefer.append("resolution=merge-duplicates")
        headers = {**self._auth_header(access_token), "Prefer": ",".join(prefer)}
        try:
            r = self._http.post(f"/rest/v1/{table}", json=rows, headers=headers)
        except httpx.HTTPError as e:
            raise BackendError(f"Backend unreachable: {e}") from e
        if r.status_code >= 400:
            message, _ = _error_message(r)
            raise BackendError(message, status_code=r.status_code)

    # --- identity ---

    def auth(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        try:
            r = self._http.request(
                method,
                f"/auth/v1/{path.lstrip('/')}",
                json=json,
                params=params,
                headers=self._auth_header(access_token),
            )
        except httpx.HTTPError as e:
            raise IdentityError(f"Identity service unreachable: {e}") from e
        if r.status_code >= 400:
            message, code = _error_message(r)
            logger.warning(f"Identity service answered {r.status_code} on {path}: {message}")
            raise IdentityError(message, code=code, status_code=r.status_code)
        if not r.content:
            return {}
        body = r.json()
        return body if isinstance(body, dict) else {}

    def close(self) -> None:
        self._http.close()
