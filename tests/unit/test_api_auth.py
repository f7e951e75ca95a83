"""
Local sign-in link endpoints: GET /api/auth/verify and GET /api/auth/me.
"""

from urllib.parse import parse_qs, urlsplit

import pytest
from fastapi.testclient import TestClient

from itr_console.adapters.clock import SystemClock
from itr_console.adapters.sqlite.repos import SQLiteProfileRepo, SQLiteSsoLogRepo
from itr_console.api.deps import (
    get_identity_provider,
    get_local_identity,
    get_profile_repo,
    get_rules,
    get_sso_recorder,
)
from itr_console.api.main import app
from itr_console.app_shell.config import Settings, get_settings
from itr_console.components.sso_logs import SsoLogRecorder
from itr_console.domain.errors import BackendError

SITE = "http://console.test"


@pytest.fixture
def client(db_path, rules, local_identity):
    def _settings():
        s = Settings()
        s.db_path = db_path
        s.site_url = SITE
        return s

    app.dependency_overrides[get_settings] = _settings
    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_local_identity] = lambda: local_identity
    app.dependency_overrides[get_identity_provider] = lambda: local_identity
    app.dependency_overrides[get_profile_repo] = lambda: SQLiteProfileRepo(db_path)
    app.dependency_overrides[get_sso_recorder] = lambda: SsoLogRecorder(
        SQLiteSsoLogRepo(db_path), SystemClock()
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def _token(dev_email) -> str:
    link = dev_email.get_last_email().links[0]
    return parse_qs(urlsplit(link).query)["token"][0]


def _verify(client, token: str, **params):
    return client.get(
        "/api/auth/verify", params={"token": token, **params}, follow_redirects=False
    )


def test_verify_redirects_with_tokens_in_query(client, local_identity, dev_email):
    local_identity.sign_in_with_otp(
        "ada@acme.test", redirect_to=f"{SITE}/auth?redirect=/calendar"
    )

    r = _verify(client, _token(dev_email))

    assert r.status_code == 303
    location = urlsplit(r.headers["location"])
    assert f"{location.scheme}://{location.netloc}{location.path}" == f"{SITE}/auth"
    assert location.fragment == ""
    query = parse_qs(location.query)
    assert query["redirect"] == ["/calendar"]
    assert query["type"] == ["magiclink"]
    assert query["token_type"] == ["bearer"]
    assert query["access_token"][0]
    assert query["refresh_token"][0]
    assert 0 < int(query["expires_in"][0]) <= 3600


def test_verify_records_sso_event(client, local_identity, dev_email, db_path):
    local_identity.sign_in_with_otp("ada@acme.test", redirect_to=f"{SITE}/auth")

    _verify(client, _token(dev_email))

    logs = SQLiteSsoLogRepo(db_path).list_recent()
    assert [log.event_type for log in logs] == ["magic_link_verified"]
    assert logs[0].user_id is not None
    assert logs[0].user_agent == "testclient"


def test_reused_link_redirects_with_error(client, local_identity, dev_email, db_path):
    local_identity.sign_in_with_otp("ada@acme.test", redirect_to=f"{SITE}/auth")
    token = _token(dev_email)
    _verify(client, token)

    r = _verify(client, token)

    assert r.status_code == 303
    query = parse_qs(urlsplit(r.headers["location"]).query)
    assert query["error"] == ["access_denied"]
    assert query["error_code"] == ["otp_expired"]
    assert query["error_description"] == ["Email link is invalid or has expired"]
    assert "access_token" not in query
    events = [log.event_type for log in SQLiteSsoLogRepo(db_path).list_recent()]
    assert events[0] == "magic_link_rejected"


def test_off_site_redirect_falls_back_to_auth_page(client, local_identity, dev_email):
    local_identity.sign_in_with_otp("ada@acme.test", redirect_to="https://evil.test/steal")

    r = _verify(client, _token(dev_email))

    assert r.headers["location"].startswith(f"{SITE}/auth?")


def test_profile_failure_does_not_block_sign_in(client, local_identity, dev_email):
    local_identity.sign_in_with_otp(
        "ada@acme.test", redirect_to=f"{SITE}/auth", data={"itr_company_id": "missing-co"}
    )

    r = _verify(client, _token(dev_email))

    assert r.status_code == 303
    query = parse_qs(urlsplit(r.headers["location"]).query)
    assert query["access_token"][0]
    assert "error" not in query


class BrokenIdentity:
    def verify_otp(self, token: str):
        raise BackendError("database is locked")


def test_store_failure_redirects_with_server_error(client, db_path):
    app.dependency_overrides[get_local_identity] = lambda: BrokenIdentity()

    r = _verify(client, "any-token")

    assert r.status_code == 303
    location = r.headers["location"]
    assert location.startswith(f"{SITE}/auth?")
    query = parse_qs(urlsplit(location).query)
    assert query["error"] == ["server_error"]
    assert query["error_code"] == ["unexpected_failure"]
    assert query["error_description"] == ["database is locked"]
    assert "access_token" not in query
    events = [log.event_type for log in SQLiteSsoLogRepo(db_path).list_recent()]
    assert events[0] == "magic_link_rejected"


def test_verify_requires_token(client):
    r = client.get("/api/auth/verify", follow_redirects=False)

    assert r.status_code == 422


def test_me_returns_user_and_profile(client, local_identity, dev_email, company):
    local_identity.sign_in_with_otp(
        "ada@acme.test",
        data={
            "first_name": "Ada",
            "last_name": "Lovelace",
            "itr_company_id": company.id,
            "itr_company_name": company.name,
        },
    )
    session, _ = local_identity.verify_otp(_token(dev_email))

    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {session.access_token}"})

    assert r.status_code == 200
    body = r.json()
    assert body["email"] == "ada@acme.test"
    assert body["profile"]["first_name"] == "Ada"
    assert body["profile"]["itr_company_id"] == company.id


def test_me_requires_bearer_token(client):
    assert client.get("/api/auth/me").status_code == 401
    r = client.get("/api/auth/me", headers={"Authorization": "Bearer nonsense"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid token"
