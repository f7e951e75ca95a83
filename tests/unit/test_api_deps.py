"""
Dependency wiring for the hosted backend: one HTTP client per process.
"""

import pytest

from itr_console.api.deps import (
    close_supabase_clients,
    get_identity_provider,
    get_profile_repo,
    get_supabase_client,
)
from itr_console.app_shell.config import Settings


@pytest.fixture
def settings() -> Settings:
    s = Settings()
    s.supabase_url = "https://proj.supabase.test"
    s.supabase_anon_key = "anon-key"
    return s


@pytest.fixture
def hosted_rules(rules):
    backend = rules.backend.model_copy(update={"provider": "supabase"})
    yield rules.model_copy(update={"backend": backend})
    close_supabase_clients()


def test_requests_share_one_client(settings, hosted_rules):
    first = get_supabase_client(settings, hosted_rules)

    assert get_supabase_client(settings, hosted_rules) is first
    assert get_profile_repo(settings, hosted_rules).client is first
    identity = get_identity_provider(settings, hosted_rules, None, None, None)
    assert identity.client is first


def test_close_releases_connections(settings, hosted_rules):
    client = get_supabase_client(settings, hosted_rules)

    close_supabase_clients()

    assert client._http.is_closed
    fresh = get_supabase_client(settings, hosted_rules)
    assert fresh is not client
    assert not fresh._http.is_closed


def test_different_backend_gets_its_own_client(settings, hosted_rules):
    first = get_supabase_client(settings, hosted_rules)
    settings.supabase_url = "https://other.supabase.test"

    assert get_supabase_client(settings, hosted_rules) is not first
