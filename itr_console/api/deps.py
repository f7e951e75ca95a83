from functools import lru_cache
from threading import Lock
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from itr_console.adapters.auth.tokens import JWTTokenAdapter
from itr_console.adapters.clock import SystemClock
from itr_console.adapters.dev_email import DevEmailAdapter
from itr_console.adapters.local_identity import LocalIdentityProvider
from itr_console.adapters.openai_assistant import OpenAIAssistantAdapter
from itr_console.adapters.sqlite.repos import SQLiteProfileRepo, SQLiteSsoLogRepo
from itr_console.adapters.supabase.client import SupabaseClient
from itr_console.adapters.supabase.identity import SupabaseIdentityProvider
from itr_console.adapters.supabase.repos import SupabaseProfileRepo, SupabaseSsoLogRepo
from itr_console.app_shell.config import Settings, get_settings
from itr_console.components.sso_logs import SsoLogRecorder
from itr_console.domain.entities import AuthUser
from itr_console.domain.errors import IdentityError
from itr_console.ports.repo import ProfileRepoPort, SsoLogRepoPort
from itr_console.rules.loader import load_rules
from itr_console.rules.models import Rules


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Adapters ---
@lru_cache
def get_clock() -> SystemClock:
    return SystemClock()


@lru_cache
def get_email_adapter() -> DevEmailAdapter:
    """Process-wide dev mailbox; links show up in the API log."""
    return DevEmailAdapter()


def get_token_adapter(settings: Settings = Depends(get_settings)) -> JWTTokenAdapter:
    return JWTTokenAdapter(settings.secret_key)


_supabase_clients: dict[tuple[str, str, float], SupabaseClient] = {}
_supabase_lock = Lock()


def get_supabase_client(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> SupabaseClient:
    """One pooled client per process, shared by every request."""
    key = (settings.supabase_url, settings.supabase_anon_key, rules.backend.request_timeout_seconds)
    with _supabase_lock:
        client = _supabase_clients.get(key)
        if client is None:
            client = SupabaseClient(key[0], key[1], timeout=key[2])
            _supabase_clients[key] = client
        return client


def close_supabase_clients() -> None:
    """Release pooled connections; called on API shutdown."""
    with _supabase_lock:
        clients = list(_supabase_clients.values())
        _supabase_clients.clear()
    for client in clients:
        client.close()


# --- Repos ---
def get_profile_repo(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> ProfileRepoPort:
    if rules.backend.provider == "supabase":
        return SupabaseProfileRepo(get_supabase_client(settings, rules))
    return SQLiteProfileRepo(settings.db_path)


def get_sso_log_repo(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> SsoLogRepoPort:
    if rules.backend.provider == "supabase":
        return SupabaseSsoLogRepo(get_supabase_client(settings, rules))
    return SQLiteSsoLogRepo(settings.db_path)


def get_sso_recorder(
    repo: SsoLogRepoPort = Depends(get_sso_log_repo),
    clock: SystemClock = Depends(get_clock),
) -> SsoLogRecorder:
    return SsoLogRecorder(repo, clock, user_agent="api")


# --- Identity ---
def get_local_identity(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
    email: DevEmailAdapter = Depends(get_email_adapter),
    tokens: JWTTokenAdapter = Depends(get_token_adapter),
    profile_repo: ProfileRepoPort = Depends(get_profile_repo),
) -> LocalIdentityProvider:
    if rules.backend.provider != "sqlite":
        # Hosted identity service verifies its own links
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    return LocalIdentityProvider(
        settings.db_path,
        email=email,
        tokens=tokens,
        api_url=settings.api_url,
        profile_repo=profile_repo,
        otp_ttl_minutes=rules.auth.otp_ttl_minutes,
        session_ttl_minutes=rules.auth.session_ttl_minutes,
    )


def get_identity_provider(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
    email: DevEmailAdapter = Depends(get_email_adapter),
    tokens: JWTTokenAdapter = Depends(get_token_adapter),
    profile_repo: ProfileRepoPort = Depends(get_profile_repo),
) -> LocalIdentityProvider | SupabaseIdentityProvider:
    if rules.backend.provider == "supabase":
        return SupabaseIdentityProvider(get_supabase_client(settings, rules))
    return get_local_identity(settings, rules, email, tokens, profile_repo)


# --- Chat ---
def get_assistant(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> OpenAIAssistantAdapter:
    return OpenAIAssistantAdapter(
        settings.openai_api_key,
        base_url=rules.chat.api_base_url,
        poll_interval=rules.chat.poll_interval_seconds,
        max_polls=rules.chat.max_polls,
    )


# --- Auth ---
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    identity: LocalIdentityProvider | SupabaseIdentityProvider = Depends(get_identity_provider),
) -> AuthUser:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user = identity.get_user(credentials.credentials)
    except IdentityError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message) from e
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
