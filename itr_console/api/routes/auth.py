import logging
from typing import Annotated
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse

from itr_console.adapters.local_identity import LocalIdentityProvider
from itr_console.api.deps import (
    get_current_user,
    get_local_identity,
    get_profile_repo,
    get_rules,
    get_sso_recorder,
)
from itr_console.api.schemas import MeResponse, ProfileOut
from itr_console.app_shell.config import Settings, get_settings
from itr_console.components.sso_logs import SsoLogRecorder
from itr_console.domain.entities import AuthUser
from itr_console.domain.errors import BackendError, IdentityError
from itr_console.ports.repo import ProfileRepoPort
from itr_console.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()


def _landing(target: str | None, settings: Settings, rules: Rules) -> str:
    """Console URL the browser returns to; never leaves the console's origin."""
    default = f"{settings.site_url}{rules.auth.auth_route}"
    if target and (target == settings.site_url or target.startswith(settings.site_url + "/")):
        return target
    if target:
        logger.warning("Ignoring off-site redirect_to on sign-in link")
    return default


def _with_params(target: str, params: dict[str, object]) -> str:
    """Append callback parameters to the landing URL query; any fragment is dropped."""
    parts = urlsplit(target)
    query = parse_qsl(parts.query, keep_blank_values=True) + [(k, str(v)) for k, v in params.items()]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query, safe="/"), ""))


@router.get("/verify")
def verify(
    request: Request,
    token: Annotated[str, Query(min_length=1)],
    type: str = "magiclink",
    redirect_to: str | None = None,
    identity: LocalIdentityProvider = Depends(get_local_identity),
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
    sso: SsoLogRecorder = Depends(get_sso_recorder),
) -> RedirectResponse:
    """Landing for emailed sign-in links: consume the token, send the browser back."""
    sso.ip_address = request.client.host if request.client else None
    sso.user_agent = request.headers.get("user-agent")

    try:
        session, stored_redirect = identity.verify_otp(token)
    except (IdentityError, BackendError) as e:
        if isinstance(e, IdentityError):
            error, code = "access_denied", e.code or "otp_expired"
        else:
            logger.error(f"Sign-in link verification failed: {e.message}")
            error, code = "server_error", "unexpected_failure"
        sso.record("magic_link_rejected", metadata={"error_code": code})
        params: dict[str, object] = {
            "error": error,
            "error_code": code,
            "error_description": e.message,
        }
        return RedirectResponse(
            _with_params(_landing(redirect_to, settings, rules), params), status_code=303
        )

    user = session.user
    sso.record(
        "magic_link_verified",
        user_id=user.id,
        company_id=user.user_metadata.get("itr_company_id"),
        metadata={"type": type},
    )
    expires_in = int((session.expires_at - identity.clock.now_utc()).total_seconds())
    params = {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_in": max(expires_in, 0),
        "token_type": session.token_type,
        "type": type,
    }
    target = _landing(stored_redirect or redirect_to, settings, rules)
    return RedirectResponse(_with_params(target, params), status_code=303)


@router.get("/me", response_model=MeResponse)
def me(
    user: AuthUser = Depends(get_current_user),
    profile_repo: ProfileRepoPort = Depends(get_profile_repo),
) -> MeResponse:
    """Current user and, once the sign-up link has been used, their profile."""
    try:
        profile = profile_repo.get_by_id(user.id)
    except BackendError as e:
        logger.error(f"Profile lookup failed for {user.id}: {e.message}")
        profile = None

    return MeResponse(
        id=user.id,
        email=user.email,
        user_metadata=user.user_metadata,
        profile=ProfileOut(**profile.model_dump(include=set(ProfileOut.model_fields))) if profile else None,
    )
