"""
Callback handler.

Runs once when the auth page loads. The identity provider sends users back
with either tokens or an error, in the URL fragment or in the query string
depending on the flow, so both are read at a single boundary
(parse_auth_callback) and the rest of the code only sees AuthCallbackParams.

    idle --error in URL--> processing-callback --> error
    idle --tokens in URL--> processing-callback --> authenticated | error
    idle --existing session--> authenticated
"""

import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from itr_console.domain.errors import IdentityError

from .models import AuthCallbackParams, CallbackOutcome, CallbackState
from .ports import IdentityPort, SsoRecorderPort

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT = "/"
REDIRECT_PARAM = "redirect"
INCOMPLETE_LINK_MESSAGE = "Sign-in link is incomplete, please request a new one"

# Parameters the identity provider appends to the landing URL
AUTH_PARAMS = frozenset(
    {
        "access_token",
        "refresh_token",
        "expires_in",
        "expires_at",
        "token_type",
        "type",
        "provider_token",
        "provider_refresh_token",
        "code",
        "error",
        "error_code",
        "error_description",
    }
)


def _pairs(raw: str) -> dict[str, str]:
    # parse_qsl decodes '+' as space and percent escapes
    return dict(parse_qsl(raw, keep_blank_values=True))


def parse_auth_callback(url: str) -> AuthCallbackParams:
    parts = urlsplit(url)
    merged = {**_pairs(parts.query), **_pairs(parts.fragment)}  # fragment wins

    expires_in: int | None = None
    if merged.get("expires_in"):
        try:
            expires_in = int(merged["expires_in"])
        except ValueError:
            logger.warning("Ignoring non-numeric expires_in in callback URL")

    return AuthCallbackParams(
        access_token=merged.get("access_token") or None,
        refresh_token=merged.get("refresh_token") or None,
        expires_in=expires_in,
        token_type=merged.get("token_type") or None,
        type=merged.get("type") or None,
        error=merged.get("error") or None,
        error_code=merged.get("error_code") or None,
        error_description=merged.get("error_description") or None,
    )


def callback_error_message(params: AuthCallbackParams) -> str | None:
    return params.error_description or params.error_code or params.error


def sanitize_callback_url(url: str) -> str:
    """Drop the fragment and every auth parameter, keep the rest of the query."""
    parts = urlsplit(url)
    kept = [
        (k, v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
        if k not in AUTH_PARAMS
    ]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(kept, safe="/"), ""))


def is_safe_redirect(target: str | None) -> bool:
    return bool(target) and target.startswith("/") and not target.startswith("//")


def resolve_redirect(url: str, default: str = DEFAULT_REDIRECT) -> str:
    target = _pairs(urlsplit(url).query).get(REDIRECT_PARAM)
    if is_safe_redirect(target):
        return target  # type: ignore[return-value]
    if target:
        logger.warning("Ignoring off-site redirect target in auth URL")
    return default


class CallbackHandler:
    def __init__(
        self,
        identity: IdentityPort,
        sso: SsoRecorderPort | None = None,
        default_redirect: str = DEFAULT_REDIRECT,
    ):
        self.identity = identity
        self.sso = sso
        self.default_redirect = default_redirect
        self.state: CallbackState = "idle"
        self._last_url: str | None = None
        self._last: CallbackOutcome | None = None

    def mount(self, url: str) -> CallbackOutcome:
        if self._last is not None and url in (self._last_url, self._last.clean_url):
            return self._last

        # Each page load starts over; an earlier error only ended that attempt
        self.state = "idle"
        transitions: list[CallbackState] = [self.state]
        params = parse_auth_callback(url)
        clean_url = sanitize_callback_url(url)
        redirect_to = resolve_redirect(url, self.default_redirect)

        def move(state: CallbackState) -> None:
            self.state = state
            transitions.append(state)

        if params.has_error:
            move("processing-callback")
            message = callback_error_message(params)
            logger.warning(f"Auth callback carried an error: {params.error_code or params.error}")
            self._record("callback_failed", metadata={"error_code": params.error_code or params.error})
            move("error")
            outcome = CallbackOutcome(
                state="error", error_message=message, clean_url=clean_url, transitions=transitions
            )
        elif params.has_tokens:
            move("processing-callback")
            outcome = self._establish(params, redirect_to, clean_url, transitions, move)
        else:
            return self._check_existing(redirect_to, clean_url, transitions, move)

        # Callback data is single use
        self._last_url = url
        self._last = outcome
        return outcome

    def reset(self) -> None:
        """Forget the processed callback (the session it produced has ended)."""
        self.state = "idle"
        self._last_url = None
        self._last = None

    def _establish(self, params, redirect_to, clean_url, transitions, move) -> CallbackOutcome:
        if not params.refresh_token:
            move("error")
            self._record("callback_failed", metadata={"error_code": "missing_refresh_token"})
            return CallbackOutcome(
                state="error",
                error_message=INCOMPLETE_LINK_MESSAGE,
                clean_url=clean_url,
                transitions=transitions,
            )

        try:
            session = self.identity.set_session(params.access_token, params.refresh_token)
        except IdentityError as e:
            logger.error(f"Could not establish session from callback: {e.message}")
            self._record("callback_failed", metadata={"error_code": e.code})
            move("error")
            return CallbackOutcome(
                state="error", error_message=e.message, clean_url=clean_url, transitions=transitions
            )

        user = session.user
        logger.info(f"Session established for user {user.id}")
        self._record(
            "callback_succeeded",
            user_id=user.id,
            company_id=user.user_metadata.get("itr_company_id"),
            metadata={"type": params.type},
        )
        move("authenticated")
        return CallbackOutcome(
            state="authenticated",
            redirect_to=redirect_to,
            clean_url=clean_url,
            transitions=transitions,
        )

    def _check_existing(self, redirect_to, clean_url, transitions, move) -> CallbackOutcome:
        try:
            session = self.identity.get_session()
        except IdentityError as e:
            logger.error(f"Session check failed on auth page: {e.message}")
            session = None

        if session is None:
            return CallbackOutcome(state=self.state, clean_url=clean_url, transitions=transitions)

        move("authenticated")
        return CallbackOutcome(
            state="authenticated",
            redirect_to=redirect_to,
            clean_url=clean_url,
            transitions=transitions,
        )

    def _record(self, event_type: str, **kwargs) -> None:
        if self.sso is not None:
            self.sso.record(event_type, **kwargs)
