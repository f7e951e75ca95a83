"""
Callback component - handles the sign-in link landing on the auth page.
"""

from .component import (
    AUTH_PARAMS,
    DEFAULT_REDIRECT,
    CallbackHandler,
    callback_error_message,
    is_safe_redirect,
    parse_auth_callback,
    resolve_redirect,
    sanitize_callback_url,
)
from .models import AuthCallbackParams, CallbackOutcome, CallbackState
from .ports import IdentityPort, SsoRecorderPort

__all__ = [
    # Entry points
    "CallbackHandler",
    "parse_auth_callback",
    "callback_error_message",
    "sanitize_callback_url",
    "resolve_redirect",
    "is_safe_redirect",
    "AUTH_PARAMS",
    "DEFAULT_REDIRECT",
    # Models
    "AuthCallbackParams",
    "CallbackOutcome",
    "CallbackState",
    # Ports
    "IdentityPort",
    "SsoRecorderPort",
]
