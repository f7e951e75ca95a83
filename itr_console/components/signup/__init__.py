"""
Sign-up component - profile collection, magic-link requests and the
sign-up / sign-in flow state machine.
"""

from .component import (
    RATE_LIMITED_MESSAGE,
    run_request_login_link,
    run_request_signup_link,
)
from .flow import SignUpFlow
from .models import (
    CompanyStep,
    FlowResult,
    InvalidTransition,
    LinkErrorCode,
    LinkOutput,
    LoginLinkInput,
    LoginMode,
    LoginStep,
    ProfileFormData,
    ProfileStep,
    SignupLinkInput,
    SignupMode,
    SignUpState,
)
from .ports import CompanyRepoPort, IdentityPort, RateLimiterPort, SsoRecorderPort

__all__ = [
    # Entry points
    "run_request_signup_link",
    "run_request_login_link",
    "RATE_LIMITED_MESSAGE",
    "SignUpFlow",
    # Models
    "CompanyStep",
    "FlowResult",
    "InvalidTransition",
    "LinkErrorCode",
    "LinkOutput",
    "LoginLinkInput",
    "LoginMode",
    "LoginStep",
    "ProfileFormData",
    "ProfileStep",
    "SignupLinkInput",
    "SignupMode",
    "SignUpState",
    # Ports
    "CompanyRepoPort",
    "IdentityPort",
    "RateLimiterPort",
    "SsoRecorderPort",
]
