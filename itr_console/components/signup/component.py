"""
Session initiator.

Asks the identity provider for a one-time email sign-in link. Sign-up links
carry the profile and company as user metadata so the account can be linked
to its company when the link is first used. No session exists until the
user follows the link.
"""

import logging

from itr_console.domain.errors import IdentityError

from .models import LinkOutput, LoginLinkInput, SignupLinkInput
from .ports import IdentityPort, RateLimiterPort

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Too many requests, please wait before asking for another link"


def _send(
    email: str,
    *,
    identity: IdentityPort,
    redirect_to: str | None,
    data: dict[str, str] | None,
    rate_limiter: RateLimiterPort | None,
) -> LinkOutput:
    if rate_limiter is not None and not rate_limiter.check_magic_link(email):
        logger.warning("Magic link request throttled")
        return LinkOutput(
            email=email, success=False, error=RATE_LIMITED_MESSAGE, error_code="rate_limited"
        )

    try:
        identity.sign_in_with_otp(email, redirect_to=redirect_to, data=data)
    except IdentityError as e:
        logger.error(f"Identity provider rejected magic link request: {e.message}")
        return LinkOutput(email=email, success=False, error=e.message, error_code="provider")

    logger.info("Magic link requested")
    return LinkOutput(email=email, success=True)


def run_request_signup_link(
    inp: SignupLinkInput,
    *,
    identity: IdentityPort,
    rate_limiter: RateLimiterPort | None = None,
) -> LinkOutput:
    missing = inp.profile.missing_fields()
    if missing:
        return LinkOutput(
            success=False,
            error="Please fill in all fields",
            error_code="validation",
            missing_fields=missing,
        )

    profile = inp.profile.normalized()
    data = {
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "itr_company_id": inp.company.id,
        "itr_company_name": inp.company.name,
    }
    return _send(
        profile.email,
        identity=identity,
        redirect_to=inp.redirect_to,
        data=data,
        rate_limiter=rate_limiter,
    )


def run_request_login_link(
    inp: LoginLinkInput,
    *,
    identity: IdentityPort,
    rate_limiter: RateLimiterPort | None = None,
) -> LinkOutput:
    email = inp.email.strip()
    if not email:
        return LinkOutput(
            success=False,
            error="Please enter your email",
            error_code="validation",
            missing_fields=["email"],
        )
    return _send(
        email,
        identity=identity,
        redirect_to=inp.redirect_to,
        data=None,
        rate_limiter=rate_limiter,
    )
