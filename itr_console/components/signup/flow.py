"""
Sign-up / sign-in flow.

State machine driving the auth page forms:

    signup/company --verify ok--> signup/profile --submit ok--> link sent
         ^   |                        |
         |   +------- back <----------+
    switch_mode <--> login --submit ok--> link sent

Actions not listed in _ALLOWED for the current (mode, step) raise
InvalidTransition. Network-bound actions flip `loading` around the call and
reject re-entry while a call is in flight.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from threading import Lock
from typing import cast

from itr_console.components.invitation import (
    DEFAULT_CODE_LENGTH,
    VerifyInvitationInput,
    run_verify,
)
from itr_console.domain import notices

from .component import run_request_login_link, run_request_signup_link
from .models import (
    CompanyStep,
    FlowResult,
    InvalidTransition,
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

logger = logging.getLogger(__name__)

SIGNUP_COMPANY = ("signup", "company")
SIGNUP_PROFILE = ("signup", "profile")
LOGIN = ("login", "login")

_ALLOWED: dict[str, set[tuple[str, str]]] = {
    "set_invitation_code": {SIGNUP_COMPANY},
    "verify_invitation_code": {SIGNUP_COMPANY},
    "update_profile": {SIGNUP_PROFILE},
    "back": {SIGNUP_PROFILE},
    "submit_profile": {SIGNUP_PROFILE},
    "set_login_email": {LOGIN},
    "submit_login": {LOGIN},
    "switch_mode": {SIGNUP_COMPANY, SIGNUP_PROFILE, LOGIN},
}

BUSY = FlowResult(success=False, error_code="busy")


class SignUpFlow:
    def __init__(
        self,
        *,
        company_repo: CompanyRepoPort,
        identity: IdentityPort,
        redirect_to: str | None = None,
        code_length: int = DEFAULT_CODE_LENGTH,
        rate_limiter: RateLimiterPort | None = None,
        sso: SsoRecorderPort | None = None,
        on_change: Callable[[SignUpState], None] | None = None,
    ):
        self.company_repo = company_repo
        self.identity = identity
        self.redirect_to = redirect_to
        self.code_length = code_length
        self.rate_limiter = rate_limiter
        self.sso = sso
        self.on_change = on_change
        self._state = SignUpState()
        self._lock = Lock()

    @property
    def state(self) -> SignUpState:
        return self._state

    @property
    def can_submit_code(self) -> bool:
        step = self._state.mode.step
        return (
            not self._state.loading
            and isinstance(step, CompanyStep)
            and len(step.invitation_code) == self.code_length
        )

    # --- internals ---

    def _require(self, action: str) -> None:
        if self._state.key not in _ALLOWED[action]:
            mode, step = self._state.key
            raise InvalidTransition(f"{action} is not allowed in {mode}/{step}")

    def _set(self, state: SignUpState) -> None:
        self._state = state
        if self.on_change is not None:
            self.on_change(state)

    def _begin(self, action: str) -> bool:
        """Mark the flow busy. Returns False if a call is already in flight."""
        with self._lock:
            self._require(action)
            if self._state.loading:
                return False
            self._set(self._state.with_loading(True))
            return True

    def _finish(self, state: SignUpState) -> None:
        with self._lock:
            self._set(state.with_loading(False))

    # --- company step ---

    def set_invitation_code(self, code: str) -> None:
        self._require("set_invitation_code")
        cleaned = "".join(code.split())[: self.code_length]
        self._set(replace(self._state, mode=SignupMode(CompanyStep(invitation_code=cleaned))))

    def verify_invitation_code(self) -> FlowResult:
        if not self._begin("verify_invitation_code"):
            return BUSY
        state = self._state
        step = state.mode.step
        step = cast(CompanyStep, step)

        try:
            out = run_verify(
                VerifyInvitationInput(code=step.invitation_code),
                company_repo=self.company_repo,
                code_length=self.code_length,
            )
        except Exception:
            self._finish(state)
            raise

        if not out.success or out.company is None:
            self._finish(state)
            return FlowResult(
                success=False,
                notice=notices.error("Error", out.error or "Invalid invitation code"),
                error_code=out.error_code,
            )

        if self.sso is not None:
            self.sso.record("invitation_verified", company_id=out.company.id)

        self._finish(
            replace(
                state,
                mode=SignupMode(
                    ProfileStep(company=out.company, invitation_code=step.invitation_code)
                ),
                link_sent_to=None,
            )
        )
        logger.info(f"Sign-up flow moved to profile step for company {out.company.id}")
        return FlowResult(
            success=True,
            notice=notices.info("Company identified", f"Welcome to {out.company.name}"),
        )

    # --- profile step ---

    def update_profile(
        self,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        email: str | None = None,
    ) -> None:
        self._require("update_profile")
        step = self._state.mode.step
        step = cast(ProfileStep, step)
        profile = step.profile
        profile = ProfileFormData(
            first_name=profile.first_name if first_name is None else first_name,
            last_name=profile.last_name if last_name is None else last_name,
            email=profile.email if email is None else email,
        )
        self._set(replace(self._state, mode=SignupMode(replace(step, profile=profile))))

    def back(self) -> None:
        self._require("back")
        step = self._state.mode.step
        step = cast(ProfileStep, step)
        self._set(
            SignUpState(mode=SignupMode(CompanyStep(invitation_code=step.invitation_code)))
        )

    def submit_profile(self) -> FlowResult:
        self._require("submit_profile")
        step = self._state.mode.step
        step = cast(ProfileStep, step)

        missing = step.profile.missing_fields()
        if missing:
            return FlowResult(
                success=False,
                notice=notices.error("Sign-up error", "Please fill in all fields"),
                error_code="validation",
            )

        if not self._begin("submit_profile"):
            return BUSY
        state = self._state

        try:
            out = run_request_signup_link(
                SignupLinkInput(
                    profile=step.profile, company=step.company, redirect_to=self.redirect_to
                ),
                identity=self.identity,
                rate_limiter=self.rate_limiter,
            )
        except Exception:
            self._finish(state)
            raise

        if not out.success:
            self._finish(state)
            return FlowResult(
                success=False,
                notice=notices.error("Sign-up error", out.error or "Something went wrong"),
                error_code=out.error_code,
            )

        if self.sso is not None:
            self.sso.record(
                "magic_link_requested",
                company_id=step.company.id,
                metadata={"mode": "signup"},
            )

        self._finish(
            replace(
                state,
                mode=SignupMode(replace(step, profile=ProfileFormData())),
                link_sent_to=out.email,
            )
        )
        return FlowResult(
            success=True,
            notice=notices.info(
                "Email sent", "Check your inbox and click the link to sign in."
            ),
        )

    # --- login mode ---

    def set_login_email(self, email: str) -> None:
        self._require("set_login_email")
        self._set(replace(self._state, mode=LoginMode(LoginStep(email=email))))

    def submit_login(self) -> FlowResult:
        self._require("submit_login")
        step = self._state.mode.step
        step = cast(LoginStep, step)

        if not step.email.strip():
            return FlowResult(
                success=False,
                notice=notices.error("Sign-in error", "Please enter your email"),
                error_code="validation",
            )

        if not self._begin("submit_login"):
            return BUSY
        state = self._state

        try:
            out = run_request_login_link(
                LoginLinkInput(email=step.email, redirect_to=self.redirect_to),
                identity=self.identity,
                rate_limiter=self.rate_limiter,
            )
        except Exception:
            self._finish(state)
            raise

        if not out.success:
            self._finish(state)
            return FlowResult(
                success=False,
                notice=notices.error("Sign-in error", out.error or "Something went wrong"),
                error_code=out.error_code,
            )

        if self.sso is not None:
            self.sso.record("magic_link_requested", metadata={"mode": "login"})

        self._finish(replace(state, link_sent_to=out.email))
        return FlowResult(
            success=True,
            notice=notices.info(
                "Email sent", "Check your inbox and click the link to sign in."
            ),
        )

    # --- mode / lifecycle ---

    def switch_mode(self) -> None:
        self._require("switch_mode")
        if self._state.loading:
            raise InvalidTransition("switch_mode is not allowed while a request is in flight")
        if isinstance(self._state.mode, SignupMode):
            self._set(SignUpState(mode=LoginMode()))
        else:
            self._set(SignUpState(mode=SignupMode()))

    def reset(self) -> None:
        """Drop every draft (component teardown)."""
        self._set(SignUpState())
