import logging

import flet as ft

from itr_console.components.callback import resolve_redirect
from itr_console.components.signup import (
    CompanyStep,
    FlowResult,
    LoginStep,
    ProfileStep,
    SignUpFlow,
    SignUpState,
)
from itr_console.domain import notices as notice
from itr_console.ports.notices import NoticePort
from itr_console.ui.context import ServiceContext
from itr_console.ui.state import AppState

logger = logging.getLogger(__name__)


class AuthView(ft.Column):  # type: ignore
    """
    Sign-up / sign-in page: renders the form for the flow's current mode
    and step.
    """

    def __init__(
        self,
        page: ft.Page,
        ctx: ServiceContext,
        state: AppState,
        notices: NoticePort,
    ) -> None:
        super().__init__()
        self.page = page
        self.ctx = ctx
        self.state = state
        self.notices = notices

        route = page.route or ctx.rules.auth.auth_route
        self.redirect = resolve_redirect(route, ctx.rules.auth.default_redirect)

        self.flow = SignUpFlow(
            company_repo=ctx.company_repo,
            identity=state.identity,
            redirect_to=ctx.auth_redirect_url(self.redirect),
            code_length=ctx.rules.auth.invitation_code_length,
            rate_limiter=ctx.rate_limiter,
            sso=state.sso,
            on_change=self._on_flow_change,
        )
        self.alignment = ft.MainAxisAlignment.CENTER
        self.horizontal_alignment = ft.CrossAxisAlignment.CENTER
        self.expand = True
        self.spacing = 16

        # Form controls live for the whole view so typing never loses focus
        self.code_field = ft.TextField(
            label="Invitation code",
            width=320,
            max_length=ctx.rules.auth.invitation_code_length,
            capitalization=ft.TextCapitalization.CHARACTERS,
            on_change=self._code_changed,
            on_submit=self._verify_click,
        )
        self.first_name = ft.TextField(label="First name", width=320)
        self.last_name = ft.TextField(label="Last name", width=320)
        self.signup_email = ft.TextField(
            label="Email", width=320, keyboard_type=ft.KeyboardType.EMAIL
        )
        self.login_email = ft.TextField(
            label="Email",
            width=320,
            keyboard_type=ft.KeyboardType.EMAIL,
            on_submit=self._login_click,
        )
        self.progress = ft.ProgressRing(width=20, height=20, visible=False)

        self._render(self.flow.state, update=False)

    # --- rendering ---

    def _on_flow_change(self, state: SignUpState) -> None:
        if self.page is not None and self.controls:
            self._render(state)

    def _render(self, state: SignUpState, update: bool = True) -> None:
        step = state.mode.step
        busy = state.loading
        self.progress.visible = busy

        header = [
            ft.Icon(ft.Icons.MEDICAL_SERVICES, size=48, color="primary"),
            ft.Text("ITR Onboarding", style=ft.TextThemeStyle.HEADLINE_MEDIUM),
        ]

        if state.link_sent_to:
            body = self._link_sent(state.link_sent_to)
        elif isinstance(step, CompanyStep):
            body = self._company_form(step, busy)
        elif isinstance(step, ProfileStep):
            body = self._profile_form(step, busy)
        else:
            body = self._login_form(step, busy)

        switch_label = (
            "Already have an account? Sign in"
            if state.mode.name == "signup"
            else "New here? Sign up with an invitation code"
        )
        footer = ft.TextButton(switch_label, on_click=self._switch_click, disabled=busy)

        self.controls = [*header, *body, self.progress, footer]
        if update:
            self.update()

    def _company_form(self, step: CompanyStep, busy: bool) -> list[ft.Control]:
        self.code_field.value = step.invitation_code
        self.code_field.disabled = busy
        return [
            ft.Text("Enter the invitation code your company received."),
            self.code_field,
            ft.ElevatedButton(
                "Continue",
                icon=ft.Icons.ARROW_FORWARD,
                on_click=self._verify_click,
                disabled=not self.flow.can_submit_code,
            ),
        ]

    def _profile_form(self, step: ProfileStep, busy: bool) -> list[ft.Control]:
        self.first_name.value = step.profile.first_name
        self.last_name.value = step.profile.last_name
        self.signup_email.value = step.profile.email
        for field in (self.first_name, self.last_name, self.signup_email):
            field.disabled = busy
        return [
            ft.Text(f"Company: {step.company.name}", weight=ft.FontWeight.BOLD),
            self.first_name,
            self.last_name,
            self.signup_email,
            ft.Row(
                [
                    ft.TextButton("Back", on_click=self._back_click, disabled=busy),
                    ft.ElevatedButton(
                        "Send sign-in link",
                        icon=ft.Icons.EMAIL,
                        on_click=self._profile_click,
                        disabled=busy,
                    ),
                ],
                alignment=ft.MainAxisAlignment.CENTER,
            ),
        ]

    def _login_form(self, step: LoginStep, busy: bool) -> list[ft.Control]:
        self.login_email.value = step.email
        self.login_email.disabled = busy
        return [
            ft.Text("Sign in with the email address you registered."),
            self.login_email,
            ft.ElevatedButton(
                "Send sign-in link",
                icon=ft.Icons.EMAIL,
                on_click=self._login_click,
                disabled=busy,
            ),
        ]

    def _link_sent(self, email: str) -> list[ft.Control]:
        return [
            ft.Icon(ft.Icons.MARK_EMAIL_READ, size=40, color="secondary"),
            ft.Text(f"We sent a sign-in link to {email}."),
            ft.Text("Check your inbox and click the link to sign in.", color="onSurfaceVariant"),
        ]

    # --- handlers ---

    def _show(self, result: FlowResult) -> None:
        if result.notice is not None:
            self.notices.notify(result.notice)

    def _code_changed(self, e: ft.ControlEvent) -> None:
        self.flow.set_invitation_code(e.control.value or "")

    def _verify_click(self, e: ft.ControlEvent) -> None:
        if not self.flow.can_submit_code:
            return
        self._show(self.flow.verify_invitation_code())

    def _back_click(self, e: ft.ControlEvent) -> None:
        self.flow.back()

    def _profile_click(self, e: ft.ControlEvent) -> None:
        self.flow.update_profile(
            first_name=self.first_name.value or "",
            last_name=self.last_name.value or "",
            email=self.signup_email.value or "",
        )
        self._show(self.flow.submit_profile())

    def _login_click(self, e: ft.ControlEvent) -> None:
        self.flow.set_login_email(self.login_email.value or "")
        self._show(self.flow.submit_login())

    def _switch_click(self, e: ft.ControlEvent) -> None:
        if self.flow.state.loading:
            return
        self.flow.switch_mode()


def auth_entry(
    page: ft.Page,
    ctx: ServiceContext,
    state: AppState,
    notices: NoticePort,
) -> ft.Control | str:
    """
    Process sign-in link parameters carried by the auth route. Returns the
    route to go to instead when the page should not render (signed in, or
    callback parameters to strip from the address), else the auth form.
    """
    route = page.route or ctx.rules.auth.auth_route
    outcome = state.callback.mount(route)

    if outcome.should_redirect and outcome.redirect_to:
        logger.info("Auth page mounted with a session, leaving")
        return outcome.redirect_to

    if outcome.state == "error" and outcome.clean_url and outcome.clean_url != route:
        notices.notify(
            notice.error("Authentication error", outcome.error_message or "Sign-in failed")
        )
        return outcome.clean_url

    return AuthView(page, ctx, state, notices)
