"""
End-to-end sign-up journey on the local backend.

Invitation code -> profile -> emailed link -> API verify -> callback on the
auth page -> guarded route renders -> sign-out sends the user back to /auth.
"""

from urllib.parse import urlsplit

import pytest
from fastapi.testclient import TestClient

from itr_console.adapters.clock import SystemClock
from itr_console.api.deps import get_local_identity, get_rules, get_sso_recorder
from itr_console.api.main import app
from itr_console.app_shell.config import Settings, get_settings
from itr_console.app_shell.guard import guard_route
from itr_console.components.signup import SignUpFlow
from itr_console.components.sso_logs import SsoLogRecorder
from itr_console.ui.context import ServiceContext
from itr_console.ui.state import AppState

SITE = "http://console.test"


class RecordingNotices:
    def __init__(self) -> None:
        self.notices = []

    def notify(self, notice) -> None:
        self.notices.append(notice)


@pytest.fixture
def ctx(db_path, rules) -> ServiceContext:
    settings = Settings()
    settings.db_path = db_path
    settings.site_url = SITE
    settings.api_url = "http://api.test"
    return ServiceContext.create(settings, rules)


@pytest.fixture
def api(ctx):
    app.dependency_overrides[get_settings] = lambda: ctx.settings
    app.dependency_overrides[get_rules] = lambda: ctx.rules
    # A separate provider instance, as in the API process
    app.dependency_overrides[get_local_identity] = ctx.new_identity
    app.dependency_overrides[get_sso_recorder] = lambda: SsoLogRecorder(
        ctx.sso_log_repo, SystemClock()
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def state(ctx) -> AppState:
    state = AppState.create(ctx, notices=RecordingNotices(), client_ip="10.0.0.1")
    state.auth.start()
    yield state
    state.auth.stop()


def _flow(ctx, state, redirect: str) -> SignUpFlow:
    return SignUpFlow(
        company_repo=ctx.company_repo,
        identity=state.identity,
        redirect_to=ctx.auth_redirect_url(redirect),
        code_length=ctx.rules.auth.invitation_code_length,
        rate_limiter=ctx.rate_limiter,
        sso=state.sso,
    )


def _follow_link(api, ctx) -> str:
    """Open the emailed link; returns the console route the browser lands on."""
    link = urlsplit(ctx.email.get_last_email().links[0])
    r = api.get(f"{link.path}?{link.query}", follow_redirects=False)
    assert r.status_code == 303
    landing = urlsplit(r.headers["location"])
    assert f"{landing.scheme}://{landing.netloc}" == SITE
    return f"{landing.path}?{landing.query}"


def test_signup_journey(ctx, api, state, company):
    # Signed-out user asks for a protected page
    decision = guard_route("/calendar", state.auth.snapshot)
    assert decision.action == "redirect"
    assert decision.target == "/auth?redirect=/calendar"

    flow = _flow(ctx, state, "/calendar")
    flow.set_invitation_code("ACME2024")
    assert flow.verify_invitation_code().success
    assert flow.state.company.name == "Acme Clinic"

    flow.update_profile(first_name="Ada", last_name="Lovelace", email="ada@acme.test")
    result = flow.submit_profile()
    assert result.success
    assert flow.state.link_sent_to == "ada@acme.test"

    route = _follow_link(api, ctx)
    assert route.startswith("/auth?")

    outcome = state.callback.mount(route)

    assert outcome.state == "authenticated"
    assert outcome.redirect_to == "/calendar"
    assert outcome.clean_url == "/auth?redirect=/calendar"
    assert state.current_user.email == "ada@acme.test"
    assert guard_route("/calendar", state.auth.snapshot).action == "render"

    profile = state.profile(ctx)
    assert profile.full_name == "Ada Lovelace"
    assert profile.itr_company_id == company.id

    events = [log.event_type for log in ctx.sso_log_repo.list_recent()]
    assert sorted(events) == sorted(
        ["invitation_verified", "magic_link_requested", "magic_link_verified", "callback_succeeded"]
    )

    # Reopening the callback route does not replay it
    assert state.callback.mount(route) is outcome

    assert state.logout()
    assert state.profile(ctx) is None
    assert guard_route("/calendar", state.auth.snapshot).action == "redirect"
    assert not state.callback.mount("/auth?redirect=/calendar").should_redirect


def test_login_journey_for_existing_user(ctx, api, state, company):
    flow = _flow(ctx, state, "/")
    flow.switch_mode()
    flow.set_login_email("bob@acme.test")
    assert flow.submit_login().success

    outcome = state.callback.mount(_follow_link(api, ctx))

    assert outcome.should_redirect
    assert outcome.redirect_to == "/"
    assert state.current_user.email == "bob@acme.test"
    # No company metadata, no profile row
    assert state.profile(ctx) is None


def test_used_link_lands_on_auth_page_with_error(ctx, api, state):
    flow = _flow(ctx, state, "/")
    flow.switch_mode()
    flow.set_login_email("bob@acme.test")
    flow.submit_login()
    link = urlsplit(ctx.email.get_last_email().links[0])
    api.get(f"{link.path}?{link.query}", follow_redirects=False)

    route = _follow_link(api, ctx)
    outcome = state.callback.mount(route)

    assert outcome.state == "error"
    assert outcome.error_message == "Email link is invalid or has expired"
    assert outcome.clean_url == "/auth"
    assert state.current_user is None


def test_link_requests_are_rate_limited(ctx, state):
    flow = _flow(ctx, state, "/")
    flow.switch_mode()
    flow.set_login_email("bob@acme.test")

    results = [flow.submit_login() for _ in range(4)]

    assert [r.success for r in results] == [True, True, True, False]
    assert results[-1].error_code == "rate_limited"
    assert len(ctx.email.get_emails_to("bob@acme.test")) == 3
