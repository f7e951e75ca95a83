import string

import pytest

from itr_console.app_shell.cli import new_invitation_code
from itr_console.app_shell.config import Settings
from itr_console.ui.context import ServiceContext
from itr_console.ui.layout import NAV_ITEMS, nav_index
from itr_console.ui.state import AppState
from itr_console.ui.theme import AppTheme


class RecordingNotices:
    def __init__(self) -> None:
        self.notices = []

    def notify(self, notice) -> None:
        self.notices.append(notice)


@pytest.fixture
def ctx(db_path, rules) -> ServiceContext:
    settings = Settings()
    settings.db_path = db_path
    settings.site_url = "http://console.test"
    settings.api_url = "http://api.test"
    return ServiceContext.create(settings, rules)


def test_app_theme_modes():
    """Test that AppTheme returns correct color schemes for modes."""
    light = AppTheme.light_theme()
    assert light.color_scheme.primary == AppTheme.primary_light

    dark = AppTheme.dark_theme()
    assert dark.color_scheme.primary == AppTheme.primary_dark


def test_status_colors_cover_every_status(rules):
    for status in rules.onboarding.status_values:
        assert AppTheme.status_color(status) != "grey"
    assert AppTheme.status_color("archived") == "grey"


def test_nav_index_selects_section():
    assert NAV_ITEMS[nav_index("/")].label == "Dashboard"
    assert NAV_ITEMS[nav_index("/onboardings")].label == "Onboardings"
    assert NAV_ITEMS[nav_index("/onboardings/create")].label == "Onboardings"
    assert NAV_ITEMS[nav_index("/calendar?day=2025-03-10")].label == "Calendar"
    assert nav_index("/auth") is None


def test_auth_redirect_url(ctx):
    assert ctx.auth_redirect_url() == "http://console.test/auth"
    assert ctx.auth_redirect_url("/") == "http://console.test/auth"
    assert ctx.auth_redirect_url("/calendar") == "http://console.test/auth?redirect=/calendar"
    assert (
        ctx.auth_redirect_url("/training?tab=due date")
        == "http://console.test/auth?redirect=/training%3Ftab%3Ddue%20date"
    )


def test_sqlite_context_uses_local_identity(ctx):
    from itr_console.adapters.local_identity import LocalIdentityProvider

    identity = ctx.new_identity()

    assert isinstance(identity, LocalIdentityProvider)
    assert identity is not ctx.new_identity()
    assert identity.api_url == "http://api.test"


def test_app_state_logout_clears_user(ctx):
    notices = RecordingNotices()
    state = AppState.create(ctx, notices=notices, client_ip="10.0.0.1")
    state.auth.start()
    assert state.current_user is None
    assert state.profile(ctx) is None

    assert state.logout() is True
    assert state.current_user is None
    assert state.callback.state == "idle"
    assert notices.notices[-1].title == "Signed out"


def test_new_invitation_code():
    code = new_invitation_code(8)

    assert len(code) == 8
    assert set(code) <= set(string.ascii_uppercase + string.digits)
