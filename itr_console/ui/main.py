import logging
from typing import Any

import flet as ft

from itr_console.adapters.sqlite.migrator import SQLiteMigrator
from itr_console.app_shell.config import get_settings, validate_ops_rules
from itr_console.app_shell.router import Router
from itr_console.rules.loader import load_rules
from itr_console.ui.context import ServiceContext
from itr_console.ui.layout import MainLayout
from itr_console.ui.notices import SnackBarNotices
from itr_console.ui.state import AppState
from itr_console.ui.theme import AppTheme
from itr_console.ui.views.auth import auth_entry
from itr_console.ui.views.calendar import CalendarContent
from itr_console.ui.views.chatbot import ChatbotView
from itr_console.ui.views.dashboard import DashboardContent
from itr_console.ui.views.onboardings import OnboardingCreateContent, OnboardingListContent
from itr_console.ui.views.profile import ProfileContent
from itr_console.ui.views.sso_logs import SsoLogsContent
from itr_console.ui.views.training import TrainingContent

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

_ctx: ServiceContext | None = None


def get_context() -> ServiceContext:
    """Process-wide services, built once on the first page session."""
    global _ctx
    if _ctx is None:
        settings = get_settings()
        rules = load_rules(settings.rules_path)
        logger.info("Rules loaded successfully")

        validate_ops_rules(rules, settings)

        if rules.backend.provider == "sqlite":
            logger.info(f"Database path: {settings.db_path}")
            SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()

        _ctx = ServiceContext.create(settings, rules)
    return _ctx


def main(page: ft.Page) -> None:
    page.title = "ITR Onboarding"

    page.theme = AppTheme.light_theme()
    page.dark_theme = AppTheme.dark_theme()
    page.theme_mode = ft.ThemeMode.LIGHT

    try:
        ctx = get_context()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Startup failed: {e}")
        page.add(ft.Text(f"Error: {e}", color="red", size=20))
        return

    notices = SnackBarNotices(page)
    state = AppState.create(
        ctx,
        notices=notices,
        client_ip=page.client_ip,
        user_agent=page.client_user_agent,
    )
    auth_route = ctx.rules.auth.auth_route
    router = Router(page, state.auth, auth_route=auth_route)

    # --- Layout Wrapper ---
    def make_view(route: str, content: ft.Control) -> ft.View:
        def handle_logout() -> None:
            # The router sends the page to the auth route once the store clears
            state.logout()

        def toggle_theme() -> None:
            if page.theme_mode == ft.ThemeMode.LIGHT:
                page.theme_mode = ft.ThemeMode.DARK
            else:
                page.theme_mode = ft.ThemeMode.LIGHT
            page.update()

        layout = MainLayout(
            page=page,
            app_state=state,
            content=content,
            on_logout=handle_logout,
            on_nav=page.go,
            toggle_theme=toggle_theme,
            current_route=route,
        )
        return ft.View(route, [layout], padding=0)

    # --- Builders ---

    def auth_builder(_: ft.Page) -> ft.View | str:
        content = auth_entry(page, ctx, state, notices)
        if isinstance(content, str):
            return content
        return ft.View(auth_route, [content], padding=20)

    def dashboard_builder(_: ft.Page) -> ft.View:
        return make_view("/", DashboardContent(page, ctx, state))

    def onboardings_builder(_: ft.Page) -> ft.View:
        return make_view("/onboardings", OnboardingListContent(page, ctx, state))

    def onboarding_create_builder(_: ft.Page) -> ft.View:
        return make_view("/onboardings/create", OnboardingCreateContent(page, ctx, state, notices))

    def calendar_builder(_: ft.Page) -> ft.View:
        return make_view("/calendar", CalendarContent(page, ctx, state))

    def training_builder(_: ft.Page) -> ft.View:
        return make_view("/training", TrainingContent(page, ctx, state))

    def profile_builder(_: ft.Page) -> ft.View:
        return make_view("/profile", ProfileContent(page, ctx, state))

    def chatbot_builder(_: ft.Page) -> ft.View:
        return make_view("/chatbot", ChatbotView(page, ctx, state, notices))

    def sso_logs_builder(_: ft.Page) -> ft.View:
        return make_view("/sso-logs", SsoLogsContent(page, ctx, state))

    router.register(auth_route, auth_builder)
    router.register("/", dashboard_builder)
    router.register("/onboardings", onboardings_builder)
    router.register("/onboardings/create", onboarding_create_builder)
    router.register("/calendar", calendar_builder)
    router.register("/training", training_builder)
    router.register("/profile", profile_builder)
    router.register("/chatbot", chatbot_builder)
    router.register("/sso-logs", sso_logs_builder)

    page.on_route_change = router.handle_route_change
    page.on_view_pop = router.view_pop

    def on_disconnect(_: Any) -> None:
        router.detach()
        state.auth.stop()

    page.on_disconnect = on_disconnect

    router.attach()
    # Protected routes show a spinner until the initial session check resolves
    router.show(page.route or "/")
    state.auth.start()


if __name__ == "__main__":
    ft.app(target=main, view=ft.AppView.WEB_BROWSER, port=8550)
