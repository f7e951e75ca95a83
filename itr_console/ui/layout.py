from collections.abc import Callable
from typing import Any, NamedTuple

import flet as ft

from itr_console.ui.state import AppState


class NavItem(NamedTuple):
    route: str
    label: str
    icon: str
    selected_icon: str


NAV_ITEMS: list[NavItem] = [
    NavItem("/", "Dashboard", ft.Icons.DASHBOARD_OUTLINED, ft.Icons.DASHBOARD),
    NavItem("/onboardings", "Onboardings", ft.Icons.ASSIGNMENT_OUTLINED, ft.Icons.ASSIGNMENT),
    NavItem("/calendar", "Calendar", ft.Icons.CALENDAR_MONTH_OUTLINED, ft.Icons.CALENDAR_MONTH),
    NavItem("/training", "Training", ft.Icons.SCHOOL_OUTLINED, ft.Icons.SCHOOL),
    NavItem("/chatbot", "Chatbot", ft.Icons.CHAT_OUTLINED, ft.Icons.CHAT),
    NavItem("/sso-logs", "SSO Logs", ft.Icons.SECURITY_OUTLINED, ft.Icons.SECURITY),
    NavItem("/profile", "Profile", ft.Icons.PERSON_OUTLINE, ft.Icons.PERSON),
]


def nav_index(route: str) -> int | None:
    """Rail index for a route; sub-pages select their section."""
    path = route.split("?", 1)[0]
    best: int | None = None
    for i, item in enumerate(NAV_ITEMS):
        if path == item.route:
            return i
        if item.route != "/" and path.startswith(item.route + "/"):
            best = i
    return best


class MainLayout(ft.Row):  # type: ignore
    """
    Console frame: NavigationRail on the left, top bar and page content on the right.
    Only rendered for signed-in users; the auth page has no frame.
    """

    def __init__(
        self,
        page: ft.Page,
        app_state: AppState,
        content: ft.Control,
        on_logout: Callable[[], None],
        on_nav: Callable[[str], None],
        toggle_theme: Callable[[], None],
        current_route: str = "/",
    ):
        super().__init__(expand=True, spacing=0)
        self.page = page
        self.app_state = app_state
        self.on_logout = on_logout
        self.on_nav = on_nav
        self.toggle_theme = toggle_theme

        user = self.app_state.current_user

        self.rail = ft.NavigationRail(
            selected_index=nav_index(current_route),
            label_type=ft.NavigationRailLabelType.ALL,
            min_width=100,
            min_extended_width=200,
            leading=ft.Container(
                content=ft.Icon(ft.Icons.MEDICAL_SERVICES, size=32, color="primary"),
                padding=20,
            ),
            group_alignment=-0.9,
            destinations=[
                ft.NavigationRailDestination(
                    icon=item.icon,
                    selected_icon=item.selected_icon,
                    label=item.label,
                )
                for item in NAV_ITEMS
            ],
            on_change=self._rail_change,
            bgcolor="surface",
        )

        self.content_area = ft.Container(
            content=content,
            expand=True,
            padding=20,
            alignment=ft.alignment.top_left,
        )

        self.app_bar = ft.Container(
            content=ft.Row(
                [
                    ft.Text("ITR Onboarding", size=20, weight=ft.FontWeight.BOLD, color="primary"),
                    ft.Container(expand=True),
                    ft.IconButton(
                        ft.Icons.DARK_MODE if page.theme_mode == ft.ThemeMode.LIGHT else ft.Icons.LIGHT_MODE,
                        on_click=lambda _: self.toggle_theme(),
                    ),
                    ft.PopupMenuButton(
                        icon=ft.Icons.ACCOUNT_CIRCLE,
                        tooltip=user.email if user else None,
                        items=[
                            ft.PopupMenuItem(
                                text="Profile", on_click=lambda _: self.on_nav("/profile")
                            ),
                            ft.PopupMenuItem(text="Sign out", on_click=lambda _: self.on_logout()),
                        ],
                    ),
                ],
                alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
            ),
            padding=ft.padding.symmetric(horizontal=20, vertical=10),
            bgcolor="surfaceVariant",
        )

        right_panel = ft.Column([self.app_bar, self.content_area], expand=True, spacing=0)

        self.controls = [
            self.rail,
            ft.VerticalDivider(width=1, color="outlineVariant"),
            right_panel,
        ]

    def _rail_change(self, e: Any) -> None:
        idx = e.control.selected_index
        if idx is not None and 0 <= idx < len(NAV_ITEMS):
            self.on_nav(NAV_ITEMS[idx].route)
