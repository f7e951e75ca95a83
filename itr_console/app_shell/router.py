import logging
from collections.abc import Callable
from typing import NamedTuple
from urllib.parse import urlsplit

import flet as ft

from itr_console.app_shell.guard import AUTH_ROUTE, RouteDecision, guard_route
from itr_console.components.auth_store import AuthSnapshot, AuthStore

logger = logging.getLogger(__name__)


class RouteConfig(NamedTuple):
    # builder accepts the page; returns a View or a route to go to instead
    builder: Callable[..., ft.View | str]


class Router:
    """
    Maps console routes to view builders. Every route except the auth route
    goes through the guard; the router re-runs the guard whenever the auth
    store changes so a resolved session check or a sign-out takes effect on
    the page that is showing.
    """

    def __init__(self, page: ft.Page, store: AuthStore, auth_route: str = AUTH_ROUTE):
        self.page = page
        self.store = store
        self.auth_route = auth_route
        self.routes: dict[str, RouteConfig] = {}
        self._decision: RouteDecision | None = None
        self._unsubscribe: Callable[[], None] | None = None

    def register(self, route: str, builder: Callable[..., ft.View | str]) -> None:
        self.routes[route] = RouteConfig(builder)

    def attach(self) -> None:
        self._unsubscribe = self.store.subscribe(self._on_auth_change)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_auth_change(self, snapshot: AuthSnapshot) -> None:
        route = self.page.route or "/"
        decision = guard_route(route, snapshot, self.auth_route)
        if decision != self._decision:
            self.show(route)

    def handle_route_change(self, e: ft.RouteChangeEvent) -> None:
        self.show(e.route or "/")

    def show(self, route: str) -> None:
        logger.info(f"Navigate to: {urlsplit(route).path}")
        path = urlsplit(route).path or "/"

        decision = guard_route(route, self.store.snapshot, self.auth_route)
        self._decision = decision

        if decision.action == "redirect" and decision.target:
            logger.info(f"Access denied to {path}. Redirecting to {self.auth_route}.")
            self.page.go(decision.target)
            return

        self.page.views.clear()

        if decision.action == "wait":
            self.page.views.append(
                ft.View(
                    route,
                    [ft.Container(content=ft.ProgressRing(), alignment=ft.alignment.center, expand=True)],
                )
            )
            self.page.update()
            return

        config = self.routes.get(path)
        if not config:
            # 404 - no matching route found
            logger.warning(f"No route found for: {path}")
            self.page.views.append(
                ft.View(
                    "/404",
                    [
                        ft.AppBar(title=ft.Text("404")),
                        ft.Text(f"Page not found: {path}"),
                        ft.TextButton("Back to dashboard", on_click=lambda _: self.page.go("/")),
                    ],
                )
            )
            self.page.update()
            return

        view = config.builder(self.page)
        if isinstance(view, str):
            self.page.go(view)
            return
        self.page.views.append(view)
        self.page.update()

    def view_pop(self, view: ft.View) -> None:
        self.page.views.pop()
        top_view = self.page.views[-1] if self.page.views else None
        self.page.go(top_view.route if top_view else "/")
