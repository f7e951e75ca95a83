"""Route guard: decides what a console route shows for the current auth state."""

from dataclasses import dataclass
from typing import Literal
from urllib.parse import quote, urlsplit

from itr_console.components.auth_store import AuthSnapshot

RouteAction = Literal["render", "wait", "redirect"]

AUTH_ROUTE = "/auth"


@dataclass(frozen=True)
class RouteDecision:
    action: RouteAction
    target: str | None = None


def is_public(path: str, auth_route: str = AUTH_ROUTE) -> bool:
    return urlsplit(path).path == auth_route


def login_redirect(path: str, auth_route: str = AUTH_ROUTE) -> str:
    return f"{auth_route}?redirect={quote(path or '/', safe='/')}"


def guard_route(path: str, snapshot: AuthSnapshot, auth_route: str = AUTH_ROUTE) -> RouteDecision:
    if is_public(path, auth_route):
        return RouteDecision("render")
    if snapshot.loading:
        return RouteDecision("wait")
    if snapshot.session is None:
        return RouteDecision("redirect", login_redirect(path, auth_route))
    return RouteDecision("render")
