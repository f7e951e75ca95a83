import flet as ft

from itr_console.ui.context import ServiceContext
from itr_console.ui.state import AppState


def ProfileContent(page: ft.Page, ctx: ServiceContext, state: AppState) -> ft.Control:
    user = state.current_user
    profile = state.profile(ctx)

    def row(label: str, value: str | None) -> ft.Control:
        return ft.Row(
            [
                ft.Text(label, width=140, color="onSurfaceVariant"),
                ft.Text(value or "-", weight=ft.FontWeight.BOLD),
            ]
        )

    if profile is None:
        details: list[ft.Control] = [
            row("Email", user.email if user else None),
            ft.Text("Your profile has not been created yet.", color="onSurfaceVariant"),
        ]
    else:
        details = [
            row("First name", profile.first_name),
            row("Last name", profile.last_name),
            row("Email", profile.email or (user.email if user else None)),
            row("Company", profile.company),
            row("Role", profile.role),
            row("Member since", profile.created_at.strftime("%d/%m/%Y")),
        ]

    return ft.Container(
        content=ft.Column(
            [
                ft.Text("Profile", size=24, weight=ft.FontWeight.BOLD),
                ft.Divider(),
                *details,
            ]
        ),
        padding=20,
        expand=True,
    )
