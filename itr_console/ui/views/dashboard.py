import logging

import flet as ft

from itr_console.components.calendar import UpcomingEventsInput, run_upcoming
from itr_console.components.onboarding import run_dashboard
from itr_console.domain.entities import ONBOARDING_STATUSES
from itr_console.ui.components.stat_card import StatCard, status_badge
from itr_console.ui.context import ServiceContext
from itr_console.ui.state import AppState
from itr_console.ui.theme import AppTheme

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    "pending": "Pending",
    "inprogress": "In progress",
    "scheduled": "Scheduled",
    "completed": "Completed",
    "rejected": "Rejected",
}


def DashboardContent(page: ft.Page, ctx: ServiceContext, state: AppState) -> ft.Control:
    out = run_dashboard(repo=ctx.onboarding_repo, recent_limit=ctx.rules.onboarding.recent_limit)

    profile = state.profile(ctx)
    greeting = f"Welcome, {profile.full_name}" if profile else "Welcome"

    def stat(label: str, value: int, color: str) -> ft.Control:
        return StatCard(
            content=ft.Column(
                [
                    ft.Text(str(value), size=30, weight=ft.FontWeight.BOLD, color=color),
                    ft.Text(label, size=14, color="onSurfaceVariant"),
                ],
                alignment=ft.MainAxisAlignment.CENTER,
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            width=150,
            height=120,
        )

    if not out.success:
        body: list[ft.Control] = [
            ft.Text(out.error or "Could not load onboardings", color="error"),
        ]
    else:
        recent_rows = [
            StatCard(
                content=ft.Row(
                    [
                        ft.Column(
                            [
                                ft.Text(o.client_name, weight=ft.FontWeight.BOLD),
                                ft.Text(o.itr_company_name or "", size=12, color="onSurfaceVariant"),
                            ],
                            spacing=2,
                            expand=True,
                        ),
                        status_badge(STATUS_LABELS.get(o.status, o.status), AppTheme.status_color(o.status)),
                    ]
                ),
                padding=12,
                on_click=lambda _: page.go("/onboardings"),
            )
            for o in out.recent
        ]
        body = [
            ft.Text("Overview", size=20, weight=ft.FontWeight.BOLD),
            ft.Row(
                [stat("Total", out.total, "primary")]
                + [
                    stat(STATUS_LABELS[s], out.counts.get(s, 0), AppTheme.status_color(s))
                    for s in ONBOARDING_STATUSES
                ],
                wrap=True,
            ),
            ft.Divider(),
            ft.Row(
                [
                    ft.Text("Recent onboardings", size=20, weight=ft.FontWeight.BOLD),
                    ft.TextButton("View all", on_click=lambda _: page.go("/onboardings")),
                ],
                alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
            ),
            *(recent_rows or [ft.Text("No onboardings yet.", color="onSurfaceVariant")]),
        ]

    upcoming = run_upcoming(UpcomingEventsInput(now=ctx.clock.now_utc()), repo=ctx.event_repo)
    if upcoming.success and upcoming.events:
        body += [
            ft.Divider(),
            ft.Text("Upcoming this week", size=20, weight=ft.FontWeight.BOLD),
            *[
                ft.Text(f"{ev.start_time:%a %d/%m %H:%M}  {ev.title}")
                for ev in upcoming.events
            ],
        ]

    return ft.Container(
        content=ft.Column(
            [
                ft.Text(greeting, size=28, weight=ft.FontWeight.BOLD, color="primary"),
                ft.Row(
                    [
                        ft.ElevatedButton(
                            "New onboarding",
                            icon=ft.Icons.ADD,
                            on_click=lambda _: page.go("/onboardings/create"),
                        ),
                        ft.ElevatedButton(
                            "Calendar",
                            icon=ft.Icons.CALENDAR_MONTH,
                            on_click=lambda _: page.go("/calendar"),
                        ),
                    ],
                    wrap=True,
                ),
                ft.Divider(),
                *body,
            ],
            scroll=ft.ScrollMode.AUTO,
        ),
        padding=20,
        expand=True,
    )
