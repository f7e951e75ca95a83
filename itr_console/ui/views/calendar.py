from datetime import date, timedelta

import flet as ft

from itr_console.components.calendar import EventsForDayInput, run_events_for_day
from itr_console.ui.components.stat_card import StatCard
from itr_console.ui.context import ServiceContext
from itr_console.ui.state import AppState


def CalendarContent(page: ft.Page, ctx: ServiceContext, state: AppState) -> ft.Control:
    selected = {"day": ctx.clock.now_utc().date()}

    day_label = ft.Text(size=18, weight=ft.FontWeight.BOLD)
    events_col = ft.Column(spacing=10)

    def load(update: bool = True) -> None:
        day: date = selected["day"]
        day_label.value = day.strftime("%A %d %B %Y")
        out = run_events_for_day(EventsForDayInput(day=day), repo=ctx.event_repo)
        if not out.success:
            events_col.controls = [ft.Text(out.error or "Could not load events", color="error")]
        elif not out.events:
            events_col.controls = [ft.Text("No events scheduled for this day.", color="onSurfaceVariant")]
        else:
            events_col.controls = [
                StatCard(
                    content=ft.Row(
                        [
                            ft.Text(
                                f"{ev.start_time:%H:%M} - {ev.end_time:%H:%M}",
                                weight=ft.FontWeight.BOLD,
                                width=120,
                            ),
                            ft.Column(
                                [
                                    ft.Text(ev.title, weight=ft.FontWeight.BOLD),
                                    ft.Text(ev.description or "", size=12, color="onSurfaceVariant"),
                                ],
                                spacing=2,
                                expand=True,
                            ),
                        ]
                    ),
                    padding=12,
                )
                for ev in out.events
            ]
        if update:
            page.update()

    def shift(days: int) -> None:
        selected["day"] = selected["day"] + timedelta(days=days)
        load()

    def pick(e: ft.ControlEvent) -> None:
        if e.control.value:
            selected["day"] = e.control.value.date()
            load()

    picker = ft.DatePicker(on_change=pick)

    load(update=False)

    return ft.Container(
        content=ft.Column(
            [
                ft.Text("Calendar", size=24, weight=ft.FontWeight.BOLD),
                ft.Row(
                    [
                        ft.IconButton(ft.Icons.CHEVRON_LEFT, on_click=lambda _: shift(-1)),
                        day_label,
                        ft.IconButton(ft.Icons.CHEVRON_RIGHT, on_click=lambda _: shift(1)),
                        ft.IconButton(ft.Icons.CALENDAR_MONTH, on_click=lambda _: page.open(picker)),
                        ft.TextButton(
                            "Today",
                            on_click=lambda _: shift((ctx.clock.now_utc().date() - selected["day"]).days),
                        ),
                    ]
                ),
                ft.Divider(),
                events_col,
            ],
            scroll=ft.ScrollMode.AUTO,
        ),
        padding=20,
        expand=True,
    )
