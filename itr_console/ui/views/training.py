import flet as ft

from itr_console.components.training import run_certifications_by_level
from itr_console.ui.components.stat_card import StatCard
from itr_console.ui.context import ServiceContext
from itr_console.ui.state import AppState


def TrainingContent(page: ft.Page, ctx: ServiceContext, state: AppState) -> ft.Control:
    out = run_certifications_by_level(repo=ctx.certification_repo)

    sections: list[ft.Control] = []
    if not out.success:
        sections.append(ft.Text(out.error or "Could not load certifications", color="error"))
    elif not out.levels:
        sections.append(ft.Text("No certifications available yet.", color="onSurfaceVariant"))

    for lvl in out.levels:
        sections.append(ft.Text(f"Level {lvl.level}", size=20, weight=ft.FontWeight.BOLD))
        sections.append(
            ft.Row(
                [
                    StatCard(
                        content=ft.Column(
                            [
                                ft.Icon(ft.Icons.WORKSPACE_PREMIUM, color="secondary"),
                                ft.Text(cert.name, weight=ft.FontWeight.BOLD),
                                ft.Text(cert.product_name or "", size=12, color="onSurfaceVariant"),
                            ],
                            spacing=4,
                        ),
                        width=220,
                    )
                    for cert in lvl.certifications
                ],
                wrap=True,
            )
        )

    return ft.Container(
        content=ft.Column(
            [
                ft.Text("Training", size=24, weight=ft.FontWeight.BOLD),
                ft.Text(f"{out.total} certification(s)", color="onSurfaceVariant"),
                ft.Divider(),
                *sections,
            ],
            scroll=ft.ScrollMode.AUTO,
        ),
        padding=20,
        expand=True,
    )
