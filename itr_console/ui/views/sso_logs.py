import flet as ft

from itr_console.components.sso_logs import QuerySsoInput, run_query
from itr_console.ui.context import ServiceContext
from itr_console.ui.state import AppState


def SsoLogsContent(page: ft.Page, ctx: ServiceContext, state: AppState) -> ft.Control:
    search_field = ft.TextField(
        label="Search",
        prefix_icon=ft.Icons.SEARCH,
        width=320,
        hint_text="Event, company or IP address",
    )
    error_text = ft.Text(color="error", visible=False)
    table = ft.DataTable(
        columns=[
            ft.DataColumn(ft.Text("Date")),
            ft.DataColumn(ft.Text("Event")),
            ft.DataColumn(ft.Text("Company")),
            ft.DataColumn(ft.Text("IP address")),
            ft.DataColumn(ft.Text("User agent")),
        ],
        rows=[],
    )

    def load(update: bool = True) -> None:
        out = run_query(QuerySsoInput(search=search_field.value or ""), repo=ctx.sso_log_repo)
        error_text.visible = not out.success
        error_text.value = out.error or ""
        table.rows = [
            ft.DataRow(
                cells=[
                    ft.DataCell(ft.Text(log.created_at.strftime("%d/%m/%Y %H:%M:%S"))),
                    ft.DataCell(ft.Text(log.event_type)),
                    ft.DataCell(ft.Text(log.company_name or "-")),
                    ft.DataCell(ft.Text(log.ip_address or "-")),
                    ft.DataCell(ft.Text((log.user_agent or "-")[:60])),
                ]
            )
            for log in out.logs
        ]
        if update:
            page.update()

    search_field.on_change = lambda _: load()
    load(update=False)

    return ft.Container(
        content=ft.Column(
            [
                ft.Text("SSO Logs", size=24, weight=ft.FontWeight.BOLD),
                search_field,
                ft.Divider(),
                error_text,
                table,
            ],
            scroll=ft.ScrollMode.AUTO,
        ),
        padding=20,
        expand=True,
    )
