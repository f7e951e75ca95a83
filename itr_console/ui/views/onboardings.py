import logging
from datetime import date
from typing import Any

import flet as ft

from itr_console.components.onboarding import (
    ALL_STATUSES,
    CreateOnboardingInput,
    ListOnboardingsInput,
    run_create,
    run_list,
    run_list_companies,
)
from itr_console.domain import notices as notice
from itr_console.domain.entities import ONBOARDING_STATUSES
from itr_console.ports.notices import NoticePort
from itr_console.ui.components.stat_card import status_badge
from itr_console.ui.context import ServiceContext
from itr_console.ui.state import AppState
from itr_console.ui.theme import AppTheme
from itr_console.ui.views.dashboard import STATUS_LABELS

logger = logging.getLogger(__name__)


def _fmt_date(value: date | None) -> str:
    return value.strftime("%d/%m/%Y") if value else "-"


def OnboardingListContent(page: ft.Page, ctx: ServiceContext, state: AppState) -> ft.Control:
    search_field = ft.TextField(
        label="Search",
        prefix_icon=ft.Icons.SEARCH,
        width=300,
        hint_text="Client, company or contact",
    )
    status_dropdown = ft.Dropdown(
        label="Status",
        width=200,
        value=ALL_STATUSES,
        options=[ft.dropdown.Option(ALL_STATUSES, "All")]
        + [ft.dropdown.Option(s, STATUS_LABELS.get(s, s)) for s in ONBOARDING_STATUSES],
    )
    error_text = ft.Text(color="error", visible=False)

    columns = [
        ft.DataColumn(ft.Text("Client")),
        ft.DataColumn(ft.Text("Company")),
        ft.DataColumn(ft.Text("Contact")),
        ft.DataColumn(ft.Text("Products")),
        ft.DataColumn(ft.Text("Preferred date")),
        ft.DataColumn(ft.Text("Status")),
    ]
    table = ft.DataTable(columns=columns, rows=[])
    empty_text = ft.Text("No onboardings match.", color="onSurfaceVariant", visible=False)

    def load(update: bool = True) -> None:
        out = run_list(
            ListOnboardingsInput(
                status=status_dropdown.value or ALL_STATUSES,
                search=search_field.value or "",
            ),
            repo=ctx.onboarding_repo,
        )
        error_text.visible = not out.success
        error_text.value = out.error or ""
        table.rows = [
            ft.DataRow(
                cells=[
                    ft.DataCell(ft.Text(o.client_name)),
                    ft.DataCell(ft.Text(o.itr_company_name or "-")),
                    ft.DataCell(
                        ft.Column(
                            [
                                ft.Text(o.contact_person),
                                ft.Text(o.contact_email or "", size=12, color="onSurfaceVariant"),
                            ],
                            spacing=0,
                        )
                    ),
                    ft.DataCell(ft.Text(", ".join(o.products))),
                    ft.DataCell(ft.Text(_fmt_date(o.desired_date))),
                    ft.DataCell(
                        status_badge(STATUS_LABELS.get(o.status, o.status), AppTheme.status_color(o.status))
                    ),
                ]
            )
            for o in out.onboardings
        ]
        empty_text.visible = out.success and not out.onboardings
        if update:
            page.update()

    search_field.on_change = lambda _: load()
    status_dropdown.on_change = lambda _: load()
    load(update=False)

    return ft.Container(
        content=ft.Column(
            [
                ft.Row(
                    [
                        ft.Text("Onboardings", size=24, weight=ft.FontWeight.BOLD),
                        ft.ElevatedButton(
                            "New onboarding",
                            icon=ft.Icons.ADD,
                            on_click=lambda _: page.go("/onboardings/create"),
                        ),
                    ],
                    alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
                ),
                ft.Row([search_field, status_dropdown], wrap=True),
                ft.Divider(),
                error_text,
                table,
                empty_text,
            ],
            scroll=ft.ScrollMode.AUTO,
        ),
        padding=20,
        expand=True,
    )


def OnboardingCreateContent(
    page: ft.Page, ctx: ServiceContext, state: AppState, notices: NoticePort
) -> ft.Control:
    companies_out = run_list_companies(company_repo=ctx.company_repo)
    if not companies_out.success:
        notices.notify(notice.error("Error", companies_out.error or "Could not load companies"))

    profile = state.profile(ctx)

    client_name = ft.TextField(label="Client name")
    company = ft.Dropdown(
        label="ITR company",
        options=[ft.dropdown.Option(c.id, c.name) for c in companies_out.companies],
        value=profile.itr_company_id if profile else None,
    )
    contact_email = ft.TextField(label="Contact email", keyboard_type=ft.KeyboardType.EMAIL)
    contact_phone = ft.TextField(label="Contact phone", keyboard_type=ft.KeyboardType.PHONE)
    trainer = ft.TextField(label="Trainer (optional)")
    bdc_date = ft.TextField(label="Purchase order date (YYYY-MM-DD)")
    preferred_date = ft.TextField(label="Preferred date (YYYY-MM-DD, optional)")
    doctor_count = ft.TextField(label="Doctors", value="0", width=120, keyboard_type=ft.KeyboardType.NUMBER)
    paramedical_count = ft.TextField(
        label="Paramedical", value="0", width=120, keyboard_type=ft.KeyboardType.NUMBER
    )
    secretary_count = ft.TextField(
        label="Secretaries", value="0", width=120, keyboard_type=ft.KeyboardType.NUMBER
    )
    is_msp = ft.Checkbox(label="MSP", value=False)
    ob_fees = ft.Checkbox(label="Onboarding fees activated", value=True)
    comments = ft.TextField(label="Comments", multiline=True, min_lines=2)

    product_checks = {p: ft.Checkbox(label=p, value=False) for p in ctx.rules.onboarding.products}
    products_error = ft.Text(color="error", size=12, visible=False)

    fields: dict[str, Any] = {
        "client_name": client_name,
        "itr_company_id": company,
        "contact_email": contact_email,
        "contact_phone": contact_phone,
        "trainer": trainer,
        "bdc_date": bdc_date,
        "preferred_date": preferred_date,
        "doctor_count": doctor_count,
        "paramedical_count": paramedical_count,
        "secretary_count": secretary_count,
        "comments": comments,
    }

    def form_data() -> dict[str, Any]:
        data: dict[str, Any] = {name: (ctl.value or "") for name, ctl in fields.items()}
        data["preferred_date"] = data["preferred_date"] or None
        data["bdc_date"] = data["bdc_date"] or None
        data["itr_company_id"] = data["itr_company_id"] or ""
        data["products"] = [p for p, cb in product_checks.items() if cb.value]
        data["is_msp"] = bool(is_msp.value)
        data["ob_fees_activated"] = bool(ob_fees.value)
        return data

    submit_btn = ft.ElevatedButton("Create onboarding", icon=ft.Icons.SAVE)

    def submit(e: ft.ControlEvent) -> None:
        for ctl in fields.values():
            ctl.error_text = None
        products_error.visible = False
        submit_btn.disabled = True
        page.update()

        user = state.current_user
        out = run_create(
            CreateOnboardingInput(data=form_data(), created_by=user.id if user else None),
            repo=ctx.onboarding_repo,
            time_port=ctx.clock,
            allowed_products=ctx.rules.onboarding.products or None,
        )
        submit_btn.disabled = False

        if out.success:
            notices.notify(notice.info("Onboarding created", f"{out.onboarding.client_name} is pending."))
            page.go("/onboardings")
            return

        for name, msg in out.field_errors.items():
            if name == "products":
                products_error.value = msg
                products_error.visible = True
            elif name in fields:
                fields[name].error_text = msg
        notices.notify(notice.error("Error", out.error or "Could not create onboarding"))
        page.update()

    submit_btn.on_click = submit

    return ft.Container(
        content=ft.Column(
            [
                ft.Text("New onboarding", size=24, weight=ft.FontWeight.BOLD),
                ft.Divider(),
                client_name,
                company,
                ft.Row([contact_email, contact_phone], wrap=True),
                trainer,
                ft.Row([bdc_date, preferred_date], wrap=True),
                ft.Text("Products", weight=ft.FontWeight.BOLD),
                ft.Row(list(product_checks.values()), wrap=True),
                products_error,
                ft.Text("Staff", weight=ft.FontWeight.BOLD),
                ft.Row([doctor_count, paramedical_count, secretary_count], wrap=True),
                ft.Row([is_msp, ob_fees]),
                comments,
                ft.Row(
                    [
                        ft.TextButton("Cancel", on_click=lambda _: page.go("/onboardings")),
                        submit_btn,
                    ]
                ),
            ],
            scroll=ft.ScrollMode.AUTO,
        ),
        padding=20,
        expand=True,
    )
