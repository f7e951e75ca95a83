"""
Onboarding component.

Creates onboarding requests from the console form and serves the list and
dashboard views.
"""

import logging

from pydantic import ValidationError

from itr_console.domain.entities import ONBOARDING_STATUSES, Onboarding
from itr_console.domain.errors import BackendError

from .models import (
    UNASSIGNED_CONTACT,
    CreateOnboardingInput,
    CreateOnboardingOutput,
    DashboardOutput,
    ListCompaniesOutput,
    ListOnboardingsInput,
    ListOnboardingsOutput,
    OnboardingDraft,
)
from .ports import CompanyRepoPort, OnboardingRepoPort, TimePort

logger = logging.getLogger(__name__)

ALL_STATUSES = "all"


def _field_errors(exc: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "form"
        msg = err["msg"]
        # "Value error, Invalid email address" -> "Invalid email address"
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.setdefault(loc, msg)
    return errors


def run_create(
    inp: CreateOnboardingInput,
    *,
    repo: OnboardingRepoPort,
    time_port: TimePort,
    allowed_products: list[str] | None = None,
) -> CreateOnboardingOutput:
    try:
        draft = OnboardingDraft.model_validate(inp.data)
    except ValidationError as e:
        return CreateOnboardingOutput(
            success=False, error="Please correct the highlighted fields", field_errors=_field_errors(e)
        )

    if allowed_products:
        unknown = [p for p in draft.products if p not in allowed_products]
        if unknown:
            return CreateOnboardingOutput(
                success=False,
                error="Please correct the highlighted fields",
                field_errors={"products": f"Unknown product(s): {', '.join(unknown)}"},
            )

    now = time_port.now_utc()
    onboarding = Onboarding(
        client_name=draft.client_name,
        itr_company_id=draft.itr_company_id,
        contact_email=draft.contact_email,
        contact_phone=draft.contact_phone,
        contact_person=draft.trainer or UNASSIGNED_CONTACT,
        products=draft.products,
        doctor_count=draft.doctor_count,
        paramedical_count=draft.paramedical_count,
        secretary_count=draft.secretary_count,
        is_msp=draft.is_msp,
        ob_fees_activated=draft.ob_fees_activated,
        desired_date=draft.preferred_date,
        comments=draft.comments,
        status="pending",
        created_by=inp.created_by,
        created_at=now,
        updated_at=now,
    )

    try:
        repo.save(onboarding)
    except BackendError as e:
        logger.error(f"Failed to create onboarding for {draft.client_name}: {e.message}")
        return CreateOnboardingOutput(
            success=False, error="An error occurred while creating the onboarding."
        )

    logger.info(f"Onboarding {onboarding.id} created for company {onboarding.itr_company_id}")
    return CreateOnboardingOutput(onboarding=onboarding, success=True)


def _matches(onboarding: Onboarding, needle: str) -> bool:
    haystack = (
        onboarding.client_name,
        onboarding.itr_company_name or "",
        onboarding.contact_person,
        onboarding.contact_email or "",
    )
    return any(needle in value.lower() for value in haystack)


def run_list(inp: ListOnboardingsInput, *, repo: OnboardingRepoPort) -> ListOnboardingsOutput:
    if inp.status != ALL_STATUSES and inp.status not in ONBOARDING_STATUSES:
        return ListOnboardingsOutput(success=False, error=f"Unknown status: {inp.status}")

    try:
        rows = repo.list_recent()
    except BackendError as e:
        logger.error(f"Failed to list onboardings: {e.message}")
        return ListOnboardingsOutput(
            success=False, error="An error occurred while fetching onboardings."
        )

    if inp.status != ALL_STATUSES:
        rows = [o for o in rows if o.status == inp.status]

    needle = inp.search.strip().lower()
    if needle:
        rows = [o for o in rows if _matches(o, needle)]

    return ListOnboardingsOutput(onboardings=rows, success=True)


def count_by_status(onboardings: list[Onboarding]) -> dict[str, int]:
    counts = {status: 0 for status in ONBOARDING_STATUSES}
    for o in onboardings:
        counts[o.status] = counts.get(o.status, 0) + 1
    return counts


def run_dashboard(*, repo: OnboardingRepoPort, recent_limit: int = 3) -> DashboardOutput:
    try:
        rows = repo.list_recent()
    except BackendError as e:
        logger.error(f"Failed to load dashboard: {e.message}")
        return DashboardOutput(success=False, error="An error occurred while fetching onboardings.")

    return DashboardOutput(
        counts=count_by_status(rows),
        recent=rows[:recent_limit],
        total=len(rows),
        success=True,
    )


def run_list_companies(*, company_repo: CompanyRepoPort) -> ListCompaniesOutput:
    try:
        companies = company_repo.list_all()
    except BackendError as e:
        logger.error(f"Failed to list companies: {e.message}")
        return ListCompaniesOutput(success=False, error=e.message)
    return ListCompaniesOutput(companies=companies, success=True)
