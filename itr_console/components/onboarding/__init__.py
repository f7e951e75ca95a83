"""
Onboarding component - onboarding requests, list filtering and dashboard counts.
"""

from .component import (
    ALL_STATUSES,
    count_by_status,
    run_create,
    run_dashboard,
    run_list,
    run_list_companies,
)
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

__all__ = [
    # Entry points
    "run_create",
    "run_list",
    "run_dashboard",
    "run_list_companies",
    "count_by_status",
    "ALL_STATUSES",
    # Models
    "UNASSIGNED_CONTACT",
    "CreateOnboardingInput",
    "CreateOnboardingOutput",
    "DashboardOutput",
    "ListCompaniesOutput",
    "ListOnboardingsInput",
    "ListOnboardingsOutput",
    "OnboardingDraft",
    # Ports
    "CompanyRepoPort",
    "OnboardingRepoPort",
    "TimePort",
]
