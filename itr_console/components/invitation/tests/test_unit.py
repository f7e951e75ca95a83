"""
Invitation component unit tests.

Tests for resolving invitation codes to companies.
"""

from __future__ import annotations

import pytest

from itr_console.components.invitation import (
    CompanyData,
    VerifyInvitationInput,
    run_verify,
)
from itr_console.domain.entities import Company
from itr_console.domain.errors import BackendError

# --- Mock Implementations ---


class MockCompanyRepo:
    """In-memory company repository for testing."""

    def __init__(self, companies: list[Company] | None = None) -> None:
        self._companies = list(companies or [])
        self.lookups: list[str] = []

    def find_by_invitation_code(self, code: str) -> list[Company]:
        self.lookups.append(code)
        return [c for c in self._companies if c.invitation_code == code]


class FailingCompanyRepo:
    """Repository whose transport is down."""

    def find_by_invitation_code(self, code: str) -> list[Company]:
        raise BackendError("connection refused", status_code=503)


@pytest.fixture
def acme() -> Company:
    return Company(id="company-acme", name="Acme Clinic", invitation_code="ACME2024")


@pytest.fixture
def repo(acme: Company) -> MockCompanyRepo:
    return MockCompanyRepo([acme])


class TestRunVerify:
    def test_valid_code_resolves_company(self, repo: MockCompanyRepo) -> None:
        out = run_verify(VerifyInvitationInput(code="ACME2024"), company_repo=repo)

        assert out.success is True
        assert out.company == CompanyData(id="company-acme", name="Acme Clinic")
        assert out.error is None

    def test_surrounding_whitespace_is_trimmed(self, repo: MockCompanyRepo) -> None:
        out = run_verify(VerifyInvitationInput(code="  ACME2024 "), company_repo=repo)

        assert out.success is True
        assert repo.lookups == ["ACME2024"]

    def test_unknown_code_is_not_found(self, repo: MockCompanyRepo) -> None:
        out = run_verify(VerifyInvitationInput(code="NOPE0000"), company_repo=repo)

        assert out.success is False
        assert out.company is None
        assert out.error_code == "not_found"
        assert out.error == "Invalid invitation code"

    @pytest.mark.parametrize("code", ["", "ACME", "ACME20245"])
    def test_wrong_length_fails_without_lookup(
        self, repo: MockCompanyRepo, code: str
    ) -> None:
        out = run_verify(VerifyInvitationInput(code=code), company_repo=repo)

        assert out.success is False
        assert out.error_code == "validation"
        assert repo.lookups == []

    def test_configured_length_is_honoured(self, acme: Company) -> None:
        repo = MockCompanyRepo([Company(name="Short", invitation_code="ABC123")])

        out = run_verify(VerifyInvitationInput(code="ABC123"), company_repo=repo, code_length=6)

        assert out.success is True
        assert out.company is not None
        assert out.company.name == "Short"

    def test_backend_failure_is_distinct_from_not_found(self) -> None:
        out = run_verify(VerifyInvitationInput(code="ACME2024"), company_repo=FailingCompanyRepo())

        assert out.success is False
        assert out.error_code == "lookup_failed"
        assert out.error == "connection refused"

    def test_duplicate_codes_are_a_lookup_failure(self, acme: Company) -> None:
        twin = Company(name="Acme Twin", invitation_code="ACME2024")
        repo = MockCompanyRepo([acme, twin])

        out = run_verify(VerifyInvitationInput(code="ACME2024"), company_repo=repo)

        assert out.success is False
        assert out.error_code == "lookup_failed"
        assert out.company is None
