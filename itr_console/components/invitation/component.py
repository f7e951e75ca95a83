"""
Invitation verifier.

Resolves an invitation code to exactly one company. A code that matches no
company is reported as not_found; a failing lookup is reported separately as
lookup_failed so the UI can tell "wrong code" from "backend down".
"""

import logging

from itr_console.domain.errors import BackendError

from .models import CompanyData, VerifyInvitationInput, VerifyInvitationOutput
from .ports import CompanyRepoPort

logger = logging.getLogger(__name__)

DEFAULT_CODE_LENGTH = 8


def _mask(code: str) -> str:
    return f"{code[:2]}***" if code else "<empty>"


def run_verify(
    inp: VerifyInvitationInput,
    *,
    company_repo: CompanyRepoPort,
    code_length: int = DEFAULT_CODE_LENGTH,
) -> VerifyInvitationOutput:
    code = inp.code.strip()

    if len(code) != code_length:
        return VerifyInvitationOutput(
            success=False,
            error=f"Invitation code must be {code_length} characters",
            error_code="validation",
        )

    try:
        matches = company_repo.find_by_invitation_code(code)
    except BackendError as e:
        logger.error(f"Invitation lookup failed for {_mask(code)}: {e.message}")
        return VerifyInvitationOutput(success=False, error=e.message, error_code="lookup_failed")

    if not matches:
        logger.warning(f"Unknown invitation code {_mask(code)}")
        return VerifyInvitationOutput(
            success=False, error="Invalid invitation code", error_code="not_found"
        )

    if len(matches) > 1:
        logger.error(f"Invitation code {_mask(code)} matches {len(matches)} companies")
        return VerifyInvitationOutput(
            success=False,
            error="Invitation code is ambiguous, contact your administrator",
            error_code="lookup_failed",
        )

    company = matches[0]
    logger.info(f"Invitation code resolved to company {company.id}")
    return VerifyInvitationOutput(
        company=CompanyData(id=company.id, name=company.name), success=True
    )
