"""
Invitation component - resolves company invitation codes.
"""

from .component import DEFAULT_CODE_LENGTH, run_verify
from .models import (
    CompanyData,
    VerifyErrorCode,
    VerifyInvitationInput,
    VerifyInvitationOutput,
)
from .ports import CompanyRepoPort

__all__ = [
    # Entry points
    "run_verify",
    "DEFAULT_CODE_LENGTH",
    # Models
    "CompanyData",
    "VerifyErrorCode",
    "VerifyInvitationInput",
    "VerifyInvitationOutput",
    # Ports
    "CompanyRepoPort",
]
