"""Training component - certification catalogue grouped by level."""

import logging
from itertools import groupby

from itr_console.domain.errors import BackendError

from .models import CertificationLevel, CertificationsOutput
from .ports import CertificationRepoPort

logger = logging.getLogger(__name__)


def run_certifications_by_level(*, repo: CertificationRepoPort) -> CertificationsOutput:
    try:
        certs = repo.list_all()
    except BackendError as e:
        logger.error(f"Failed to load certifications: {e.message}")
        return CertificationsOutput(success=False, error=e.message)

    ordered = sorted(certs, key=lambda c: (c.level, c.product_name or "", c.name))
    levels = [
        CertificationLevel(level=level, certifications=list(group))
        for level, group in groupby(ordered, key=lambda c: c.level)
    ]
    return CertificationsOutput(levels=levels, success=True)
