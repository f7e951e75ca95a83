"""
Training component.
"""

from .component import run_certifications_by_level
from .models import CertificationLevel, CertificationsOutput
from .ports import CertificationRepoPort

__all__ = [
    "run_certifications_by_level",
    "CertificationLevel",
    "CertificationsOutput",
    "CertificationRepoPort",
]
