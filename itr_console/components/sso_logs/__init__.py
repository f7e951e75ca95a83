"""
SSO log component - authentication event trail.
"""

from .component import SsoLogRecorder, run_query, run_record
from .models import QuerySsoInput, QuerySsoOutput, RecordSsoInput, RecordSsoOutput
from .ports import SsoLogRepoPort, TimePort

__all__ = [
    "run_record",
    "run_query",
    "SsoLogRecorder",
    "QuerySsoInput",
    "QuerySsoOutput",
    "RecordSsoInput",
    "RecordSsoOutput",
    "SsoLogRepoPort",
    "TimePort",
]
