"""
SSO log component.

Records authentication events (invitation checks, link requests, callback
outcomes) and serves the searchable log page. Recording is best effort: a
failed write is logged and never breaks the sign-in flow that produced it.
"""

import logging
from typing import Any

from itr_console.domain.entities import SsoLog
from itr_console.domain.errors import BackendError

from .models import QuerySsoInput, QuerySsoOutput, RecordSsoInput, RecordSsoOutput
from .ports import SsoLogRepoPort, TimePort

logger = logging.getLogger(__name__)


def run_record(
    inp: RecordSsoInput,
    *,
    repo: SsoLogRepoPort,
    time_port: TimePort,
) -> RecordSsoOutput:
    if not inp.event_type.strip():
        return RecordSsoOutput(success=False, error="event_type is required")

    log = SsoLog(
        event_type=inp.event_type.strip(),
        ip_address=inp.ip_address,
        user_agent=inp.user_agent,
        itr_company_id=inp.company_id,
        user_id=inp.user_id,
        metadata={k: v for k, v in inp.metadata.items() if v is not None},
        created_at=time_port.now_utc(),
    )
    try:
        repo.save(log)
    except BackendError as e:
        logger.error(f"Failed to record SSO event {log.event_type}: {e.message}")
        return RecordSsoOutput(success=False, error=e.message)

    return RecordSsoOutput(log=log, success=True)


def _matches(log: SsoLog, needle: str) -> bool:
    return any(
        needle in (value or "").lower()
        for value in (log.event_type, log.company_name, log.ip_address)
    )


def run_query(inp: QuerySsoInput, *, repo: SsoLogRepoPort) -> QuerySsoOutput:
    try:
        logs = repo.list_recent(limit=inp.limit)
    except BackendError as e:
        logger.error(f"Failed to load SSO logs: {e.message}")
        return QuerySsoOutput(success=False, error=e.message)

    needle = inp.search.strip().lower()
    if needle:
        logs = [log for log in logs if _matches(log, needle)]
    return QuerySsoOutput(logs=logs, success=True)


class SsoLogRecorder:
    """Recorder handed to the sign-in components; one per console session."""

    def __init__(
        self,
        repo: SsoLogRepoPort,
        time_port: TimePort,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ):
        self.repo = repo
        self.time_port = time_port
        self.ip_address = ip_address
        self.user_agent = user_agent

    def record(
        self,
        event_type: str,
        *,
        company_id: str | None = None,
        user_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        run_record(
            RecordSsoInput(
                event_type=event_type,
                company_id=company_id,
                user_id=user_id,
                ip_address=self.ip_address,
                user_agent=self.user_agent,
                metadata=metadata or {},
            ),
            repo=self.repo,
            time_port=self.time_port,
        )
