from dataclasses import dataclass, field
from typing import Any

from itr_console.domain.entities import SsoLog


@dataclass
class RecordSsoInput:
    event_type: str
    company_id: str | None = None
    user_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class RecordSsoOutput:
    log: SsoLog | None = None
    success: bool = False
    error: str | None = None


@dataclass
class QuerySsoInput:
    search: str = ""
    limit: int = 200


@dataclass
class QuerySsoOutput:
    logs: list[SsoLog] = field(default_factory=list)
    success: bool = False
    error: str | None = None
