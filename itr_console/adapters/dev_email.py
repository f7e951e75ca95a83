"""
Dev email adapter.

Logs emails instead of sending them. In local mode this is how sign-in links
reach the developer: the link is printed to the log and kept in memory so
tests can pick it up.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from itr_console.ports.email import EmailResult, EmailStatus

logger = logging.getLogger(__name__)

_LINK_RE = re.compile(r"https?://[^\s\"'<>]+")


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    logged_at: datetime

    @property
    def links(self) -> list[str]:
        return _LINK_RE.findall(self.body_text or self.body_html)


@dataclass
class DevEmailAdapter:
    sent_emails: list[SentEmail] = field(default_factory=list)
    log_level: int = logging.INFO

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        message_id = f"dev-{uuid4().hex[:12]}"
        sent = SentEmail(
            id=message_id,
            recipient=recipient,
            subject=subject,
            body_html=body_html,
            body_text=body_text or "",
            logged_at=datetime.now(UTC),
        )
        self.sent_emails.append(sent)

        parts = [f"EMAIL (dev): To={recipient}", f"Subject={subject}"]
        if sent.links:
            parts.append(f"Link={sent.links[0]}")
        parts.append(f"MessageID={message_id}")
        logger.log(self.log_level, ", ".join(parts))

        return EmailResult(
            status=EmailStatus.SKIPPED,
            message_id=message_id,
            recipient=recipient,
            error="Dev mode - email logged, not sent",
        )

    # --- Test Helper Methods ---

    def get_last_email(self) -> SentEmail | None:
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        self.sent_emails.clear()
