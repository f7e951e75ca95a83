from typing import Protocol

from itr_console.domain.notices import Notice


class NoticePort(Protocol):
    def notify(self, notice: Notice) -> None:
        """Show a transient notification to the user."""
        ...
