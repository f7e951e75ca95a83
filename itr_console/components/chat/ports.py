from typing import Protocol

from .models import ChatMessage


class AssistantPort(Protocol):
    def reply(self, assistant_id: str, messages: list[ChatMessage]) -> str:
        """Run the assistant over the conversation. Raises ChatRelayError."""
        ...
