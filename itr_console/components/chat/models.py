from dataclasses import dataclass, field
from typing import Literal

ChatRole = Literal["user", "assistant"]
CHAT_ROLES: tuple[str, ...] = ("user", "assistant")


@dataclass(frozen=True)
class ChatMessage:
    role: ChatRole
    content: str


@dataclass
class ChatInput:
    messages: list[ChatMessage]
    assistant_id: str | None = None


@dataclass
class ChatOutput:
    message: str | None = None
    success: bool = False
    error: str | None = None
    status_code: int = 200
