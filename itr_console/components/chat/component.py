"""
Chat relay component.

Validates a conversation and forwards it to the configured assistant. Used by
the POST /api/chat endpoint and by the console chat page.
"""

import logging
from threading import Lock

from itr_console.domain.errors import ChatRelayError

from .models import CHAT_ROLES, ChatInput, ChatMessage, ChatOutput
from .ports import AssistantPort

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An error occurred while contacting the assistant."


def _validate(inp: ChatInput, assistant_id: str | None) -> str | None:
    if not assistant_id:
        return "assistantId is required"
    if not inp.messages:
        return "messages must not be empty"
    for msg in inp.messages:
        if msg.role not in CHAT_ROLES:
            return f"Unsupported role: {msg.role}"
        if not msg.content.strip():
            return "Message content must not be empty"
    if inp.messages[-1].role != "user":
        return "The last message must come from the user"
    return None


def run_relay(
    inp: ChatInput,
    *,
    assistant: AssistantPort,
    default_assistant_id: str | None = None,
) -> ChatOutput:
    assistant_id = inp.assistant_id or default_assistant_id
    problem = _validate(inp, assistant_id)
    if problem:
        return ChatOutput(success=False, error=problem, status_code=400)

    try:
        reply = assistant.reply(assistant_id, inp.messages)  # type: ignore[arg-type]
    except ChatRelayError as e:
        logger.error(f"Assistant relay failed ({e.status_code}): {e.message}")
        return ChatOutput(success=False, error=e.message, status_code=e.status_code)

    logger.info(f"Assistant replied ({len(inp.messages)} messages in conversation)")
    return ChatOutput(message=reply, success=True)


class ChatConversation:
    """Conversation held by the chat page. Each send relays the whole history."""

    def __init__(self, assistant: AssistantPort, assistant_id: str | None = None):
        self.assistant = assistant
        self.assistant_id = assistant_id
        self.messages: list[ChatMessage] = []
        self.loading = False
        self._lock = Lock()

    def send(self, text: str) -> ChatOutput:
        text = text.strip()
        if not text:
            return ChatOutput(success=False, error="Message content must not be empty", status_code=400)

        with self._lock:
            if self.loading:
                return ChatOutput(success=False, error="A reply is already on its way", status_code=409)
            self.loading = True
            self.messages.append(ChatMessage(role="user", content=text))
            history = list(self.messages)

        try:
            out = run_relay(
                ChatInput(messages=history, assistant_id=self.assistant_id),
                assistant=self.assistant,
            )
        finally:
            with self._lock:
                self.loading = False

        if out.success and out.message is not None:
            with self._lock:
                self.messages.append(ChatMessage(role="assistant", content=out.message))
        elif out.error is None:
            out.error = GENERIC_ERROR
        return out
