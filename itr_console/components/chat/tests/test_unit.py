"""
Chat component unit tests.
"""

from __future__ import annotations

import pytest

from itr_console.components.chat import (
    ChatConversation,
    ChatInput,
    ChatMessage,
    run_relay,
)
from itr_console.domain.errors import ChatRelayError


class MockAssistant:
    def __init__(self, reply: str = "Hello! How can I help?") -> None:
        self._reply = reply
        self.calls: list[tuple[str, list[ChatMessage]]] = []
        self.error: ChatRelayError | None = None

    def reply(self, assistant_id: str, messages: list[ChatMessage]) -> str:
        self.calls.append((assistant_id, list(messages)))
        if self.error is not None:
            raise self.error
        return self._reply


@pytest.fixture
def assistant() -> MockAssistant:
    return MockAssistant()


HELLO = [ChatMessage(role="user", content="Hello")]


class TestRunRelay:
    def test_relays_conversation(self, assistant: MockAssistant) -> None:
        out = run_relay(ChatInput(messages=HELLO, assistant_id="asst_1"), assistant=assistant)

        assert out.success is True
        assert out.message == "Hello! How can I help?"
        assert assistant.calls == [("asst_1", HELLO)]

    def test_default_assistant_id(self, assistant: MockAssistant) -> None:
        run_relay(ChatInput(messages=HELLO), assistant=assistant, default_assistant_id="asst_default")

        assert assistant.calls[0][0] == "asst_default"

    @pytest.mark.parametrize(
        "messages,assistant_id",
        [
            ([], "asst_1"),
            (HELLO, None),
            ([ChatMessage(role="user", content="  ")], "asst_1"),
            ([ChatMessage(role="user", content="Hi"), ChatMessage(role="assistant", content="Hey")], "asst_1"),
        ],
    )
    def test_invalid_input_is_rejected(
        self, assistant: MockAssistant, messages: list[ChatMessage], assistant_id: str | None
    ) -> None:
        out = run_relay(ChatInput(messages=messages, assistant_id=assistant_id), assistant=assistant)

        assert out.success is False
        assert out.status_code == 400
        assert assistant.calls == []

    def test_upstream_failure(self, assistant: MockAssistant) -> None:
        assistant.error = ChatRelayError("Assistant run failed", status_code=502)

        out = run_relay(ChatInput(messages=HELLO, assistant_id="asst_1"), assistant=assistant)

        assert out.success is False
        assert out.status_code == 502
        assert out.error == "Assistant run failed"


class TestChatConversation:
    def test_history_is_sent_each_time(self, assistant: MockAssistant) -> None:
        convo = ChatConversation(assistant, assistant_id="asst_1")

        convo.send("Hello")
        convo.send("What is WEDA?")

        assert len(assistant.calls[1][1]) == 3
        assert [m.role for m in convo.messages] == ["user", "assistant", "user", "assistant"]
        assert convo.loading is False

    def test_failure_keeps_user_message(self, assistant: MockAssistant) -> None:
        assistant.error = ChatRelayError("OPENAI_API_KEY is not configured", status_code=503)
        convo = ChatConversation(assistant, assistant_id="asst_1")

        out = convo.send("Hello")

        assert out.success is False
        assert out.error == "OPENAI_API_KEY is not configured"
        assert convo.messages == [ChatMessage(role="user", content="Hello")]
        assert convo.loading is False

    def test_blank_message_is_ignored(self, assistant: MockAssistant) -> None:
        convo = ChatConversation(assistant, assistant_id="asst_1")

        out = convo.send("   ")

        assert out.success is False
        assert convo.messages == []
