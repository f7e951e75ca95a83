"""
Chat component - assistant relay and the chat page conversation.
"""

from .component import GENERIC_ERROR, ChatConversation, run_relay
from .models import CHAT_ROLES, ChatInput, ChatMessage, ChatOutput, ChatRole
from .ports import AssistantPort

__all__ = [
    "run_relay",
    "ChatConversation",
    "GENERIC_ERROR",
    "CHAT_ROLES",
    "ChatInput",
    "ChatMessage",
    "ChatOutput",
    "ChatRole",
    "AssistantPort",
]
