from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from itr_console.adapters.openai_assistant import OpenAIAssistantAdapter
from itr_console.api.deps import get_assistant, get_rules
from itr_console.api.schemas import ChatRequest, ChatResponse, ErrorResponse
from itr_console.components.chat import ChatInput, ChatMessage, run_relay
from itr_console.rules.models import Rules

router = APIRouter()


@router.post(
    "",
    response_model=ChatResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
def chat(
    body: ChatRequest,
    assistant: OpenAIAssistantAdapter = Depends(get_assistant),
    rules: Rules = Depends(get_rules),
) -> Any:
    """Relay a conversation to the assistant and return its reply."""
    out = run_relay(
        ChatInput(
            messages=[ChatMessage(role=m.role, content=m.content) for m in body.messages],
            assistant_id=body.assistant_id,
        ),
        assistant=assistant,
        default_assistant_id=rules.chat.default_assistant_id,
    )
    if not out.success:
        return JSONResponse(status_code=out.status_code, content={"error": out.error})
    return ChatResponse(message=out.message or "")
