from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessageIn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessageIn]
    assistant_id: str | None = Field(default=None, alias="assistantId")


class ChatResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str


class ProfileOut(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    itr_company_id: str | None = None
    company: str | None = None
    role: str = "user"


class MeResponse(BaseModel):
    id: str
    email: str
    user_metadata: dict[str, Any] = Field(default_factory=dict)
    profile: ProfileOut | None = None
