"""Request and response models for the chat routes."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HistoryMessage(_CamelModel):
    """A prior message of the chat, as held by the client."""

    role: Literal["user", "assistant"]
    content: str


class ChatStreamRequest(_CamelModel):
    """Body of ``POST /api/chat/stream``.

    Accepts camelCase (``chatId``, ``newMessage``) and snake_case keys.
    """

    chat_id: str = Field(min_length=1)
    new_message: str = Field(min_length=1)
    messages: list[HistoryMessage] = Field(default_factory=list)

    @field_validator("new_message")
    @classmethod
    def _validate_new_message(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("newMessage must not be blank")
        return v


class CreateChatRequest(BaseModel):
    title: str = Field("New chat", min_length=1, max_length=255)


class ChatResponse(_CamelModel):
    id: str
    title: str
    created_at: datetime


class StoredMessageResponse(_CamelModel):
    id: str
    chat_id: str
    role: str
    content: str
    created_at: datetime
