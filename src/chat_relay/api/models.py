"""Pydantic models for the HTTP API payloads."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from chat_relay.domain.prompts import ContentItem
from chat_relay.domain.sessions import Message


class ImageUrl(BaseModel):
    """Image reference inside a content part."""

    url: str


class MessageContentPart(BaseModel):
    """One part of a multimodal chat request."""

    type: Literal["text", "image_url"]
    text: str | None = None
    image_url: ImageUrl | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> "MessageContentPart":
        if self.type == "image_url" and self.image_url is None:
            raise ValueError("image_url parts require an image_url")
        if self.type == "text" and self.text is None:
            raise ValueError("text parts require text")
        return self

    def to_content_item(self) -> ContentItem:
        if self.type == "image_url" and self.image_url is not None:
            return ContentItem.from_image_url(self.image_url.url)
        return ContentItem.from_text(self.text or "")


class ChatRequest(BaseModel):
    """Chat turn request payload."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    query: str | None = None
    context: list[str] | None = None
    message_content: list[MessageContentPart] | None = Field(
        default=None, alias="messageContent"
    )


class SessionRequest(BaseModel):
    """Session management request payload."""

    action: str
    id: str | None = None


class MessagePayload(BaseModel):
    """Stored conversation message as returned to clients."""

    role: str
    content: str
    timestamp: datetime
    unanswered: bool = False

    @classmethod
    def from_message(cls, message: Message) -> "MessagePayload":
        return cls(
            role=message.role.value,
            content=message.content,
            timestamp=message.timestamp,
            unanswered=message.unanswered,
        )
