"""Models for prompts sent to the completion provider."""

from dataclasses import dataclass
from enum import Enum

from chat_relay.domain.sessions import Role


class ContentType(str, Enum):
    """Kinds of multimodal content items."""

    TEXT = "text"
    IMAGE_URL = "image_url"


@dataclass(frozen=True)
class ContentItem:
    """One part of a multimodal user turn."""

    type: ContentType
    text: str | None = None
    image_url: str | None = None

    @classmethod
    def from_text(cls, text: str) -> "ContentItem":
        return cls(type=ContentType.TEXT, text=text)

    @classmethod
    def from_image_url(cls, url: str) -> "ContentItem":
        return cls(type=ContentType.IMAGE_URL, image_url=url)


@dataclass(frozen=True)
class PlainText:
    """Plain string message content."""

    text: str


@dataclass(frozen=True)
class MultimodalContent:
    """Ordered content items, passed through to the provider unchanged."""

    items: tuple[ContentItem, ...]


MessageContent = PlainText | MultimodalContent


@dataclass(frozen=True)
class PromptMessage:
    """Message in the list handed to the completion provider."""

    role: Role
    content: MessageContent
