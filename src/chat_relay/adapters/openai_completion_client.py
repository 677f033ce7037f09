"""OpenAI-compatible Chat Completions client."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import httpx
from openai import AsyncOpenAI, OpenAIError

from chat_relay.domain.errors import ProviderError
from chat_relay.domain.prompts import (
    ContentItem,
    ContentType,
    MessageContent,
    MultimodalContent,
    PlainText,
    PromptMessage,
)
from chat_relay.services.chat import CompletionClient

logger = logging.getLogger(__name__)


@dataclass
class OpenAICompletionClient(CompletionClient):
    """Completion client backed by the Chat Completions API."""

    client: AsyncOpenAI
    model: str
    max_tokens: int = 2000

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        *,
        api_key: str,
        base_url: str,
        model: str,
        max_tokens: int,
        http_client: httpx.AsyncClient,
    ) -> "OpenAICompletionClient":
        """Create a client for any OpenAI-compatible base URL."""
        return cls(
            client=AsyncOpenAI(
                api_key=api_key, base_url=base_url, http_client=http_client
            ),
            model=model,
            max_tokens=max_tokens,
        )

    async def complete(self, messages: Sequence[PromptMessage]) -> str:
        """Send the message list and return the first choice's text."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[_serialize_message(message) for message in messages],
                max_tokens=self.max_tokens,
            )
        except OpenAIError as exc:
            logger.warning(
                "Completion request failed",
                extra={"model": self.model, "error": type(exc).__name__},
            )
            raise ProviderError(f"Completion request failed: {exc}") from exc

        if not response.choices:
            raise ProviderError("No choices returned in response")
        content = response.choices[0].message.content
        if not content:
            raise ProviderError("Completion returned an empty message")
        return content


def _serialize_message(message: PromptMessage) -> dict[str, object]:
    return {"role": message.role.value, "content": _serialize_content(message.content)}


def _serialize_content(content: MessageContent) -> str | list[dict[str, object]]:
    """Convert message content to the Chat Completions wire shape."""
    if isinstance(content, PlainText):
        return content.text
    if isinstance(content, MultimodalContent):
        return [_serialize_item(item) for item in content.items]
    raise TypeError(f"Unsupported message content: {content!r}")


def _serialize_item(item: ContentItem) -> dict[str, object]:
    if item.type is ContentType.IMAGE_URL:
        return {"type": "image_url", "image_url": {"url": item.image_url or ""}}
    return {"type": "text", "text": item.text or ""}
