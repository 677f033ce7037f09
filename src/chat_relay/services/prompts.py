"""Prompt assembly for chat completions."""

from collections.abc import Sequence
from dataclasses import dataclass

from chat_relay.domain.errors import AssemblyPreconditionError
from chat_relay.domain.prompts import (
    ContentItem,
    MessageContent,
    MultimodalContent,
    PlainText,
    PromptMessage,
)
from chat_relay.domain.sessions import Message, Role

CONTEXT_HEADER = "Context information:\n\n"


@dataclass(frozen=True)
class PromptAssembler:
    """Builds the ordered message list sent to the completion provider."""

    system_prompt: str

    def assemble(
        self,
        history: Sequence[Message],
        context_snippets: Sequence[str],
        turn: MessageContent,
    ) -> list[PromptMessage]:
        """Return system prompt, context, history, then the new user turn."""
        messages = [
            PromptMessage(role=Role.SYSTEM, content=PlainText(self.system_prompt))
        ]
        if context_snippets:
            messages.append(
                PromptMessage(
                    role=Role.USER, content=PlainText(format_context(context_snippets))
                )
            )
        messages.extend(
            PromptMessage(role=message.role, content=PlainText(message.content))
            for message in history
        )
        messages.append(PromptMessage(role=Role.USER, content=turn))
        return messages


def format_context(snippets: Sequence[str]) -> str:
    """Format context snippets as a numbered block."""
    numbered = "".join(
        f"[{index}] {snippet}\n\n" for index, snippet in enumerate(snippets, start=1)
    )
    return CONTEXT_HEADER + numbered


def build_turn(
    query: str | None, content_items: Sequence[ContentItem] | None
) -> MessageContent:
    """Return the trailing user content from exactly one of the two inputs."""
    has_query = query is not None
    has_content = bool(content_items)
    if has_query == has_content:
        raise AssemblyPreconditionError(
            "Exactly one of query or content items must be supplied"
        )
    if content_items:
        return MultimodalContent(items=tuple(content_items))
    return PlainText(query)
