"""Chat turn orchestration around the completion provider."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from chat_relay.domain.errors import ProviderError, SessionNotFoundError
from chat_relay.domain.prompts import ContentItem, PromptMessage
from chat_relay.domain.sessions import (
    Message,
    Role,
    Session,
    UnansweredTurnPolicy,
)
from chat_relay.services.prompts import PromptAssembler, build_turn
from chat_relay.services.sessions import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MARKER = "[with image]"


class CompletionClient(Protocol):
    """Interface for chat completion providers."""

    async def complete(self, messages: Sequence[PromptMessage]) -> str:
        """Return the reply text, raising ProviderError on failure."""


@dataclass(frozen=True)
class ChatReply:
    """Assistant reply for a single chat turn."""

    session_id: str
    text: str


@dataclass
class ChatService:
    """Runs one chat turn: record, assemble, complete, record reply."""

    session_store: SessionStore
    completion_client: CompletionClient
    assembler: PromptAssembler
    image_marker: str = DEFAULT_IMAGE_MARKER
    unanswered_turn_policy: UnansweredTurnPolicy = UnansweredTurnPolicy.KEEP
    timeout_seconds: float | None = 60.0

    def create_session(self) -> Session:
        """Create a new empty conversation."""
        return self.session_store.create_session()

    async def respond(
        self,
        session_id: str,
        query: str,
        context_snippets: Sequence[str] = (),
        content_items: Sequence[ContentItem] | None = None,
    ) -> ChatReply:
        """Answer a user turn in the given session.

        The user turn is recorded before the provider is called. When the
        provider fails no assistant message is recorded and the user turn is
        settled according to ``unanswered_turn_policy``.
        """
        session = self.session_store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        turn = build_turn(None if content_items else query, content_items)
        stored_text = f"{query} {self.image_marker}" if content_items else query
        user_message = self.session_store.append_message(
            session_id, Role.USER, stored_text
        )
        if user_message is None:
            raise SessionNotFoundError(session_id)

        # History is the snapshot taken before the user turn was recorded.
        messages = self.assembler.assemble(session.messages, context_snippets, turn)
        logger.info(
            "Requesting completion",
            extra={
                "session_id": session_id,
                "message_count": len(messages),
                "multimodal": bool(content_items),
            },
        )
        try:
            reply = await self._complete(messages)
        except BaseException:
            self._settle_unanswered_turn(session_id, user_message)
            raise

        assistant_message = self.session_store.append_message(
            session_id, Role.ASSISTANT, reply
        )
        if assistant_message is None:
            logger.warning(
                "Session vanished before the reply was recorded",
                extra={"session_id": session_id},
            )
        return ChatReply(session_id=session_id, text=reply)

    async def _complete(self, messages: list[PromptMessage]) -> str:
        try:
            return await asyncio.wait_for(
                self.completion_client.complete(messages),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            raise ProviderError(
                f"Completion timed out after {self.timeout_seconds} seconds"
            ) from exc

    def _settle_unanswered_turn(self, session_id: str, message: Message) -> None:
        if self.unanswered_turn_policy is UnansweredTurnPolicy.ROLLBACK:
            self.session_store.discard_message(session_id, message)
        elif self.unanswered_turn_policy is UnansweredTurnPolicy.MARK:
            self.session_store.mark_unanswered(session_id, message)
