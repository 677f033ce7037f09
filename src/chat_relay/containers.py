"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from chat_relay.adapters.openai_completion_client import OpenAICompletionClient
from chat_relay.config import Settings
from chat_relay.services.chat import ChatService, CompletionClient
from chat_relay.services.prompts import PromptAssembler
from chat_relay.services.sessions import SessionStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_store: SessionStore
    completion_client: CompletionClient
    chat_service: ChatService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    session_store = SessionStore()
    http_client = httpx.AsyncClient(timeout=resolved_settings.llm_timeout_seconds)
    completion_client = OpenAICompletionClient.create(
        api_key=resolved_settings.llm_api_key,
        base_url=resolved_settings.llm_base_url,
        model=resolved_settings.llm_model,
        max_tokens=resolved_settings.llm_max_tokens,
        http_client=http_client,
    )
    chat_service = ChatService(
        session_store=session_store,
        completion_client=completion_client,
        assembler=PromptAssembler(resolved_settings.system_prompt),
        image_marker=resolved_settings.image_marker,
        unanswered_turn_policy=resolved_settings.unanswered_turn_policy,
        timeout_seconds=resolved_settings.llm_timeout_seconds,
    )

    async def close_resources() -> None:
        await http_client.aclose()

    return AppContainer(
        settings=resolved_settings,
        session_store=session_store,
        completion_client=completion_client,
        chat_service=chat_service,
        close_resources=close_resources,
    )
