"""Shared test fixtures."""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from chat_relay.config import Settings
from chat_relay.containers import AppContainer
from chat_relay.domain.errors import ProviderError
from chat_relay.domain.prompts import PromptMessage
from chat_relay.services.chat import ChatService, CompletionClient
from chat_relay.services.prompts import PromptAssembler
from chat_relay.services.sessions import SessionStore

SYSTEM_PROMPT = "You are a test assistant."


@dataclass
class FakeCompletionClient(CompletionClient):
    """Fake completion client returning a fixed reply."""

    reply: str = "Hi there"
    calls: list[list[PromptMessage]] = field(default_factory=list)

    async def complete(self, messages: Sequence[PromptMessage]) -> str:
        self.calls.append(list(messages))
        return self.reply


@dataclass
class FailingCompletionClient(CompletionClient):
    """Fake completion client that always fails."""

    message: str = "API error: upstream unavailable, status code: 503"
    calls: int = 0

    async def complete(self, messages: Sequence[PromptMessage]) -> str:
        self.calls += 1
        raise ProviderError(self.message)


@dataclass
class SlowCompletionClient(CompletionClient):
    """Fake completion client that never answers in time."""

    delay_seconds: float = 5.0

    async def complete(self, messages: Sequence[PromptMessage]) -> str:
        await asyncio.sleep(self.delay_seconds)
        return "too late"


def build_chat_service(
    completion_client: CompletionClient | None = None,
    session_store: SessionStore | None = None,
    **kwargs: object,
) -> ChatService:
    if session_store is None:
        session_store = SessionStore()
    if completion_client is None:
        completion_client = FakeCompletionClient()
    return ChatService(
        session_store=session_store,
        completion_client=completion_client,
        assembler=PromptAssembler(SYSTEM_PROMPT),
        **kwargs,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        llm_api_key="llm-key",
        llm_base_url="https://llm.test/v1",
        system_prompt=SYSTEM_PROMPT,
        environment="test",
    )


@pytest.fixture
def session_store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def container(
    settings: Settings,
    session_store: SessionStore,
    completion_client: FakeCompletionClient,
) -> AppContainer:
    chat_service = build_chat_service(
        completion_client=completion_client,
        session_store=session_store,
        image_marker=settings.image_marker,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session_store=session_store,
        completion_client=completion_client,
        chat_service=chat_service,
        close_resources=close_resources,
    )
