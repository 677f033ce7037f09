"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from chat_relay.api.models import ChatRequest, MessagePayload, SessionRequest
from chat_relay.app_logging import configure_logging
from chat_relay.config import parse_allowed_origins
from chat_relay.containers import AppContainer
from chat_relay.domain.errors import (
    AssemblyPreconditionError,
    ProviderError,
    SessionNotFoundError,
)
from chat_relay.services.prompts import build_turn


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    allowed_origins = parse_allowed_origins(container.settings.cors_allowed_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or [],
        allow_origin_regex=None if allowed_origins else ".*",
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/session")
    async def session(payload: SessionRequest, request: Request) -> dict[str, object]:
        """Create a session or return an existing session's history."""
        state_container: AppContainer = request.app.state.container
        if payload.action == "create":
            created = state_container.chat_service.create_session()
            return {"id": created.id}
        if payload.action == "get":
            existing = state_container.session_store.get_session(payload.id or "")
            if existing is None:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND, detail="Session not found"
                )
            return {
                "id": existing.id,
                "messages": [
                    MessagePayload.from_message(message).model_dump(mode="json")
                    for message in existing.messages
                ],
            }
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid action"
        )

    @app.post("/api/chat")
    async def chat(payload: ChatRequest, request: Request) -> dict[str, str]:
        """Answer a chat turn within an existing session."""
        state_container: AppContainer = request.app.state.container
        content_items = [
            part.to_content_item() for part in payload.message_content or []
        ]
        try:
            build_turn(None if content_items else payload.query, content_items)
        except AssemblyPreconditionError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A query or messageContent is required",
            ) from exc
        try:
            reply = await state_container.chat_service.respond(
                payload.session_id,
                payload.query or "",
                payload.context or [],
                content_items or None,
            )
        except SessionNotFoundError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid session"
            ) from exc
        except ProviderError as exc:
            logger.exception(
                "Completion failed", extra={"session_id": payload.session_id}
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=_format_provider_error(state_container, exc),
            ) from exc
        return {"sessionId": reply.session_id, "response": reply.text}

    static_dir = container.settings.static_dir
    if static_dir and Path(static_dir).is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="frontend")

    return app


def _format_provider_error(state_container: AppContainer, exc: Exception) -> str:
    """Return a client-facing provider error with local debug info."""
    fallback = "Error generating response"
    if state_container.settings.environment == "local":
        detail = str(exc).strip()
        if detail:
            return f"{fallback}: {detail}"
    return fallback
