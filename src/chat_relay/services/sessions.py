"""In-memory conversation session registry."""

import logging
import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import uuid4

from chat_relay.domain.sessions import Message, Role, Session

logger = logging.getLogger(__name__)


@dataclass
class _SessionState:
    id: str
    messages: tuple[Message, ...]
    created_at: datetime
    updated_at: datetime

    def snapshot(self) -> Session:
        return Session(
            id=self.id,
            messages=self.messages,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class SessionStore:
    """Thread-safe registry of session ids to conversation histories.

    A single lock guards the registry and every message list. Message lists
    are immutable tuples replaced on each mutation, so snapshots returned to
    callers never change after the fact.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, _SessionState] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __bool__(self) -> bool:
        # An empty store is still a store.
        return True

    def create_session(self) -> Session:
        """Register a new empty session with a random id and return it."""
        now = datetime.now(tz=UTC)
        with self._lock:
            session_id = str(uuid4())
            while session_id in self._sessions:
                session_id = str(uuid4())
            state = _SessionState(
                id=session_id, messages=(), created_at=now, updated_at=now
            )
            self._sessions[session_id] = state
        logger.info("Created session", extra={"session_id": session_id})
        return state.snapshot()

    def get_session(self, session_id: str) -> Session | None:
        """Return a snapshot of the session, if present."""
        with self._lock:
            state = self._sessions.get(session_id)
            return state.snapshot() if state else None

    def get_messages(self, session_id: str) -> tuple[Message, ...] | None:
        """Return the session's messages, if the session exists."""
        with self._lock:
            state = self._sessions.get(session_id)
            return state.messages if state else None

    def append_message(
        self, session_id: str, role: Role, content: str
    ) -> Message | None:
        """Append a message and return it, or None for an unknown session."""
        with self._lock:
            state = self._sessions.get(session_id)
            if state is None:
                return None
            # Clamp to the last update so updated_at never moves backwards.
            timestamp = max(datetime.now(tz=UTC), state.updated_at)
            message = Message(role=role, content=content, timestamp=timestamp)
            state.messages = (*state.messages, message)
            state.updated_at = timestamp
            return message

    def discard_message(self, session_id: str, message: Message) -> bool:
        """Remove exactly this message object from the session."""
        with self._lock:
            state = self._sessions.get(session_id)
            if state is None:
                return False
            kept = tuple(item for item in state.messages if item is not message)
            if len(kept) == len(state.messages):
                return False
            state.messages = kept
            return True

    def mark_unanswered(self, session_id: str, message: Message) -> bool:
        """Replace exactly this message object with an unanswered copy."""
        with self._lock:
            state = self._sessions.get(session_id)
            if state is None:
                return False
            for index, item in enumerate(state.messages):
                if item is message:
                    marked = replace(item, unanswered=True)
                    state.messages = (
                        *state.messages[:index],
                        marked,
                        *state.messages[index + 1 :],
                    )
                    return True
            return False
