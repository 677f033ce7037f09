"""Domain models for chat sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Author of a conversation message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """Single stored conversation message."""

    role: Role
    content: str
    timestamp: datetime
    unanswered: bool = False


@dataclass(frozen=True)
class Session:
    """Read-only snapshot of a conversation."""

    id: str
    messages: tuple[Message, ...]
    created_at: datetime
    updated_at: datetime


class UnansweredTurnPolicy(str, Enum):
    """What happens to a recorded user turn when the provider call fails."""

    KEEP = "keep"
    ROLLBACK = "rollback"
    MARK = "mark"
