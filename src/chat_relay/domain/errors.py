"""Error taxonomy for chat handling."""


class ChatRelayError(Exception):
    """Base class for chat relay failures."""


class SessionNotFoundError(ChatRelayError):
    """Raised when a chat turn references an unknown session id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class ProviderError(ChatRelayError):
    """Raised when the completion provider call fails."""


class AssemblyPreconditionError(ChatRelayError, ValueError):
    """Raised when a turn has both or neither of a query and content items."""
