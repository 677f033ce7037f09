"""Tests for the in-memory session store."""

from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta

from chat_relay.domain.sessions import Role
from chat_relay.services import sessions as sessions_module
from chat_relay.services.sessions import SessionStore


def test_create_session_returns_empty_session(session_store: SessionStore) -> None:
    session = session_store.create_session()

    assert session.messages == ()
    assert session.created_at == session.updated_at
    assert session_store.get_session(session.id) == session
    assert len(session_store) == 1


def test_created_session_ids_are_distinct(session_store: SessionStore) -> None:
    ids = {session_store.create_session().id for _ in range(500)}

    assert len(ids) == 500


def test_get_unknown_session_returns_none(session_store: SessionStore) -> None:
    session_store.create_session()

    assert session_store.get_session("not-a-session") is None
    assert session_store.get_messages("not-a-session") is None


def test_append_preserves_call_order(session_store: SessionStore) -> None:
    session = session_store.create_session()

    appended = [
        session_store.append_message(session.id, Role.USER, f"message {index}")
        for index in range(5)
    ]

    stored = session_store.get_session(session.id)
    assert stored is not None
    assert [message.content for message in stored.messages] == [
        f"message {index}" for index in range(5)
    ]
    assert list(stored.messages) == appended
    assert stored.updated_at == stored.messages[-1].timestamp
    timestamps = [message.timestamp for message in stored.messages]
    assert timestamps == sorted(timestamps)


def test_append_to_unknown_session_returns_none(session_store: SessionStore) -> None:
    assert session_store.append_message("missing", Role.USER, "hello") is None
    assert len(session_store) == 0


def test_snapshots_do_not_change_after_append(session_store: SessionStore) -> None:
    session = session_store.create_session()
    session_store.append_message(session.id, Role.USER, "first")
    snapshot = session_store.get_session(session.id)

    session_store.append_message(session.id, Role.ASSISTANT, "second")

    assert snapshot is not None
    assert len(snapshot.messages) == 1
    assert len(session_store.get_messages(session.id) or ()) == 2


def test_updated_at_never_moves_backwards(monkeypatch) -> None:
    store = SessionStore()
    session = store.create_session()
    first = store.append_message(session.id, Role.USER, "first")
    assert first is not None

    earlier = first.timestamp - timedelta(minutes=5)

    class _RewoundClock(datetime):
        @classmethod
        def now(cls, tz=None):  # type: ignore[no-untyped-def]
            return earlier

    monkeypatch.setattr(sessions_module, "datetime", _RewoundClock)
    second = store.append_message(session.id, Role.ASSISTANT, "second")

    assert second is not None
    assert second.timestamp == first.timestamp
    stored = store.get_session(session.id)
    assert stored is not None
    assert stored.updated_at >= first.timestamp
    assert stored.updated_at.tzinfo == UTC


def test_discard_message_removes_only_that_message(
    session_store: SessionStore,
) -> None:
    session = session_store.create_session()
    first = session_store.append_message(session.id, Role.USER, "same")
    second = session_store.append_message(session.id, Role.USER, "same")
    assert first is not None
    assert second is not None

    assert session_store.discard_message(session.id, second) is True
    assert session_store.discard_message(session.id, second) is False

    messages = session_store.get_messages(session.id)
    assert messages is not None
    assert len(messages) == 1
    assert messages[0] is first


def test_mark_unanswered_flags_message(session_store: SessionStore) -> None:
    session = session_store.create_session()
    message = session_store.append_message(session.id, Role.USER, "hello")
    assert message is not None

    assert session_store.mark_unanswered(session.id, message) is True

    messages = session_store.get_messages(session.id)
    assert messages is not None
    assert messages[0].unanswered is True
    assert messages[0].content == "hello"
    assert session_store.mark_unanswered("missing", message) is False


def test_concurrent_appends_are_all_recorded(session_store: SessionStore) -> None:
    session = session_store.create_session()

    def append(index: int) -> None:
        session_store.append_message(session.id, Role.USER, str(index))

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(append, range(200)))

    messages = session_store.get_messages(session.id)
    assert messages is not None
    assert sorted(int(message.content) for message in messages) == list(range(200))
    timestamps = [message.timestamp for message in messages]
    assert timestamps == sorted(timestamps)


def test_empty_store_is_truthy() -> None:
    store = SessionStore()

    assert len(store) == 0
    assert store
