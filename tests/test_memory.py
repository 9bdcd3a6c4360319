"""Tests for conversation memory backends."""
import pytest

from explora.memory import (
    ConfidenceLevel,
    ConversationMemory,
    ConversationNotFoundError,
    Highlight,
    SessionNotes,
    create_conversation_memory,
)
from explora.memory.in_memory import InMemoryConversationMemory
from explora.memory.sqlite import SQLiteConversationMemory
from explora.thread import DuplicateIdError

from .conftest import make_message


class TestMemoryInterface:
    """Tests for the abstract interface and factory."""

    def test_memory_is_abstract(self):
        """Test that ConversationMemory cannot be instantiated directly."""
        with pytest.raises(TypeError):
            ConversationMemory()  # type: ignore

    def test_factory_backends(self, tmp_path):
        """Test that the factory returns the requested backend."""
        assert isinstance(create_conversation_memory("memory"), InMemoryConversationMemory)
        sqlite = create_conversation_memory("sqlite", path=tmp_path / "db.sqlite")
        assert isinstance(sqlite, SQLiteConversationMemory)
        assert sqlite.backend_type == "sqlite"

    def test_factory_default_is_sqlite(self, tmp_path):
        """Test that the default backend matches the CLI default."""
        memory = create_conversation_memory(path=tmp_path / "db.sqlite")

        assert isinstance(memory, SQLiteConversationMemory)
        assert isinstance(create_conversation_memory("MEMORY"), InMemoryConversationMemory)

    def test_factory_unknown_backend(self):
        """Test that an unknown backend raises ValueError."""
        with pytest.raises(ValueError, match="Unsupported memory backend"):
            create_conversation_memory("redis")


class TestConversations:
    """Tests shared by all backends."""

    async def test_create_and_get(self, backend):
        """Test creating and fetching a conversation."""
        created = await backend.create_conversation("Inflation")

        fetched = await backend.get_conversation(created.id)

        assert fetched.id == created.id
        assert fetched.title == "Inflation"
        assert fetched.message_count == 0

    async def test_get_missing(self, backend):
        """Test that a missing conversation returns None."""
        assert await backend.get_conversation("missing") is None
        with pytest.raises(ConversationNotFoundError):
            await backend.require_conversation("missing")

    async def test_list_most_recent_first(self, backend):
        """Test that listing orders by last update."""
        first = await backend.create_conversation("first")
        second = await backend.create_conversation("second")
        await backend.append_message(first.id, make_message("1"))

        listed = await backend.list_conversations()

        assert [c.id for c in listed] == [first.id, second.id]
        assert listed[0].message_count == 1
        assert len(await backend.list_conversations(limit=1)) == 1

    async def test_thread_round_trip(self, backend):
        """Test that a reloaded thread groups like the original."""
        conversation = await backend.create_conversation("Inflation")
        messages = [
            make_message("1", "user", "What is inflation?", offset=0),
            make_message("2", "assistant", "Rising prices.", offset=1),
            make_message("3", "user", "tell me more", parent_id="1", offset=2),
            make_message("4", "assistant", "Sure.", parent_id="1", offset=3),
            make_message("5", "user", "orphan", parent_id="gone", offset=4),
        ]
        for message in messages:
            await backend.append_message(conversation.id, message)

        thread = await backend.load_thread(conversation.id)

        assert list(thread) == messages
        assert [(g.anchor.id, [r.id for r in g.replies]) for g in thread.group()] == [
            ("1", ["3", "4"]),
            ("2", []),
            ("5", []),
        ]

    async def test_append_order_beats_timestamps(self, backend):
        """Test that reload follows append order, not timestamp order."""
        conversation = await backend.create_conversation("t")
        await backend.append_message(conversation.id, make_message("late", offset=10))
        await backend.append_message(conversation.id, make_message("early", offset=0))

        thread = await backend.load_thread(conversation.id)

        assert [m.id for m in thread] == ["late", "early"]

    async def test_duplicate_message_id(self, backend):
        """Test that a duplicate id in one conversation raises."""
        conversation = await backend.create_conversation("t")
        await backend.append_message(conversation.id, make_message("1"))

        with pytest.raises(DuplicateIdError):
            await backend.append_message(conversation.id, make_message("1"))

        assert len(await backend.load_thread(conversation.id)) == 1

    async def test_same_id_in_different_conversations(self, backend):
        """Test that conversations are isolated from each other."""
        a = await backend.create_conversation("a")
        b = await backend.create_conversation("b")

        await backend.append_message(a.id, make_message("1"))
        await backend.append_message(b.id, make_message("1"))

        assert len(await backend.load_thread(a.id)) == 1
        assert len(await backend.load_thread(b.id)) == 1

    async def test_append_to_missing_conversation(self, backend):
        """Test that appending to an unknown conversation raises."""
        with pytest.raises(ConversationNotFoundError):
            await backend.append_message("missing", make_message("1"))
        with pytest.raises(ConversationNotFoundError):
            await backend.load_thread("missing")

    async def test_notes_round_trip(self, backend):
        """Test saving and loading annotations."""
        conversation = await backend.create_conversation("t")
        assert await backend.get_notes(conversation.id) == SessionNotes()

        notes = SessionNotes(
            pinned=["2", "1"],
            confidence={"2": ConfidenceLevel.LOW},
            highlights=[Highlight(message_id="2", text="prices", start_index=7, end_index=13, branch_id="9")],
        )
        await backend.save_notes(conversation.id, notes)
        notes.pinned.append("3")
        await backend.save_notes(conversation.id, notes)

        loaded = await backend.get_notes(conversation.id)

        assert loaded == notes
        assert loaded.pinned == ["2", "1", "3"]


class TestSQLitePersistence:
    """SQLite-specific behaviour."""

    async def test_data_survives_reconnect(self, tmp_path):
        """Test that a new connection sees earlier writes."""
        path = tmp_path / "explora.db"
        async with create_conversation_memory("sqlite", path=path) as memory:
            conversation = await memory.create_conversation("persisted")
            await memory.append_message(conversation.id, make_message("1"))
            await memory.append_message(conversation.id, make_message("2", parent_id="1"))

        async with create_conversation_memory("sqlite", path=path) as memory:
            thread = await memory.load_thread(conversation.id)
            stored = await memory.get_conversation(conversation.id)

        assert [(g.anchor.id, [r.id for r in g.replies]) for g in thread.group()] == [("1", ["2"])]
        assert stored.message_count == 2

    async def test_requires_connect(self, tmp_path):
        """Test that using the backend before connect raises."""
        memory = SQLiteConversationMemory(path=tmp_path / "explora.db")

        with pytest.raises(RuntimeError, match="not connected"):
            await memory.create_conversation("t")


class TestHighlightModel:
    """Tests for the Highlight model."""

    def test_range_must_be_non_empty(self):
        """Test that end_index must exceed start_index."""
        with pytest.raises(ValueError):
            Highlight(message_id="1", text="x", start_index=3, end_index=3)
