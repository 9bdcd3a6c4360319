"""SQLite conversation memory backend.

Provides persistent conversation storage using a SQLite database file.
Uses aiosqlite for async access.
"""

import logging
from datetime import datetime
from pathlib import Path

import aiosqlite

from ..config import DEFAULT_MEMORY_PATH
from ..thread import DuplicateIdError, Message, MessageRole, ThreadModel
from ..thread.models import utc_now
from .base import ConversationMemory, ConversationNotFoundError
from .models import Conversation, SessionNotes

logger = logging.getLogger(__name__)


class SQLiteConversationMemory(ConversationMemory):
    """SQLite-backed conversation memory.

    Messages are stored with an autoincrement sequence column so that
    append order survives a reload regardless of timestamps.
    """

    def __init__(self, path: str | Path = DEFAULT_MEMORY_PATH):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database and create the schema if needed."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._create_schema()
        logger.debug("Opened conversation memory at %s", self._db_path)

    async def _create_schema(self) -> None:
        db = self._db
        await db.execute("""
            CREATE TABLE IF NOT EXISTS conversations (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                message_count INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                conversation_id TEXT NOT NULL,
                id TEXT NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                timestamp TEXT NOT NULL,
                parent_id TEXT,
                UNIQUE (conversation_id, id),
                FOREIGN KEY (conversation_id) REFERENCES conversations(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS notes (
                conversation_id TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                FOREIGN KEY (conversation_id) REFERENCES conversations(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_messages_conversation
            ON messages(conversation_id, seq)
        """)

        await db.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    @property
    def _db(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("SQLite memory is not connected. Call connect() first.")
        return self._connection

    async def create_conversation(self, title: str) -> Conversation:
        conversation = Conversation(title=title)
        await self._db.execute(
            """
            INSERT INTO conversations (id, title, message_count, created_at, updated_at)
            VALUES (?, ?, 0, ?, ?)
            """,
            (
                conversation.id,
                conversation.title,
                conversation.created_at.isoformat(),
                conversation.updated_at.isoformat(),
            ),
        )
        await self._db.commit()
        return conversation

    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        async with self._db.execute(
            """
            SELECT id, title, message_count, created_at, updated_at
            FROM conversations WHERE id = ?
            """,
            (conversation_id,),
        ) as cursor:
            row = await cursor.fetchone()
        return self._row_to_conversation(row) if row else None

    async def list_conversations(self, limit: int = 20) -> list[Conversation]:
        async with self._db.execute(
            """
            SELECT id, title, message_count, created_at, updated_at
            FROM conversations
            ORDER BY updated_at DESC
            LIMIT ?
            """,
            (limit,),
        ) as cursor:
            rows = await cursor.fetchall()
        return [self._row_to_conversation(row) for row in rows]

    async def append_message(self, conversation_id: str, message: Message) -> None:
        await self.require_conversation(conversation_id)

        async with self._db.execute(
            "SELECT 1 FROM messages WHERE conversation_id = ? AND id = ?",
            (conversation_id, message.id),
        ) as cursor:
            if await cursor.fetchone() is not None:
                raise DuplicateIdError(message.id)

        await self._db.execute(
            """
            INSERT INTO messages (conversation_id, id, role, content, timestamp, parent_id)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                conversation_id,
                message.id,
                message.role.value,
                message.content,
                message.timestamp.isoformat(),
                message.parent_id,
            ),
        )
        await self._db.execute(
            """
            UPDATE conversations
            SET message_count = message_count + 1, updated_at = ?
            WHERE id = ?
            """,
            (utc_now().isoformat(), conversation_id),
        )
        await self._db.commit()

    async def load_thread(self, conversation_id: str) -> ThreadModel:
        await self.require_conversation(conversation_id)

        async with self._db.execute(
            """
            SELECT id, role, content, timestamp, parent_id
            FROM messages
            WHERE conversation_id = ?
            ORDER BY seq ASC
            """,
            (conversation_id,),
        ) as cursor:
            rows = await cursor.fetchall()

        thread = ThreadModel()
        for message_id, role, content, timestamp, parent_id in rows:
            thread.append(Message(
                id=message_id,
                role=MessageRole(role),
                content=content,
                timestamp=datetime.fromisoformat(timestamp),
                parent_id=parent_id,
            ))
        return thread

    async def get_notes(self, conversation_id: str) -> SessionNotes:
        await self.require_conversation(conversation_id)

        async with self._db.execute(
            "SELECT payload FROM notes WHERE conversation_id = ?",
            (conversation_id,),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return SessionNotes()
        return SessionNotes.model_validate_json(row[0])

    async def save_notes(self, conversation_id: str, notes: SessionNotes) -> None:
        await self.require_conversation(conversation_id)

        await self._db.execute(
            """
            INSERT INTO notes (conversation_id, payload, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(conversation_id) DO UPDATE SET
                payload = excluded.payload,
                updated_at = excluded.updated_at
            """,
            (conversation_id, notes.model_dump_json(), utc_now().isoformat()),
        )
        await self._db.commit()

    @staticmethod
    def _row_to_conversation(row: tuple) -> Conversation:
        conversation_id, title, message_count, created_at, updated_at = row
        return Conversation(
            id=conversation_id,
            title=title,
            message_count=message_count,
            created_at=datetime.fromisoformat(created_at),
            updated_at=datetime.fromisoformat(updated_at),
        )

    @property
    def backend_type(self) -> str:
        return "sqlite"
