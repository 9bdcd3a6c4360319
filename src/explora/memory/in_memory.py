"""In-memory conversation memory backend.

Dict-based storage for session-only memory.
Data is lost when the application exits.
"""

from ..thread import Message, ThreadModel
from ..thread.models import utc_now
from .base import ConversationMemory, ConversationNotFoundError
from .models import Conversation, SessionNotes


class InMemoryConversationMemory(ConversationMemory):
    """In-memory conversation memory (session-only).

    Suitable for single-session use or testing.
    """

    def __init__(self) -> None:
        self._conversations: dict[str, Conversation] = {}
        self._threads: dict[str, ThreadModel] = {}
        self._notes: dict[str, SessionNotes] = {}

    async def connect(self) -> None:
        """Initialize memory (no-op for in-memory)."""

    async def disconnect(self) -> None:
        """Close memory (no-op for in-memory)."""

    async def create_conversation(self, title: str) -> Conversation:
        conversation = Conversation(title=title)
        self._conversations[conversation.id] = conversation
        self._threads[conversation.id] = ThreadModel()
        return conversation.model_copy()

    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        conversation = self._conversations.get(conversation_id)
        return conversation.model_copy() if conversation else None

    async def list_conversations(self, limit: int = 20) -> list[Conversation]:
        ordered = sorted(
            self._conversations.values(),
            key=lambda c: c.updated_at,
            reverse=True,
        )
        return [c.model_copy() for c in ordered[:limit]]

    async def append_message(self, conversation_id: str, message: Message) -> None:
        thread = self._thread(conversation_id)
        thread.append(message)

        conversation = self._conversations[conversation_id]
        conversation.message_count = len(thread)
        conversation.updated_at = utc_now()

    async def load_thread(self, conversation_id: str) -> ThreadModel:
        return ThreadModel.from_messages(self._thread(conversation_id))

    async def get_notes(self, conversation_id: str) -> SessionNotes:
        self._thread(conversation_id)
        notes = self._notes.get(conversation_id)
        return notes.model_copy(deep=True) if notes else SessionNotes()

    async def save_notes(self, conversation_id: str, notes: SessionNotes) -> None:
        self._thread(conversation_id)
        self._notes[conversation_id] = notes.model_copy(deep=True)

    def _thread(self, conversation_id: str) -> ThreadModel:
        try:
            return self._threads[conversation_id]
        except KeyError:
            raise ConversationNotFoundError(conversation_id) from None

    @property
    def backend_type(self) -> str:
        return "memory"
