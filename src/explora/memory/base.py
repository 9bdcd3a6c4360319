"""Abstract base class for conversation memory backends.

The abstraction hides:
- Storage format (dicts, SQLite rows)
- Persistence mechanism (process memory, database file)
- Connection management
"""

from abc import ABC, abstractmethod

from ..thread import Message, ThreadModel
from .models import Conversation, SessionNotes


class ConversationNotFoundError(KeyError):
    """No conversation with the requested id."""

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        super().__init__(conversation_id)

    def __str__(self) -> str:
        return f"Conversation not found: {self.conversation_id}"


class ConversationMemory(ABC):
    """Abstract conversation memory backend.

    Stores conversations, their messages in append order, and the learning
    annotations attached to them.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the memory backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the memory backend gracefully."""

    @abstractmethod
    async def create_conversation(self, title: str) -> Conversation:
        """Create and persist a new, empty conversation."""

    @abstractmethod
    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        """Fetch a conversation, or None if it does not exist."""

    @abstractmethod
    async def list_conversations(self, limit: int = 20) -> list[Conversation]:
        """List conversations, most recently updated first."""

    @abstractmethod
    async def append_message(self, conversation_id: str, message: Message) -> None:
        """Append a message to a conversation.

        Raises:
            ConversationNotFoundError: If the conversation does not exist
            DuplicateIdError: If the message id is already stored for it
        """

    @abstractmethod
    async def load_thread(self, conversation_id: str) -> ThreadModel:
        """Rebuild the thread of a conversation in append order.

        Raises:
            ConversationNotFoundError: If the conversation does not exist
        """

    @abstractmethod
    async def get_notes(self, conversation_id: str) -> SessionNotes:
        """Fetch the annotations of a conversation (empty if none saved)."""

    @abstractmethod
    async def save_notes(self, conversation_id: str, notes: SessionNotes) -> None:
        """Replace the annotations of a conversation."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""

    async def require_conversation(self, conversation_id: str) -> Conversation:
        """Like get_conversation, but raises if missing."""
        conversation = await self.get_conversation(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def __aenter__(self) -> "ConversationMemory":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()
