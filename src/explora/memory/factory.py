"""Factory for creating conversation memory backends."""

from typing import Any

from ..config import DEFAULT_MEMORY_BACKEND
from .base import ConversationMemory

MEMORY_BACKENDS = ("sqlite", "memory")


def create_conversation_memory(
    backend: str = DEFAULT_MEMORY_BACKEND,
    **kwargs: Any
) -> ConversationMemory:
    """Create a conversation memory backend.

    The default matches the CLI: conversations persist to SQLite unless
    ``memory`` is asked for explicitly.

    Args:
        backend: Backend name, case-insensitive ("sqlite" or "memory")
        **kwargs: Backend-specific configuration
            For sqlite:
                - path: str | Path (default: ./explora.db)

    Returns:
        ConversationMemory instance (not yet connected)

    Raises:
        ValueError: If backend type is not supported
    """
    name = backend.lower()

    if name == "sqlite":
        from .sqlite import SQLiteConversationMemory
        return SQLiteConversationMemory(**kwargs)

    if name == "memory":
        from .in_memory import InMemoryConversationMemory
        return InMemoryConversationMemory(**kwargs)

    raise ValueError(
        f"Unsupported memory backend: {backend}. "
        f"Supported backends: {', '.join(MEMORY_BACKENDS)}"
    )
