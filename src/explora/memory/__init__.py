"""Conversation memory module for explora.

Persists conversations, their messages and learning annotations so a chat
can be resumed, displayed or exported later.
"""

from .base import ConversationMemory, ConversationNotFoundError
from .factory import create_conversation_memory
from .models import ConfidenceLevel, Conversation, Highlight, SessionNotes

__all__ = [
    "ConfidenceLevel",
    "Conversation",
    "ConversationMemory",
    "ConversationNotFoundError",
    "Highlight",
    "SessionNotes",
    "create_conversation_memory",
]
