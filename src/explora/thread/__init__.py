"""Conversation threading for explora.

Messages form a main thread plus one-level branch replies. ThreadModel keeps
them append-only and groups them for rendering.
"""

from .errors import DuplicateIdError, MalformedMessageError, ThreadError, UnknownMessageError
from .models import Message, MessageRole, ThreadGroup, new_message_id
from .store import ThreadModel

__all__ = [
    "DuplicateIdError",
    "MalformedMessageError",
    "Message",
    "MessageRole",
    "ThreadError",
    "ThreadGroup",
    "ThreadModel",
    "UnknownMessageError",
    "new_message_id",
]
