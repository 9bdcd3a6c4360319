"""
Explora: conversational learning with threaded chats.

Messages form a main thread plus branch replies spawned from highlighted
text. Learners pin insights, tag their confidence, and export a learning
guide of the conversation.
"""

__version__ = "0.1.0"

from .chat import ChatSession
from .thread import (
    DuplicateIdError,
    MalformedMessageError,
    Message,
    MessageRole,
    ThreadGroup,
    ThreadModel,
)

__all__ = [
    "ChatSession",
    "DuplicateIdError",
    "MalformedMessageError",
    "Message",
    "MessageRole",
    "ThreadGroup",
    "ThreadModel",
]
