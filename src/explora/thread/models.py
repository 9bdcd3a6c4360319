"""Data models for conversation threads.

A thread is an append-only list of messages. Messages without a parent are
anchors; messages with a parent are replies to an anchor. ThreadGroup is the
derived (anchor, replies) pairing used for rendering and is never stored.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from uuid_extensions import uuid7


class MessageRole(str, Enum):
    """Sender of a message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


def new_message_id() -> str:
    """Generate a time-ordered message id."""
    return str(uuid7())


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class Message(BaseModel):
    """A single chat message.

    Messages are immutable once created. ``parent_id`` is unset for
    main-thread messages and set to an anchor's id for branch replies.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, use_enum_values=False)

    id: str = Field(min_length=1, description="Unique message identifier")
    role: MessageRole = Field(description="Role of the sender: user, assistant or system")
    content: str = Field(description="Text payload")
    timestamp: datetime = Field(description="Creation time")
    parent_id: str | None = Field(
        default=None,
        alias="parentId",
        description="Id of the anchor this message replies to",
    )

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    @classmethod
    def create(
        cls,
        role: MessageRole | str,
        content: str,
        parent_id: str | None = None,
    ) -> "Message":
        """Build a message with a fresh id and the current UTC time."""
        return cls(
            id=new_message_id(),
            role=MessageRole(role),
            content=content,
            timestamp=utc_now(),
            parent_id=parent_id,
        )


class ThreadGroup(BaseModel):
    """An anchor message followed by its direct replies, in insertion order."""

    anchor: Message
    replies: list[Message] = Field(default_factory=list)

    @property
    def id(self) -> str:
        return self.anchor.id

    def __len__(self) -> int:
        return 1 + len(self.replies)

    def messages(self) -> list[Message]:
        """Anchor first, then replies."""
        return [self.anchor, *self.replies]
