"""Data models for conversation memory.

These models describe what is persisted for a conversation besides its
messages, independent of the storage backend used.
"""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from ..thread.models import utc_now


class Conversation(BaseModel):
    """A stored conversation."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str = Field(description="Human readable title")
    message_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ConfidenceLevel(str, Enum):
    """How sure the learner feels about an answer."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Highlight(BaseModel):
    """A span of a message the learner highlighted to start a branch.

    ``start_index``/``end_index`` are a half-open character range into the
    highlighted message's content.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    message_id: str = Field(description="Message the text was highlighted in")
    text: str = Field(description="The highlighted text")
    start_index: int = Field(ge=0)
    end_index: int = Field(ge=1)
    branch_id: str | None = Field(
        default=None,
        description="Anchor message created for the branch"
    )
    created_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_range(self) -> "Highlight":
        if self.end_index <= self.start_index:
            raise ValueError("end_index must be > start_index")
        return self


class SessionNotes(BaseModel):
    """Learning annotations for one conversation.

    Pinned ids keep pin order. Annotations reference messages by id and
    never modify the messages themselves.
    """

    pinned: list[str] = Field(default_factory=list, description="Pinned message ids, in pin order")
    confidence: dict[str, ConfidenceLevel] = Field(default_factory=dict)
    highlights: list[Highlight] = Field(default_factory=list)

    def is_pinned(self, message_id: str) -> bool:
        return message_id in self.pinned
