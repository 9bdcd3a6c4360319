"""Append-only message store with grouped views.

ThreadModel holds the messages of one conversation in insertion order and
produces ThreadGroups for rendering. It performs no I/O and never blocks.
Each session owns its own instance.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from .errors import DuplicateIdError, MalformedMessageError, UnknownMessageError
from .models import Message, ThreadGroup

logger = logging.getLogger(__name__)


class ThreadModel:
    """Ordered, append-only collection of messages.

    Grouping rules:
    - a message without ``parent_id`` starts a new group as its anchor
    - a message whose ``parent_id`` names an anchor already seen joins
      that anchor's replies
    - any other message (parent unseen, or parent is itself a reply) is
      promoted to an anchor of its own
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._by_id: dict[str, Message] = {}

    @classmethod
    def from_messages(cls, messages: Iterable[Message | Mapping[str, Any]]) -> "ThreadModel":
        """Build a thread by appending ``messages`` in order."""
        thread = cls()
        for message in messages:
            thread.append(message)
        return thread

    def append(self, message: Message | Mapping[str, Any]) -> Message:
        """Append a message to the end of the thread.

        Args:
            message: A Message, or a mapping with id, role, content,
                timestamp and optional parent_id/parentId

        Returns:
            The stored Message

        Raises:
            MalformedMessageError: If required fields are missing or invalid
            DuplicateIdError: If a message with the same id is already stored
        """
        if not isinstance(message, Message):
            try:
                message = Message.model_validate(message)
            except ValidationError as e:
                raise MalformedMessageError(f"Invalid message: {e}") from e

        if message.id in self._by_id:
            raise DuplicateIdError(message.id)

        self._messages.append(message)
        self._by_id[message.id] = message
        return message

    def group(self) -> list[ThreadGroup]:
        """Group messages into anchors and their direct replies.

        Single pass in insertion order. Groups come out in the order their
        anchors were first appended.
        """
        groups: list[ThreadGroup] = []
        index: dict[str, int] = {}

        for message in self._messages:
            if message.parent_id is not None:
                position = index.get(message.parent_id)
                if position is not None:
                    groups[position].replies.append(message)
                    continue
                logger.debug(
                    "Promoting orphan reply %s (parent %s not an anchor)",
                    message.id,
                    message.parent_id,
                )

            index[message.id] = len(groups)
            groups.append(ThreadGroup(anchor=message))

        return groups

    def orphans(self) -> list[str]:
        """Ids of replies that were promoted to anchors by ``group()``."""
        anchors: set[str] = set()
        promoted: list[str] = []
        for message in self._messages:
            if message.parent_id is None:
                anchors.add(message.id)
            elif message.parent_id not in anchors:
                anchors.add(message.id)
                promoted.append(message.id)
        return promoted

    def get(self, message_id: str) -> Message:
        """Look up a message by id.

        Raises:
            UnknownMessageError: If no message has this id
        """
        try:
            return self._by_id[message_id]
        except KeyError:
            raise UnknownMessageError(message_id) from None

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of all messages in insertion order."""
        return tuple(self._messages)

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._by_id

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __repr__(self) -> str:
        return f"ThreadModel(messages={len(self._messages)})"
