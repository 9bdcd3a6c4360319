"""Errors raised by the thread model.

All of these are validation failures surfaced synchronously to the caller.
Retrying the same call produces the same error.
"""


class ThreadError(Exception):
    """Base class for thread model errors."""


class DuplicateIdError(ThreadError, ValueError):
    """A message with the same id is already in the thread."""

    def __init__(self, message_id: str):
        self.message_id = message_id
        super().__init__(f"Message id already present in thread: {message_id!r}")


class MalformedMessageError(ThreadError, ValueError):
    """A message is missing required fields or has invalid values."""


class UnknownMessageError(ThreadError, KeyError):
    """An operation referenced a message id that is not in the thread."""

    def __init__(self, message_id: str):
        self.message_id = message_id
        super().__init__(message_id)

    def __str__(self) -> str:
        return f"No message with id {self.message_id!r} in thread"
