"""Chat sessions: the controller between the learner, the LLM and the thread."""

from .session import ChatSession

__all__ = ["ChatSession"]
