"""Pytest configuration and shared fixtures."""
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from explora.llm import ChatMessage, LLMProvider, LLMResponse
from explora.memory import create_conversation_memory
from explora.thread import Message, MessageRole

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_message(
    message_id: str,
    role: str = "user",
    content: str | None = None,
    parent_id: str | None = None,
    offset: int = 0,
) -> Message:
    """Build a message with a deterministic id and timestamp."""
    return Message(
        id=message_id,
        role=MessageRole(role),
        content=content if content is not None else f"message {message_id}",
        timestamp=BASE_TIME + timedelta(seconds=offset),
        parent_id=parent_id,
    )


class ScriptedLLM(LLMProvider):
    """Records every request and answers with queued replies."""

    def __init__(self, replies: list[str] | None = None, error: Exception | None = None):
        self.replies = list(replies or [])
        self.error = error
        self.requests: list[list[ChatMessage]] = []
        self.closed = False

    @property
    def model(self) -> str:
        return "scripted"

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        self.requests.append(list(messages))
        if self.error is not None:
            raise self.error
        content = self.replies.pop(0) if self.replies else f"answer {len(self.requests)}"
        return LLMResponse(content=content, model=self.model)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def llm():
    """LLM that answers 'answer N' for the N-th request."""
    return ScriptedLLM()


@pytest.fixture
def failing_llm():
    """LLM whose every request fails."""
    return ScriptedLLM(error=RuntimeError("service unavailable"))


@pytest.fixture
async def memory():
    """Connected in-memory backend."""
    backend = create_conversation_memory("memory")
    await backend.connect()
    yield backend
    await backend.disconnect()


@pytest.fixture(params=["memory", "sqlite"])
async def backend(request, tmp_path):
    """Each memory backend, connected."""
    kwargs = {"path": tmp_path / "explora.db"} if request.param == "sqlite" else {}
    backend = create_conversation_memory(request.param, **kwargs)
    await backend.connect()
    yield backend
    await backend.disconnect()
