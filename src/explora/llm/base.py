from abc import ABC, abstractmethod
from typing import Any

from .models import ChatMessage, LLMResponse


class LLMProvider(ABC):
    """Abstract base class for the AI service answering the learner.

    Implementations hide provider-specific details:
    - API client setup and authentication
    - Request/response format conversion (e.g. where the system prompt goes)

    Supports the async context manager protocol:
        async with provider:
            response = await provider.chat_completion(messages)
    """

    @abstractmethod
    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion.

        Args:
            messages: Flattened conversation history, oldest first
            model: Model to use (None uses provider's default)
            temperature: Sampling temperature (0.0 to 2.0)
            max_tokens: Maximum tokens to generate
            **kwargs: Provider-specific parameters

        Returns:
            LLMResponse containing generated content and metadata

        Raises:
            Exception: Provider-specific errors during generation
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Default model name."""

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Close on exit.

        "Event loop is closed" errors raised by httpx during interpreter
        shutdown are ignored: https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
