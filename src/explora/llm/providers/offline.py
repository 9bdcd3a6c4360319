"""Offline provider that answers without calling any AI service."""

from typing import Any

from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse

OFFLINE_RESPONSE = (
    "This is a placeholder response from Explora. Configure LLM_PROVIDER and "
    "an API key to get answers from an AI service."
)


class OfflineProvider(LLMProvider):
    """Returns a fixed answer. Useful for demos and local development."""

    def __init__(self, response: str = OFFLINE_RESPONSE, model: str = "offline"):
        self._response = response
        self._model = model
        self.calls = 0

    @property
    def model(self) -> str:
        return self._model

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        self.calls += 1
        return LLMResponse(content=self._response, model=model or self._model, finish_reason="stop")

    async def close(self) -> None:
        pass
