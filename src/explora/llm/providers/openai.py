import logging
from typing import Any

from openai import AsyncOpenAI

from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse

logger = logging.getLogger(__name__)


def _to_openai_messages(messages: list[ChatMessage]) -> list[dict[str, str]]:
    return [{"role": msg.role, "content": msg.content} for msg in messages]


class OpenAIProvider(LLMProvider):
    """OpenAI Chat Completions provider.

    Also serves any OpenAI-compatible endpoint through ``base_url``.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        organization: str | None = None,
        **client_kwargs: Any
    ):
        """Initialize the provider.

        Args:
            api_key: API key for the endpoint
            model: Default chat model
            base_url: Optional OpenAI-compatible base URL
            organization: Optional organization ID
            **client_kwargs: Passed through to AsyncOpenAI
        """
        self._model = model
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            **client_kwargs
        )

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
        params: dict[str, Any] = {
            "model": model or self._model,
            "messages": _to_openai_messages(messages),
            "temperature": temperature,
            **kwargs
        }
        if max_tokens is not None:
            params["max_tokens"] = max_tokens

        logger.debug("Requesting %s with %d messages", params["model"], len(messages))
        completion = await self._client.chat.completions.create(**params)
        choice = completion.choices[0]

        usage = None
        if completion.usage:
            usage = {
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
                "total_tokens": completion.usage.total_tokens
            }

        return LLMResponse(
            content=choice.message.content or "",
            model=completion.model,
            usage=usage,
            finish_reason=choice.finish_reason
        )

    async def close(self) -> None:
        await self._client.close()
