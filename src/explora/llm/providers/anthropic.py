"""Anthropic Claude provider.

Uses the official Anthropic Python SDK.
Reference: https://github.com/anthropics/anthropic-sdk-python
"""

import logging
from typing import Any

from anthropic import AsyncAnthropic

from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 4096


def split_system(messages: list[ChatMessage]) -> tuple[str | None, list[dict[str, str]]]:
    """Separate system messages from the user/assistant turns.

    The Messages API takes the system prompt as its own parameter and
    rejects a ``system`` role inside ``messages``.
    """
    system_parts = [m.content for m in messages if m.role == "system"]
    turns = [{"role": m.role, "content": m.content} for m in messages if m.role != "system"]
    return ("\n\n".join(system_parts) if system_parts else None), turns


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        base_url: str | None = None,
        **client_kwargs: Any
    ):
        self._model = model
        self._client = AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
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
        system, turns = split_system(messages)
        params: dict[str, Any] = {
            "model": model or self._model,
            "messages": turns,
            "temperature": temperature,
            "max_tokens": max_tokens or DEFAULT_MAX_TOKENS,
            **kwargs
        }
        if system is not None:
            params["system"] = system

        logger.debug("Requesting %s with %d turns", params["model"], len(turns))
        response = await self._client.messages.create(**params)

        usage = None
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.input_tokens + response.usage.output_tokens
            }

        return LLMResponse(
            content="".join(block.text for block in response.content if block.type == "text"),
            model=response.model,
            usage=usage,
            finish_reason=response.stop_reason
        )

    async def close(self) -> None:
        await self._client.close()
