from typing import Any

from .base import LLMProvider
from .providers import AnthropicProvider, DeepSeekProvider, OfflineProvider, OpenAIProvider


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Create an LLM provider instance.

    Args:
        provider: Provider type ('offline', 'openai', 'deepseek', 'anthropic')
        **config: Provider-specific configuration
            For OpenAI:
                - api_key: str (required)
                - model: str (default: 'gpt-4o-mini')
                - base_url: str | None
            For DeepSeek:
                - api_key: str (required)
                - model: str (default: 'deepseek-chat')
            For Anthropic (Claude):
                - api_key: str (required)
                - model: str (default: 'claude-sonnet-4-20250514')
            For offline:
                - response: str (fixed answer text)

    Returns:
        Initialized LLM provider instance

    Raises:
        ValueError: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_llm_provider("deepseek", api_key="sk-...")
        >>> provider = create_llm_provider("offline")
    """
    provider_lower = provider.lower()

    if provider_lower == "offline":
        return OfflineProvider(**config)

    networked: dict[str, type[LLMProvider]] = {
        "openai": OpenAIProvider,
        "deepseek": DeepSeekProvider,
        "anthropic": AnthropicProvider,
        "claude": AnthropicProvider,
    }
    provider_cls = networked.get(provider_lower)
    if provider_cls is None:
        raise ValueError(
            f"Unsupported provider: {provider}. "
            f"Supported providers: 'offline', 'openai', 'deepseek', 'anthropic'"
        )

    if not config.get("api_key"):
        raise TypeError(f"{provider_cls.__name__} requires 'api_key' in config")
    return provider_cls(**config)
