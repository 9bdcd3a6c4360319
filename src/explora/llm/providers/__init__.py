from .anthropic import AnthropicProvider
from .deepseek import DeepSeekProvider
from .offline import OfflineProvider
from .openai import OpenAIProvider

__all__ = ["AnthropicProvider", "DeepSeekProvider", "OfflineProvider", "OpenAIProvider"]
