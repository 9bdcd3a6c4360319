"""Configuration constants and environment lookups.

Centralizes defaults so the CLI and library agree on them.
"""

import os

# Environment variable names
ENV_LLM_PROVIDER = "LLM_PROVIDER"
ENV_MEMORY_BACKEND = "EXPLORA_MEMORY_BACKEND"
ENV_MEMORY_PATH = "EXPLORA_MEMORY_PATH"
ENV_LOG_LEVEL = "EXPLORA_LOG_LEVEL"

DEFAULT_LLM_PROVIDER = "offline"
DEFAULT_MEMORY_BACKEND = "sqlite"
DEFAULT_MEMORY_PATH = "./explora.db"
DEFAULT_LOG_LEVEL = "WARNING"

# Chat
FALLBACK_RESPONSE = "Sorry, I encountered an error processing your request. Please try again."
BRANCH_PROMPT_TEMPLATE = 'Let\'s explore this part in more depth: "{text}"'
DEFAULT_CONVERSATION_TITLE = "Untitled conversation"

# Display
PREVIEW_MAX_LENGTH = 80  # Characters before truncating in tables and trees
LIST_DEFAULT_LIMIT = 20


class LogLevel:
    """Log level names accepted by ``--log-level``."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    _all = (DEBUG, INFO, WARNING, ERROR)

    @classmethod
    def from_string(cls, level_str: str | None) -> str:
        """Normalize a level name. Returns the default if invalid."""
        if level_str and level_str.upper() in cls._all:
            return level_str.upper()
        return DEFAULT_LOG_LEVEL


def env_log_level() -> str:
    return LogLevel.from_string(os.getenv(ENV_LOG_LEVEL))


def truncate(text: str, limit: int = PREVIEW_MAX_LENGTH) -> str:
    """Collapse whitespace and cut ``text`` to ``limit`` characters."""
    flat = " ".join(text.split())
    return flat if len(flat) <= limit else flat[: limit - 3] + "..."
