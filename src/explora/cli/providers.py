"""Provider factory functions for CLI.

Centralizes creation of the memory backend and LLM provider from
environment variables. Hides configuration details from commands.
"""

import logging
import os

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..config import (
    DEFAULT_LLM_PROVIDER,
    DEFAULT_MEMORY_BACKEND,
    DEFAULT_MEMORY_PATH,
    ENV_LLM_PROVIDER,
    ENV_MEMORY_BACKEND,
    ENV_MEMORY_PATH,
    LogLevel,
)
from ..llm import LLMProvider, create_llm_provider
from ..memory import ConversationMemory, create_conversation_memory

_console = Console()

# provider -> (api key variable, model variable or None)
_PROVIDER_ENV = {
    "openai": ("OPENAI_API_KEY", "OPENAI_CHAT_MODEL"),
    "deepseek": ("DEEPSEEK_API_KEY", None),
    "anthropic": ("ANTHROPIC_API_KEY", "ANTHROPIC_MODEL"),
    "claude": ("ANTHROPIC_API_KEY", "ANTHROPIC_MODEL"),
}


def configure_logging(level: str) -> None:
    """Route library logging through Rich on stderr."""
    logging.basicConfig(
        level=LogLevel.from_string(level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def get_memory() -> ConversationMemory:
    """Create the conversation memory backend from environment variables.

    Environment variables:
        EXPLORA_MEMORY_BACKEND: sqlite or memory (default: sqlite)
        EXPLORA_MEMORY_PATH: SQLite database file (default: ./explora.db)
    """
    backend = os.getenv(ENV_MEMORY_BACKEND, DEFAULT_MEMORY_BACKEND).lower()
    if backend == "sqlite":
        return create_conversation_memory(
            "sqlite",
            path=os.getenv(ENV_MEMORY_PATH, DEFAULT_MEMORY_PATH),
        )
    return create_conversation_memory(backend)


def get_llm(console: Console | None = None) -> LLMProvider:
    """Create LLM provider from environment variables.

    Falls back to the offline provider, with a warning, when the selected
    provider has no API key.

    Environment variables:
        LLM_PROVIDER: offline, openai, deepseek or anthropic (default: offline)
        OPENAI_API_KEY / OPENAI_CHAT_MODEL
        DEEPSEEK_API_KEY
        ANTHROPIC_API_KEY / ANTHROPIC_MODEL

    Raises:
        typer.Exit: If LLM_PROVIDER names an unknown provider
    """
    con = console or _console
    provider = os.getenv(ENV_LLM_PROVIDER, DEFAULT_LLM_PROVIDER).lower()

    if provider == "offline":
        return create_llm_provider("offline")

    if provider not in _PROVIDER_ENV:
        con.print(f"[red]Error: unknown LLM_PROVIDER '{provider}'[/red]")
        raise typer.Exit(code=1)

    key_var, model_var = _PROVIDER_ENV[provider]
    api_key = os.getenv(key_var)
    if not api_key:
        con.print(f"[yellow]Warning: {key_var} not set, using offline responses[/yellow]")
        return create_llm_provider("offline")

    config = {"api_key": api_key}
    if model_var and os.getenv(model_var):
        config["model"] = os.getenv(model_var)
    return create_llm_provider(provider, **config)
