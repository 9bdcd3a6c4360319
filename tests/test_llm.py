"""Unit tests for the LLM module."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from explora.llm import (
    AnthropicProvider,
    ChatMessage,
    DeepSeekProvider,
    LLMProvider,
    OfflineProvider,
    OpenAIProvider,
    create_llm_provider,
)
from explora.llm.providers.anthropic import split_system
from explora.thread import Message


class TestLLMProviderInterface:
    """Tests for the abstract LLMProvider interface."""

    def test_provider_is_abstract(self):
        """Test that LLMProvider cannot be instantiated directly."""
        with pytest.raises(TypeError):
            LLMProvider()  # type: ignore


class TestFactory:
    """Tests for create_llm_provider."""

    @pytest.mark.parametrize("name,cls", [
        ("openai", OpenAIProvider),
        ("deepseek", DeepSeekProvider),
        ("anthropic", AnthropicProvider),
        ("claude", AnthropicProvider),
        ("OpenAI", OpenAIProvider),
    ])
    async def test_networked_providers(self, name, cls):
        """Test that each provider name maps to its class."""
        provider = create_llm_provider(name, api_key="fake-key")
        try:
            assert isinstance(provider, cls)
        finally:
            await provider.close()

    def test_missing_api_key(self):
        """Test that networked providers require an API key."""
        with pytest.raises(TypeError, match="api_key"):
            create_llm_provider("openai")

    def test_offline_needs_no_key(self):
        """Test that the offline provider needs no configuration."""
        assert isinstance(create_llm_provider("offline"), OfflineProvider)

    @given(st.text())
    def test_unknown_provider(self, name: str):
        """Property test: only known provider names are accepted."""
        if name.lower() in ("offline", "openai", "deepseek", "anthropic", "claude"):
            return
        with pytest.raises(ValueError, match="Unsupported provider"):
            create_llm_provider(name, api_key="fake-key")

    async def test_deepseek_defaults(self):
        """Test DeepSeek defaults."""
        provider = DeepSeekProvider(api_key="fake-key")
        try:
            assert provider.model == "deepseek-chat"
        finally:
            await provider.close()


class TestOfflineProvider:
    """Tests for the offline provider."""

    async def test_fixed_response(self):
        """Test that the offline provider returns its fixed answer."""
        async with OfflineProvider(response="fixed") as provider:
            response = await provider.chat_completion([ChatMessage(role="user", content="hi")])

        assert response.content == "fixed"
        assert response.model == "offline"
        assert provider.calls == 1
        assert response.finish_reason == "stop"


class TestChatMessage:
    """Tests for ChatMessage conversion."""

    def test_from_message(self):
        """Test that a thread message converts to role/content."""
        message = Message.create("assistant", "hello", parent_id="1")

        chat_message = ChatMessage.from_message(message)

        assert chat_message == ChatMessage(role="assistant", content="hello")


class TestAnthropicMessages:
    """Tests for the Anthropic request layout."""

    def test_system_messages_are_lifted(self):
        """Test that system prompts leave the turn list."""
        system, turns = split_system([
            ChatMessage(role="system", content="be brief"),
            ChatMessage(role="user", content="hi"),
            ChatMessage(role="assistant", content="hello"),
        ])

        assert system == "be brief"
        assert turns == [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}]

    def test_no_system_message(self):
        """Test history without a system prompt."""
        system, turns = split_system([ChatMessage(role="user", content="hi")])

        assert system is None
        assert len(turns) == 1
