from pydantic import BaseModel, ConfigDict, Field

from ..thread import Message


class ChatMessage(BaseModel):
    """A message in the flattened history sent to a provider."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")

    @classmethod
    def from_message(cls, message: Message) -> "ChatMessage":
        return cls(role=message.role.value, content=message.content)


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    finish_reason: str | None = Field(
        default=None,
        description="Why generation stopped, as reported by the provider"
    )
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )
