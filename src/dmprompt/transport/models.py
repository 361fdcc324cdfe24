from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Represents a role-tagged message sent to the model."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"] = Field(
        description="Role of the message sender: 'user', 'assistant', or 'system'"
    )
    content: str = Field(description="Content of the message")


class TransportReply(BaseModel):
    """Successful reply from a chat transport."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    timestamp: int = Field(ge=0, description="Epoch milliseconds when the reply was received")
    model: str = Field(description="Model that generated the reply")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )
