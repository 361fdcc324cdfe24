from pydantic import BaseModel, ConfigDict, Field

from ..transport.models import ChatMessage


class ComposedPrompt(BaseModel):
    """Output of prompt assembly: an optional system message and the user body."""

    model_config = ConfigDict(frozen=True)

    system_message: str | None = Field(default=None, description="Verbatim system prompt, if any")
    user_message: str = Field(description="Sectioned user body ending with the current prompt")

    def to_messages(self) -> list[ChatMessage]:
        """Convert to role-tagged messages, system message first."""
        messages = []
        if self.system_message is not None:
            messages.append(ChatMessage(role="system", content=self.system_message))
        messages.append(ChatMessage(role="user", content=self.user_message))
        return messages
