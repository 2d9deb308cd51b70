"""DTOs for the Conversation feature."""
from typing import List

from pydantic import Field

from api.features.conversation.models import ConversationModel
from api.shared.dtos import BaseDTO


class MessageDTO(BaseDTO):
    """Conversation message DTO."""

    role: str = Field(description="Message role: user or assistant")
    content: str = Field(description="Message content")


class ConversationDTO(BaseDTO):
    """Conversation DTO, serialized with the camelCase keys clients expect."""

    id: str = Field(description="Conversation identifier")
    user_id: str = Field(alias="userId", description="Owning user identifier")
    messages: List[MessageDTO] = Field(description="Messages in conversation order")
    last_timestamp: int = Field(
        alias="lastTimestamp", description="Epoch seconds of the latest turn"
    )
    version: int = Field(description="Record revision")

    @classmethod
    def from_model(cls, model: ConversationModel) -> "ConversationDTO":
        return cls(
            id=model.id,
            user_id=model.user_id,
            messages=[
                MessageDTO(role=m.role.value, content=m.content) for m in model.messages
            ],
            last_timestamp=model.last_timestamp,
            version=model.version,
        )
