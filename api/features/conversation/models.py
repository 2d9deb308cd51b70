"""Models for the Conversation feature."""
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from api.features.conversation.entities.conversation import (
    Conversation as ConversationEntity,
)
from llm.base import LLMMessage, Roles


class Message(LLMMessage):
    """A persisted conversation message."""


class ConversationModel(BaseModel):
    """Domain model for Conversation.

    The system prompt is never part of 'messages': the persisted history starts
    with the first user message and grows by one user/assistant pair per turn.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Conversation identifier")
    user_id: str = Field(description="Owning user's subject identifier")
    messages: List[Message] = Field(default_factory=list, description="Ordered history")
    last_timestamp: int = Field(description="Epoch seconds of the latest turn")
    version: int = Field(default=1, description="Revision used for optimistic updates")

    @classmethod
    def from_entity(cls, entity: ConversationEntity) -> "ConversationModel":
        """Create model from database entity."""
        return cls(
            id=str(entity.id),
            user_id=entity.user_id,
            messages=[Message.model_validate(m) for m in (entity.messages or [])],
            last_timestamp=entity.last_timestamp,
            version=entity.version,
        )

    def to_entity(self) -> ConversationEntity:
        """Convert model to database entity."""
        return ConversationEntity(
            id=self.id,
            user_id=self.user_id,
            messages=self.messages_payload(),
            last_timestamp=self.last_timestamp,
            version=self.version,
        )

    def messages_payload(self) -> List[dict]:
        return [m.to_payload() for m in self.messages]

    def with_turn(
        self, *, user_message: str, reply: str, timestamp: int
    ) -> "ConversationModel":
        """Return the next revision with one user/assistant pair appended."""
        return self.model_copy(
            update={
                "messages": [
                    *self.messages,
                    Message(role=Roles.USER, content=user_message),
                    Message(role=Roles.ASSISTANT, content=reply),
                ],
                "last_timestamp": timestamp,
                "version": self.version + 1,
            }
        )
