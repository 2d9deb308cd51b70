"""Core language-model abstractions and the shared chat message format.

Every gateway implementation adapts one provider client to the
'LanguageModelGateway' interface, so the conversation manager never needs to
know which provider answers a turn.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import List

from pydantic import BaseModel


class Roles(str, Enum):
    """Conversation roles as used by the OpenAI chat completions API."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class LLMMessage(BaseModel):
    """A single message sent to or received from the model."""

    role: Roles
    content: str

    def to_payload(self) -> dict:
        return {"role": self.role.value, "content": self.content}


class LanguageModelGateway(ABC):
    """Stateless request/response adapter to a completion service."""

    @abstractmethod
    async def complete(self, messages: List[LLMMessage]) -> str:
        """Return the content of exactly one assistant reply for 'messages'."""
        pass
