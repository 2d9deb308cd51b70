"""Controller for the Conversation feature."""
import logging
from typing import List, Optional

from api.features.conversation.dtos import ConversationDTO
from api.features.conversation.service import ConversationManager

logger = logging.getLogger("companion.conversation")


class ConversationController:
    """Controller mapping conversation manager results to API DTOs."""

    def __init__(self, conversation_manager: ConversationManager):
        self.conversation_manager = conversation_manager

    async def create_conversation(
        self, *, message: Optional[str], user_id: Optional[str]
    ) -> ConversationDTO:
        conversation = await self.conversation_manager.create(user_id, message)
        return ConversationDTO.from_model(conversation)

    async def send_message(
        self, *, conversation_id: Optional[str], message: Optional[str]
    ) -> ConversationDTO:
        conversation = await self.conversation_manager.append_turn(
            conversation_id, message
        )
        return ConversationDTO.from_model(conversation)

    async def list_conversations(self, *, user_id: Optional[str]) -> List[ConversationDTO]:
        conversations = await self.conversation_manager.list_by_user(user_id)
        return [ConversationDTO.from_model(c) for c in conversations]
