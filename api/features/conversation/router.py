"""Router for the Conversation feature."""
from typing import List, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query

from api.features.conversation.controller import ConversationController
from api.features.conversation.dtos import ConversationDTO
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()


@router.post("/createConversation", response_model=ConversationDTO)
@inject
async def create_conversation(
    message: Optional[str] = Query(None, description="Initial user message"),
    sub: Optional[str] = Query(None, description="Owning user's subject identifier"),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
):
    """Start a conversation and return it with the first assistant reply."""
    return await controller.create_conversation(message=message, user_id=sub)


@router.post("/message", response_model=ConversationDTO)
@inject
async def send_message(
    conversation: Optional[str] = Query(None, description="Conversation identifier"),
    message: Optional[str] = Query(None, description="User message"),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
):
    """Append a turn and return the updated conversation."""
    return await controller.send_message(conversation_id=conversation, message=message)


@router.get("/listConversations", response_model=List[ConversationDTO])
@inject
async def list_conversations(
    sub: Optional[str] = Query(None, description="Owning user's subject identifier"),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
):
    """List a user's conversations."""
    return await controller.list_conversations(user_id=sub)
