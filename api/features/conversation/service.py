"""Conversation manager: lifecycle and message-assembly for chat threads.

Every gateway request is rebuilt from scratch as
``[system prompt, *persisted history, new user message]``. The system prompt
comes from configuration and is never stored. A turn is persisted only after
the gateway answered, so a failed completion leaves the stored record as it
was.

Appends to one conversation are serialized inside the process with a
per-identifier lock; the store's version compare-and-swap rejects writes that
lost a race with another process.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, List, Optional, Sequence

from api.features.conversation.exceptions import ConversationNotFoundError
from api.features.conversation.models import ConversationModel, Message
from api.features.conversation.repository import ConversationStore
from api.shared.exceptions import ValidationError
from api.shared.utils import (
    canonical_uuid,
    generate_uid,
    get_current_timestamp,
    is_missing,
)
from llm.base import LanguageModelGateway, Roles
from llm.prompts import build_chat_messages

logger = logging.getLogger("companion.conversation.service")


class KeyedLock:
    """One asyncio lock per key, dropped once nobody holds or awaits it."""

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._holders: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class ConversationManager:
    """Owns conversation creation, turn appending, and listing."""

    def __init__(
        self,
        store: ConversationStore,
        gateway: LanguageModelGateway,
        *,
        system_prompt: str,
        max_history_messages: Optional[int] = None,
        clock: Callable[[], int] = get_current_timestamp,
        id_factory: Callable[[], str] = generate_uid,
    ):
        self.store = store
        self.gateway = gateway
        self.system_prompt = system_prompt
        self.max_history_messages = max_history_messages
        self.clock = clock
        self.id_factory = id_factory
        self.locks = KeyedLock()

    async def create(self, user_id: str, initial_message: str) -> ConversationModel:
        """Start a conversation with its first turn and persist it."""
        _require(initial_message, "message")
        _require(user_id, "sub")

        reply = await self.gateway.complete(
            build_chat_messages(
                system_prompt=self.system_prompt,
                history=[],
                user_message=initial_message,
            )
        )

        conversation = ConversationModel(
            id=self.id_factory(),
            user_id=user_id,
            messages=[
                Message(role=Roles.USER, content=initial_message),
                Message(role=Roles.ASSISTANT, content=reply),
            ],
            last_timestamp=self.clock(),
            version=1,
        )
        conversation = await self.store.insert(conversation)
        logger.info(f"Conversation created: {conversation.id} (user {user_id})")
        return conversation

    async def append_turn(
        self, conversation_id: str, user_message: str
    ) -> ConversationModel:
        """Send the full history plus 'user_message' and persist the new pair."""
        _require(conversation_id, "conversation")
        _require(user_message, "message")

        # Spellings of one UUID share a lock
        async with self.locks.hold(canonical_uuid(conversation_id)):
            existing = await self.get(conversation_id)

            reply = await self.gateway.complete(
                build_chat_messages(
                    system_prompt=self.system_prompt,
                    history=self._history_window(existing.messages),
                    user_message=user_message,
                )
            )

            updated = existing.with_turn(
                user_message=user_message, reply=reply, timestamp=self.clock()
            )
            updated = await self.store.replace(
                updated, expected_version=existing.version
            )

        logger.info(
            f"Turn appended to {conversation_id}: "
            f"{len(updated.messages)} messages, version {updated.version}"
        )
        return updated

    async def get(self, conversation_id: str) -> ConversationModel:
        conversation = await self.store.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def list_by_user(self, user_id: str) -> List[ConversationModel]:
        """All conversations owned by 'user_id', in storage order."""
        _require(user_id, "sub")
        return await self.store.list_by_user(user_id)

    def _history_window(self, messages: Sequence[Message]) -> List[Message]:
        if not self.max_history_messages:
            return list(messages)
        # Keep whole pairs so the window never opens on an assistant reply
        window = self.max_history_messages - (self.max_history_messages % 2)
        return list(messages[-window:]) if window else []


def _require(value: Optional[str], name: str) -> None:
    if is_missing(value):
        raise ValidationError(f'Missing "{name}" parameter', {"parameter": name})
