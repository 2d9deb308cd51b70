"""Conversation storage: abstract store plus PostgreSQL and in-memory backends.

The 'ConversationStore' ABC is the pluggable storage boundary used by the
conversation manager. Records are inserted once, read whole, and replaced
whole; a replace only lands when the stored version still matches the version
the caller read.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from api.features.conversation.entities.conversation import (
    Conversation as ConversationEntity,
)
from api.features.conversation.exceptions import (
    ConversationAlreadyExistsError,
    ConversationNotFoundError,
    ConversationVersionConflictError,
)
from api.features.conversation.models import ConversationModel
from api.shared.base import BaseRepository
from api.shared.exceptions import StorageError
from api.shared.utils import canonical_uuid, is_valid_uuid
from infra.resources import DatabaseResource

logger = logging.getLogger("companion.conversation.repository")


class ConversationRepository(BaseRepository[ConversationEntity]):
    """Session-scoped queries over the conversation table."""

    model = ConversationEntity

    async def get_by_user_id(self, user_id: str) -> List[ConversationEntity]:
        return await self.get_by_field("user_id", user_id)

    async def replace_if_version(
        self, conversation: ConversationModel, *, expected_version: int
    ) -> bool:
        """Overwrite the record only if its stored version equals 'expected_version'."""
        stmt = (
            update(ConversationEntity)
            .where(
                ConversationEntity.id == conversation.id,
                ConversationEntity.version == expected_version,
            )
            .values(
                messages=conversation.messages_payload(),
                last_timestamp=conversation.last_timestamp,
                version=conversation.version,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0


class ConversationStore(ABC):
    """Abstract durable store for conversation records."""

    @abstractmethod
    async def insert(self, conversation: ConversationModel) -> ConversationModel:
        """Persist a new record; raise 'ConversationAlreadyExistsError' on id reuse."""
        pass

    @abstractmethod
    async def get(self, conversation_id: str) -> Optional[ConversationModel]:
        pass

    @abstractmethod
    async def replace(
        self, conversation: ConversationModel, *, expected_version: int
    ) -> ConversationModel:
        """Replace a record wholesale (compare-and-swap on 'version')."""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[ConversationModel]:
        pass


class PostgresConversationStore(ConversationStore):
    """Conversation store backed by PostgreSQL through SQLAlchemy async sessions."""

    def __init__(self, database: DatabaseResource):
        self.database = database

    async def insert(self, conversation: ConversationModel) -> ConversationModel:
        async with self.database.get_session() as session:
            repository = ConversationRepository(session)
            try:
                entity = await repository.create(conversation.to_entity())
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                logger.error(f"Conversation id collision: {conversation.id}")
                raise ConversationAlreadyExistsError(conversation.id) from e
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Failed to insert conversation {conversation.id}: {e}")
                raise StorageError(str(e)) from e
            return ConversationModel.from_entity(entity)

    async def get(self, conversation_id: str) -> Optional[ConversationModel]:
        # Non-UUID identifiers can never match the UUID column
        if not is_valid_uuid(conversation_id):
            return None
        async with self.database.get_session() as session:
            try:
                entity = await ConversationRepository(session).get_by_id(
                    canonical_uuid(conversation_id)
                )
            except SQLAlchemyError as e:
                logger.error(f"Failed to load conversation {conversation_id}: {e}")
                raise StorageError(str(e)) from e
            return ConversationModel.from_entity(entity) if entity else None

    async def replace(
        self, conversation: ConversationModel, *, expected_version: int
    ) -> ConversationModel:
        async with self.database.get_session() as session:
            repository = ConversationRepository(session)
            try:
                replaced = await repository.replace_if_version(
                    conversation, expected_version=expected_version
                )
                if not replaced:
                    await session.rollback()
                    if not await repository.exists(conversation.id):
                        raise ConversationNotFoundError(conversation.id)
                    raise ConversationVersionConflictError(
                        conversation.id, expected_version
                    )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Failed to replace conversation {conversation.id}: {e}")
                raise StorageError(str(e)) from e
            return conversation

    async def list_by_user(self, user_id: str) -> List[ConversationModel]:
        async with self.database.get_session() as session:
            try:
                entities = await ConversationRepository(session).get_by_user_id(user_id)
            except SQLAlchemyError as e:
                logger.error(f"Failed to list conversations for {user_id}: {e}")
                raise StorageError(str(e)) from e
            return [ConversationModel.from_entity(e) for e in entities]


class InMemoryConversationStore(ConversationStore):
    """Process-local store used for tests and local development.

    Iteration order is insertion order, which stands in for storage-native order.
    Keys are canonical UUID text when the id is a UUID, as in the UUID column.
    """

    def __init__(self) -> None:
        self._records: Dict[str, ConversationModel] = {}

    async def insert(self, conversation: ConversationModel) -> ConversationModel:
        key = canonical_uuid(conversation.id)
        if key in self._records:
            raise ConversationAlreadyExistsError(conversation.id)
        self._records[key] = conversation.model_copy(deep=True)
        return conversation

    async def get(self, conversation_id: str) -> Optional[ConversationModel]:
        record = self._records.get(canonical_uuid(conversation_id))
        return record.model_copy(deep=True) if record else None

    async def replace(
        self, conversation: ConversationModel, *, expected_version: int
    ) -> ConversationModel:
        key = canonical_uuid(conversation.id)
        current = self._records.get(key)
        if current is None:
            raise ConversationNotFoundError(conversation.id)
        if current.version != expected_version:
            raise ConversationVersionConflictError(conversation.id, expected_version)
        self._records[key] = conversation.model_copy(deep=True)
        return conversation

    async def list_by_user(self, user_id: str) -> List[ConversationModel]:
        return [
            record.model_copy(deep=True)
            for record in self._records.values()
            if record.user_id == user_id
        ]
