"""User storage: abstract store plus PostgreSQL and in-memory backends."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError

from api.features.auth.entities.user import AppUser
from api.features.auth.models import UserModel
from api.shared.base import BaseRepository
from api.shared.exceptions import StorageError
from infra.resources import DatabaseResource

logger = logging.getLogger("companion.auth.repository")


class UserRepository(BaseRepository[AppUser]):
    """Session-scoped queries over the user table."""

    model = AppUser

    async def upsert(self, user: UserModel) -> None:
        values = user.model_dump()
        stmt = pg_insert(AppUser).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[AppUser.id],
            set_={
                **{key: stmt.excluded[key] for key in values if key != "id"},
                "updated_at": func.now(),
            },
        )
        await self.session.execute(stmt)


class UserStore(ABC):
    """Abstract store for signed-in users."""

    @abstractmethod
    async def upsert(self, user: UserModel) -> UserModel:
        pass


class PostgresUserStore(UserStore):
    def __init__(self, database: DatabaseResource):
        self.database = database

    async def upsert(self, user: UserModel) -> UserModel:
        async with self.database.get_session() as session:
            try:
                await UserRepository(session).upsert(user)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Failed to upsert user {user.id}: {e}")
                raise StorageError(str(e)) from e
        return user


class InMemoryUserStore(UserStore):
    """Process-local user store; 'get' reads back what a login recorded."""

    def __init__(self) -> None:
        self._users: Dict[str, UserModel] = {}

    async def upsert(self, user: UserModel) -> UserModel:
        self._users[user.id] = user.model_copy(deep=True)
        return user

    async def get(self, user_id: str) -> Optional[UserModel]:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None
