"""
User repository - persistence gateway for User records

Routes depend on the abstract UserRepository only. The concrete store is picked
from USER_STORE: PostgresUserRepository runs against the shared asyncpg pool,
InMemoryUserRepository keeps records in process memory.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import asyncpg

from config.settings import USER_STORE
from database.connection import get_db_pool
from models.user import User

logger = logging.getLogger(__name__)


class DuplicateEmailError(Exception):
    """Raised when saving a user whose email belongs to another record"""

    def __init__(self, email: str):
        super().__init__(f"A user with email '{email}' already exists")
        self.email = email


class UserRepository(ABC):
    """Storage, identity assignment and lookup of User records"""

    @abstractmethod
    async def find_all(self) -> List[User]:
        ...

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def save(self, user: User) -> User:
        """
        Persist a user

        Inserts and assigns an id when `user.id` is None, otherwise replaces
        the stored record with that id.

        Raises:
            DuplicateEmailError: the email is held by a different record
        """

    @abstractmethod
    async def delete(self, user: User) -> None:
        ...


class PostgresUserRepository(UserRepository):
    """UserRepository backed by the `users` table"""

    def _pool(self):
        db_pool = get_db_pool()
        if not db_pool:
            raise RuntimeError("Database pool not initialized")
        return db_pool

    async def find_all(self) -> List[User]:
        query = "SELECT id, name, email FROM users ORDER BY id"
        async with self._pool().acquire() as conn:
            logger.debug(f"Executing READ query: {query}")
            try:
                rows = await conn.fetch(query)
            except asyncpg.PostgresError as e:
                logger.error(f"Database error: {e}")
                raise RuntimeError(f"Database query failed: {str(e)}")
        return [User(**dict(row)) for row in rows]

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await self._find_one("SELECT id, name, email FROM users WHERE id = $1", user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self._find_one("SELECT id, name, email FROM users WHERE email = $1", email)

    async def _find_one(self, query: str, value) -> Optional[User]:
        async with self._pool().acquire() as conn:
            logger.debug(f"Executing READ query: {query}")
            logger.debug(f"Parameters: {[value]}")
            try:
                row = await conn.fetchrow(query, value)
            except asyncpg.PostgresError as e:
                logger.error(f"Database error: {e}")
                raise RuntimeError(f"Database query failed: {str(e)}")
        return User(**dict(row)) if row else None

    async def save(self, user: User) -> User:
        if user.id is None:
            query = "INSERT INTO users (name, email) VALUES ($1, $2) RETURNING id, name, email"
            params = [user.name, user.email]
        else:
            query = "UPDATE users SET name = $1, email = $2 WHERE id = $3 RETURNING id, name, email"
            params = [user.name, user.email, user.id]

        async with self._pool().acquire() as conn:
            async with conn.transaction():
                logger.debug(f"Executing WRITE: {query}")
                logger.debug(f"Parameters: {params}")
                try:
                    row = await conn.fetchrow(query, *params)
                except asyncpg.UniqueViolationError as e:
                    logger.warning(f"Unique constraint violation: {e}")
                    raise DuplicateEmailError(user.email)
                except asyncpg.PostgresError as e:
                    logger.error(f"Database error during save: {e}")
                    raise RuntimeError(f"Database save failed: {str(e)}")

        if not row:
            raise RuntimeError(f"No user found with id {user.id} for update")
        return User(**dict(row))

    async def delete(self, user: User) -> None:
        async with self._pool().acquire() as conn:
            async with conn.transaction():
                try:
                    result = await conn.execute("DELETE FROM users WHERE id = $1", user.id)
                except asyncpg.PostgresError as e:
                    logger.error(f"Database error during DELETE: {e}")
                    raise RuntimeError(f"Database DELETE failed: {str(e)}")
        # asyncpg returns the command tag, e.g. "DELETE 1"
        logger.debug(f"Delete result for user {user.id}: {result}")


class InMemoryUserRepository(UserRepository):
    """UserRepository keeping records in a dict, ordered by id"""

    def __init__(self):
        self._users: Dict[int, User] = {}
        self._ids = itertools.count(1)

    async def find_all(self) -> List[User]:
        return [user.model_copy() for _, user in sorted(self._users.items())]

    async def find_by_id(self, user_id: int) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in self._users.values():
            if user.email == email:
                return user.model_copy()
        return None

    async def save(self, user: User) -> User:
        for existing in self._users.values():
            if existing.email == user.email and existing.id != user.id:
                raise DuplicateEmailError(user.email)

        if user.id is None:
            stored = user.model_copy(update={"id": next(self._ids)})
        elif user.id in self._users:
            stored = user.model_copy()
        else:
            raise RuntimeError(f"No user found with id {user.id} for update")

        self._users[stored.id] = stored
        return stored.model_copy()

    async def delete(self, user: User) -> None:
        self._users.pop(user.id, None)


# Global repository instance
_user_repository: Optional[UserRepository] = None

def get_user_repository() -> UserRepository:
    """Get the global user repository for the configured store"""
    global _user_repository
    if _user_repository is None:
        if USER_STORE == "memory":
            _user_repository = InMemoryUserRepository()
        else:
            _user_repository = PostgresUserRepository()
        logger.info(f"User repository initialized: {type(_user_repository).__name__}")
    return _user_repository
