"""User record store."""
import uuid
from typing import Any, Dict, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import DuplicateEmailError
from ..models.user import User


class UserRepository:
    """Reads and writes user records for one request session.

    Every write is committed on its own, so each call is one atomic store
    operation.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _first(self, *criteria) -> Optional[User]:
        result = await self.db.execute(select(User).where(*criteria))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        return await self._first(User.email == email)

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get user by ID."""
        return await self._first(User.id == user_id)

    async def find_by_verification_token(self, token_hash: str) -> Optional[User]:
        return await self._first(User.verification_token == token_hash)

    async def find_by_reset_token(self, token_hash: str) -> Optional[User]:
        return await self._first(User.reset_token == token_hash)

    async def insert(self, user: User) -> User:
        """Persist a new user; raises DuplicateEmailError on a taken email."""
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateEmailError()

        await self.db.refresh(user)
        return user

    async def update(
        self,
        user: User,
        values: Dict[str, Any],
        expected: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Write ``values`` in a single UPDATE statement.

        ``expected`` adds column guards to the WHERE clause. Returns False
        when no row matched, e.g. a token consumed by a concurrent request.
        """
        stmt = update(User).where(User.id == user.id)
        for column, value in (expected or {}).items():
            stmt = stmt.where(getattr(User, column) == value)

        result = await self.db.execute(stmt.values(**values))
        await self.db.commit()
        if result.rowcount == 0:
            return False

        await self.db.refresh(user)
        return True
