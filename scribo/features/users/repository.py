"""SQLAlchemy repository for Users"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from scribo.db.models.user import User as UserORM
from scribo.features.users.domain import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Read access to the users table"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, user_id: str) -> Optional[User]:
        orm_user = await self.db.get(UserORM, str(user_id))
        if orm_user is None:
            return None
        return User.model_validate(orm_user)

    async def find_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup by e-mail address"""
        stmt = select(UserORM).where(func.lower(UserORM.email) == email.strip().lower())
        result = await self.db.execute(stmt)
        orm_user = result.scalar_one_or_none()
        if orm_user is None:
            return None
        return User.model_validate(orm_user)

    async def create(self, user: User) -> User:
        """Insert a user row (provisioning hook and test fixtures)"""
        orm_user = UserORM(
            id=user.id,
            email=user.email.strip().lower(),
            name=user.name,
            role=user.role,
        )
        self.db.add(orm_user)
        await self.db.commit()
        logger.info(f"Provisioned user {user.id}")
        return User.model_validate(orm_user)
