# composition_service/adapters/outbound/persistence/repositories/user_repository.py

"""
Async repository for the User entity.

Lookup by login, authentication and password-aware create/update.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from composition_service.adapters.outbound.persistence.models import User
from composition_service.adapters.outbound.persistence.repositories.base_repository import AsyncCRUDBase
from composition_service.adapters.outbound.security.password_manager import PasswordManager
from composition_service.application.dtos.user_dto import UserCreate, UserUpdate
from composition_service.domain.exceptions import (
    DatabaseOperationException,
    ResourceAlreadyExistsException,
)


class AsyncUserCRUD(AsyncCRUDBase[User, UserCreate, UserUpdate]):
    """
    Concrete repository for User entity, fully async.
    """

    async def get_by_login(self, db: AsyncSession, login: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.login == login))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(f"Database error while fetching user by login: {e}")
            raise DatabaseOperationException("Error fetching user by login.", original_error=e)

    async def create_with_password(self, db: AsyncSession, *, obj_in: UserCreate) -> User:
        """
        Create a user storing the bcrypt hash of the password.

        Raises:
            ResourceAlreadyExistsException: login already taken
        """
        if await self.get_by_login(db, obj_in.login):
            self.logger.warning(f"Registration with existing login: {obj_in.login}")
            raise ResourceAlreadyExistsException(detail=f"Login '{obj_in.login}' already exists.")

        hashed_password = await PasswordManager.hash_password(obj_in.password)
        return await self.create(db, obj_in={
            "login": obj_in.login,
            "password": hashed_password,
            "is_moderator": obj_in.is_moderator,
        })

    async def authenticate(self, db: AsyncSession, *, login: str, password: str) -> Optional[User]:
        """Return the user when login and password match, otherwise None."""
        user = await self.get_by_login(db, login)
        if not user:
            return None
        if not await PasswordManager.verify_password(password, user.password):
            return None
        return user

    async def update_profile(self, db: AsyncSession, *, db_obj: User, obj_in: UserUpdate) -> User:
        """
        Update login and/or password.

        Raises:
            ResourceAlreadyExistsException: new login already taken
        """
        update_data = obj_in.model_dump(exclude_unset=True, exclude_none=True)

        new_login = update_data.get("login")
        if new_login and new_login != db_obj.login:
            if await self.get_by_login(db, new_login):
                raise ResourceAlreadyExistsException(detail=f"Login '{new_login}' already exists.")

        if "password" in update_data:
            update_data["password"] = await PasswordManager.hash_password(update_data["password"])

        return await self.update(db, db_obj=db_obj, obj_in=update_data)


user_repository = AsyncUserCRUD(User)
