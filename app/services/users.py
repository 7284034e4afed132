"""User directory lookups and account management"""

from typing import List, Optional, Union
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import BadRequestError, ConflictError, NotFoundError
from app.models.reservation import Reservation
from app.models.user import User, UserRole
from app.schemas.user import ProfileUpdate
from app.services.authorization import STAFF_ROLES
from app.services.ids import parse_id

logger = structlog.get_logger()


class UserDirectory:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, user_id: Union[UUID, str]) -> Optional[User]:
        if not isinstance(user_id, UUID):
            try:
                user_id = UUID(str(user_id))
            except ValueError:
                return None
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()


class UserService:
    """Profile self-service and admin role management"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.directory = UserDirectory(db)

    async def update_profile(
        self,
        user: User,
        data: ProfileUpdate,
        hashed_password: Optional[str] = None,
    ) -> User:
        """Apply profile changes; the caller hashes any new password"""
        if data.email is not None:
            email = data.email.lower()
            if email != user.email:
                if await self.directory.find_by_email(email) is not None:
                    raise ConflictError(detail="Email already registered")
                user.email = email
        if data.full_name is not None:
            user.full_name = data.full_name
        if data.phone is not None:
            user.phone = data.phone
        if hashed_password is not None:
            user.hashed_password = hashed_password
            # Existing sessions must log in again
            user.refresh_token = None

        await self.db.commit()
        await self.db.refresh(user)

        logger.info("Profile updated", user_id=str(user.id))
        return user

    async def list_all(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.created_at.desc()))
        return list(result.scalars().all())

    async def list_staff(self) -> List[User]:
        return await self._list_roles(STAFF_ROLES)

    async def list_customers(self) -> List[User]:
        return await self._list_roles((UserRole.CUSTOMER,))

    async def get(self, user_id: Union[UUID, str]) -> User:
        user = await self.db.get(User, parse_id(user_id, "user"))
        if user is None:
            raise NotFoundError(detail=f"User with ID {user_id} not found")
        return user

    async def update_role(
        self,
        user_id: Union[UUID, str],
        role: UserRole,
        requester_id: Union[UUID, str],
    ) -> User:
        user = await self.get(user_id)
        if str(user.id) == str(requester_id):
            raise BadRequestError(detail="You cannot change your own role")

        previous = user.role
        user.role = role
        await self.db.commit()
        await self.db.refresh(user)

        logger.info(
            "User role changed",
            user_id=str(user.id),
            previous_role=UserRole(previous).value,
            role=user.role.value,
        )
        return user

    async def delete(self, user_id: Union[UUID, str], requester_id: Union[UUID, str]) -> None:
        user = await self.get(user_id)
        if str(user.id) == str(requester_id):
            raise BadRequestError(detail="You cannot delete your own account")

        result = await self.db.execute(
            select(Reservation.id).where(Reservation.user_id == user.id).limit(1)
        )
        if result.first() is not None:
            raise ConflictError(detail="User has reservations and cannot be deleted")

        await self.db.delete(user)
        await self.db.commit()
        logger.info("User deleted", user_id=str(user_id))

    async def _list_roles(self, roles) -> List[User]:
        result = await self.db.execute(
            select(User)
            .where(User.role.in_([UserRole(role) for role in roles]))
            .order_by(User.full_name.asc(), User.email.asc())
        )
        return list(result.scalars().all())
