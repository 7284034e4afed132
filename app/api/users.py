"""User management API endpoints"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.reservation import MessageResponse
from app.schemas.user import UserResponse, ProfileUpdate, RoleUpdate
from app.services.users import UserService
from app.api.auth import get_current_active_user, get_password_hash, require_roles

router = APIRouter()


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_active_user)):
    return current_user


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_active_user),
    service: UserService = Depends(get_user_service),
):
    """Update name, contact details or password"""
    hashed_password = None
    if profile_data.password:
        hashed_password = get_password_hash(profile_data.password)
    return await service.update_profile(current_user, profile_data, hashed_password)


@router.get("", response_model=List[UserResponse])
async def list_users(
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: UserService = Depends(get_user_service),
):
    return await service.list_all()


@router.get("/staff", response_model=List[UserResponse])
async def list_staff(
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: UserService = Depends(get_user_service),
):
    """Staff and admin accounts"""
    return await service.list_staff()


@router.get("/customers", response_model=List[UserResponse])
async def list_customers(
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.STAFF)),
    service: UserService = Depends(get_user_service),
):
    return await service.list_customers()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: UserService = Depends(get_user_service),
):
    return await service.get(user_id)


@router.put("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    request: RoleUpdate,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: UserService = Depends(get_user_service),
):
    return await service.update_role(user_id, request.role, current_user.id)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: UserService = Depends(get_user_service),
):
    await service.delete(user_id, current_user.id)
    return {"message": "User deleted successfully"}
