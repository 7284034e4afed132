"""Menu API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.menu import MenuItemCreate, MenuItemUpdate, MenuItemResponse
from app.schemas.reservation import MessageResponse
from app.services.menu import MenuService
from app.api.auth import get_current_active_user, require_roles

router = APIRouter()


def get_menu_service(db: AsyncSession = Depends(get_db)) -> MenuService:
    return MenuService(db)


@router.post("", response_model=MenuItemResponse, status_code=201)
async def create_menu_item(
    item_data: MenuItemCreate,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: MenuService = Depends(get_menu_service),
):
    return await service.create(item_data)


@router.get("", response_model=List[MenuItemResponse])
async def list_menu(
    category: Optional[str] = None,
    available: Optional[bool] = None,
    search: Optional[str] = None,
    current_user: User = Depends(get_current_active_user),
    service: MenuService = Depends(get_menu_service),
):
    """Browse the menu"""
    return await service.list_items(category=category, available=available, search=search)


@router.get("/popular", response_model=List[MenuItemResponse])
async def list_popular_items(
    limit: int = 10,
    current_user: User = Depends(get_current_active_user),
    service: MenuService = Depends(get_menu_service),
):
    return await service.list_popular(limit)


@router.get("/category/{category}", response_model=List[MenuItemResponse])
async def list_category(
    category: str,
    current_user: User = Depends(get_current_active_user),
    service: MenuService = Depends(get_menu_service),
):
    return await service.list_by_category(category)


@router.get("/{item_id}", response_model=MenuItemResponse)
async def get_menu_item(
    item_id: str,
    current_user: User = Depends(get_current_active_user),
    service: MenuService = Depends(get_menu_service),
):
    return await service.get(item_id)


@router.put("/{item_id}", response_model=MenuItemResponse)
async def update_menu_item(
    item_id: str,
    item_data: MenuItemUpdate,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: MenuService = Depends(get_menu_service),
):
    return await service.update(item_id, item_data)


@router.put("/{item_id}/toggle-availability", response_model=MenuItemResponse)
async def toggle_menu_item(
    item_id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: MenuService = Depends(get_menu_service),
):
    """Take a dish off the menu or put it back"""
    return await service.toggle_availability(item_id)


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_menu_item(
    item_id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: MenuService = Depends(get_menu_service),
):
    await service.delete(item_id)
    return {"message": "Menu item deleted successfully"}
