"""Pre-order API endpoints

Guests manage the pre-order under their reservation; the kitchen works
from the day's list and moves orders forward.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.menu_order import (
    PreOrderCreate,
    PreOrderUpdate,
    PreOrderStatusUpdate,
    MenuOrderResponse,
)
from app.services.menu_orders import MenuOrderService
from app.api.auth import get_current_active_user, require_roles

# Mounted under /reservations
reservation_router = APIRouter()

# Kitchen view, mounted under /menu-orders
router = APIRouter()


def get_menu_order_service(db: AsyncSession = Depends(get_db)) -> MenuOrderService:
    return MenuOrderService(db)


@reservation_router.post(
    "/{reservation_id}/pre-order", response_model=MenuOrderResponse, status_code=201
)
async def create_pre_order(
    reservation_id: str,
    order_data: PreOrderCreate,
    current_user: User = Depends(get_current_active_user),
    service: MenuOrderService = Depends(get_menu_order_service),
):
    """Attach a meal pre-order to a reservation"""
    return await service.create(reservation_id, order_data, current_user.id, current_user.role)


@reservation_router.get("/{reservation_id}/pre-order", response_model=MenuOrderResponse)
async def get_pre_order(
    reservation_id: str,
    current_user: User = Depends(get_current_active_user),
    service: MenuOrderService = Depends(get_menu_order_service),
):
    return await service.get_for_reservation(reservation_id, current_user.id, current_user.role)


@reservation_router.put("/{reservation_id}/pre-order", response_model=MenuOrderResponse)
async def update_pre_order(
    reservation_id: str,
    order_data: PreOrderUpdate,
    current_user: User = Depends(get_current_active_user),
    service: MenuOrderService = Depends(get_menu_order_service),
):
    return await service.update(reservation_id, order_data, current_user.id, current_user.role)


@reservation_router.delete("/{reservation_id}/pre-order", response_model=MenuOrderResponse)
async def cancel_pre_order(
    reservation_id: str,
    current_user: User = Depends(get_current_active_user),
    service: MenuOrderService = Depends(get_menu_order_service),
):
    """Cancel the pre-order; the reservation itself is untouched"""
    return await service.cancel(reservation_id, current_user.id, current_user.role)


@router.get("/today", response_model=List[MenuOrderResponse])
async def list_todays_pre_orders(
    date: Optional[str] = None,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.STAFF)),
    service: MenuOrderService = Depends(get_menu_order_service),
):
    """Open pre-orders for one day's reservations, today by default"""
    return await service.list_for_day(date)


@router.put("/{order_id}/status", response_model=MenuOrderResponse)
async def set_pre_order_status(
    order_id: str,
    request: PreOrderStatusUpdate,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.STAFF)),
    service: MenuOrderService = Depends(get_menu_order_service),
):
    return await service.set_status(order_id, request)
