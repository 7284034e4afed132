"""Table inventory API endpoints"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.reservation import MessageResponse
from app.schemas.table import (
    TableCreate,
    TableUpdate,
    TableAvailabilityUpdate,
    TableResponse,
    TableWindowAvailability,
)
from app.services.tables import TableService
from app.api.auth import get_current_active_user, require_roles

router = APIRouter()


def get_table_service(db: AsyncSession = Depends(get_db)) -> TableService:
    return TableService(db)


@router.get("", response_model=List[TableResponse])
async def list_tables(
    current_user: User = Depends(get_current_active_user),
    service: TableService = Depends(get_table_service),
):
    """List all tables"""
    return await service.list_all()


@router.post("", response_model=TableResponse, status_code=201)
async def create_table(
    table_data: TableCreate,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: TableService = Depends(get_table_service),
):
    """Create a new table"""
    return await service.create(table_data)


@router.get("/available", response_model=TableWindowAvailability)
async def find_available_tables(
    date: str,
    from_hour: int,
    to_hour: int,
    current_user: User = Depends(get_current_active_user),
    service: TableService = Depends(get_table_service),
):
    """Tables with no active booking during [from_hour, to_hour)"""
    return await service.find_available(date, from_hour, to_hour)


@router.get("/{table_id}", response_model=TableResponse)
async def get_table(
    table_id: str,
    current_user: User = Depends(get_current_active_user),
    service: TableService = Depends(get_table_service),
):
    return await service.get(table_id)


@router.put("/{table_id}", response_model=TableResponse)
async def update_table(
    table_id: str,
    table_data: TableUpdate,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: TableService = Depends(get_table_service),
):
    """Update a table"""
    return await service.update(table_id, table_data)


@router.put("/{table_id}/availability", response_model=TableResponse)
async def set_table_availability(
    table_id: str,
    request: TableAvailabilityUpdate,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: TableService = Depends(get_table_service),
):
    """Take a table in or out of service"""
    return await service.set_availability(table_id, request.is_available)


@router.delete("/{table_id}", response_model=MessageResponse)
async def delete_table(
    table_id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: TableService = Depends(get_table_service),
):
    """Delete a table"""
    await service.delete(table_id)
    return {"message": "Table deleted successfully"}
