"""Reservation management API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User, UserRole
from app.notifications import NotificationSender, get_notifier
from app.schemas.reservation import (
    ReservationCreate,
    ReservationUpdate,
    ApproveReservationRequest,
    ReservationResponse,
    AvailableTable,
    AvailabilityResponse,
    MessageResponse,
)
from app.services.reservations import ReservationService
from app.api.auth import get_current_active_user, require_roles

router = APIRouter()


def get_reservation_service(
    db: AsyncSession = Depends(get_db),
    notifier: NotificationSender = Depends(get_notifier),
) -> ReservationService:
    return ReservationService(db, notifier)


@router.post("", response_model=ReservationResponse, status_code=201)
async def create_reservation(
    reservation_data: ReservationCreate,
    current_user: User = Depends(get_current_active_user),
    service: ReservationService = Depends(get_reservation_service),
):
    """Request a reservation; it starts pending until approved"""
    return await service.create(reservation_data, current_user.id)


@router.get("", response_model=List[ReservationResponse])
async def list_reservations(
    status: Optional[str] = None,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: ReservationService = Depends(get_reservation_service),
):
    """List all reservations"""
    return await service.list_all(status=status)


@router.get("/mine", response_model=List[ReservationResponse])
async def list_my_reservations(
    current_user: User = Depends(get_current_active_user),
    service: ReservationService = Depends(get_reservation_service),
):
    """List the caller's reservations"""
    return await service.list_for_user(current_user.id)


@router.get("/range", response_model=List[ReservationResponse])
async def list_reservations_in_range(
    start_date: str,
    end_date: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: ReservationService = Depends(get_reservation_service),
):
    """List reservations between two dates, inclusive"""
    return await service.list_by_date_range(start_date, end_date)


@router.get("/availability/check", response_model=AvailabilityResponse)
async def check_availability(
    date: str,
    time: str,
    party_size: int,
    duration_minutes: Optional[int] = None,
    current_user: User = Depends(get_current_active_user),
    service: ReservationService = Depends(get_reservation_service),
):
    """Check reservation availability"""
    return await service.check_availability(date, time, party_size, duration_minutes)


@router.get("/available_tables", response_model=List[AvailableTable])
async def available_tables(
    date: str,
    time: str,
    party_size: int,
    current_user: User = Depends(get_current_active_user),
    service: ReservationService = Depends(get_reservation_service),
):
    """Tables that could take the party at this slot"""
    return await service.available_tables(date, time, party_size)


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: str,
    current_user: User = Depends(get_current_active_user),
    service: ReservationService = Depends(get_reservation_service),
):
    """Get a specific reservation"""
    return await service.get(reservation_id, current_user.id, current_user.role)


@router.put("/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    reservation_id: str,
    reservation_data: ReservationUpdate,
    current_user: User = Depends(get_current_active_user),
    service: ReservationService = Depends(get_reservation_service),
):
    """Update a reservation"""
    return await service.update(reservation_id, reservation_data, current_user.id, current_user.role)


@router.put("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: str,
    current_user: User = Depends(get_current_active_user),
    service: ReservationService = Depends(get_reservation_service),
):
    """Cancel a reservation"""
    return await service.cancel(reservation_id, current_user.id, current_user.role)


@router.put("/{reservation_id}/approve", response_model=ReservationResponse)
async def approve_reservation(
    reservation_id: str,
    request: ApproveReservationRequest,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: ReservationService = Depends(get_reservation_service),
):
    """Confirm a pending reservation onto a table"""
    return await service.approve(reservation_id, request.table_id)


@router.put("/{reservation_id}/reject", response_model=ReservationResponse)
async def reject_reservation(
    reservation_id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: ReservationService = Depends(get_reservation_service),
):
    return await service.reject(reservation_id)


@router.put("/{reservation_id}/complete", response_model=ReservationResponse)
async def complete_reservation(
    reservation_id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: ReservationService = Depends(get_reservation_service),
):
    return await service.complete(reservation_id)


@router.delete("/{reservation_id}", response_model=MessageResponse)
async def delete_reservation(
    reservation_id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: ReservationService = Depends(get_reservation_service),
):
    """Delete a reservation"""
    await service.delete(reservation_id)
    return {"message": "Reservation deleted successfully"}
