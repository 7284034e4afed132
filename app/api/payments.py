"""Payment API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.payment import PaymentCreate, PaymentUpdate, PaymentResponse
from app.schemas.reservation import MessageResponse
from app.services.payments import PaymentService
from app.api.auth import get_current_active_user, require_roles

router = APIRouter()


def get_payment_service(db: AsyncSession = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


@router.post("", response_model=PaymentResponse, status_code=201)
async def create_payment(
    payment_data: PaymentCreate,
    current_user: User = Depends(get_current_active_user),
    service: PaymentService = Depends(get_payment_service),
):
    """Record a payment for a reservation"""
    return await service.create(payment_data, current_user.id, current_user.role)


@router.get("", response_model=List[PaymentResponse])
async def list_payments(
    status: Optional[str] = None,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.STAFF)),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.list_all(status=status)


@router.get("/mine", response_model=List[PaymentResponse])
async def list_my_payments(
    current_user: User = Depends(get_current_active_user),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.list_for_customer(current_user.id)


@router.get("/reservation/{reservation_id}", response_model=List[PaymentResponse])
async def list_reservation_payments(
    reservation_id: str,
    current_user: User = Depends(get_current_active_user),
    service: PaymentService = Depends(get_payment_service),
):
    """Payments recorded against one reservation"""
    return await service.list_for_reservation(reservation_id, current_user.id, current_user.role)


@router.get("/customer/{customer_id}", response_model=List[PaymentResponse])
async def list_customer_payments(
    customer_id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.STAFF)),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.list_for_customer(customer_id)


@router.get("/status/{status}", response_model=List[PaymentResponse])
async def list_payments_by_status(
    status: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.STAFF)),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.list_by_status(status)


@router.get("/range", response_model=List[PaymentResponse])
async def list_payments_in_range(
    start: str,
    end: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.STAFF)),
    service: PaymentService = Depends(get_payment_service),
):
    """Payments created between start and end (YYYY-MM-DD, inclusive)"""
    return await service.list_by_date_range(start, end)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: str,
    current_user: User = Depends(get_current_active_user),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.get(payment_id, current_user.id, current_user.role)


@router.put("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: str,
    payment_data: PaymentUpdate,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.STAFF)),
    service: PaymentService = Depends(get_payment_service),
):
    """Amend a pending payment or settle it"""
    return await service.update(payment_id, payment_data)


@router.put("/{payment_id}/complete", response_model=PaymentResponse)
async def complete_payment(
    payment_id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.STAFF)),
    service: PaymentService = Depends(get_payment_service),
):
    """Mark a pending payment as completed"""
    return await service.complete(payment_id)


@router.put("/{payment_id}/fail", response_model=PaymentResponse)
async def fail_payment(
    payment_id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.STAFF)),
    service: PaymentService = Depends(get_payment_service),
):
    """Mark a pending payment as failed"""
    return await service.fail(payment_id)


@router.delete("/{payment_id}", response_model=MessageResponse)
async def delete_payment(
    payment_id: str,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: PaymentService = Depends(get_payment_service),
):
    await service.delete(payment_id)
    return {"message": "Payment deleted successfully"}
