"""
Payments

Payments are validated with the same composite strategy pattern as
reservations. A payment is pending -> completed or pending -> failed; both
outcomes are final.
"""

from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional, Union
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import BadRequestError, ConflictError, NotFoundError, ValidationFailedError
from app.models.payment import Payment, PaymentStatus
from app.models.reservation import Reservation, ReservationStatus
from app.models.user import UserRole
from app.schemas.payment import PaymentCreate, PaymentUpdate
from app.services.authorization import authorize, PAYMENT_OPERATORS
from app.services.availability import parse_date
from app.services.ids import parse_id
from app.services.validators import (
    CompositeValidator,
    DepositValidator,
    PaymentAmountValidator,
    payment_validator,
)

logger = structlog.get_logger()

PENDING_EXISTS = "A pending payment already exists for this reservation"


class PaymentService:
    def __init__(self, db: AsyncSession, validator: Optional[CompositeValidator] = None):
        self.db = db
        self.validator = validator or payment_validator(include_deposit=settings.deposit_enforced)

    async def create(
        self,
        data: PaymentCreate,
        requester_id: Union[UUID, str],
        requester_role: UserRole,
    ) -> Payment:
        """Record a pending payment against the requester's reservation"""
        reservation = None
        if data.reservation_id:
            reservation = await self._get_reservation(data.reservation_id)
            authorize(
                requester_id,
                requester_role,
                reservation.user_id,
                required_roles=PAYMENT_OPERATORS,
                detail="You can only pay for your own reservations",
            )
            if reservation.status == ReservationStatus.CANCELLED:
                raise ConflictError(detail="Cannot pay for a cancelled reservation")

        candidate = {
            "reservation_id": data.reservation_id,
            "amount": data.amount,
            "method": data.method,
            "party_size": reservation.party_size if reservation else None,
        }
        result = await self.validator.validate(candidate)
        if not result.valid:
            raise ValidationFailedError(result.errors, message="Payment validation failed")

        if not settings.deposit_enforced:
            advisory = await DepositValidator().validate(candidate)
            if not advisory.valid:
                logger.warning(
                    "Payment below deposit policy",
                    reservation_id=str(reservation.id),
                    amount=data.amount,
                )

        reservation_id = reservation.id
        if await self._find_pending(reservation_id) is not None:
            raise ConflictError(detail=PENDING_EXISTS)

        payment = Payment(
            reservation_id=reservation_id,
            customer_id=reservation.user_id,
            amount=Decimal(str(data.amount)),
            method=data.method,
            status=PaymentStatus.PENDING.value,
        )
        self.db.add(payment)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            # Only a concurrent pending payment is a conflict
            if await self._find_pending(reservation_id) is not None:
                raise ConflictError(detail=PENDING_EXISTS)
            raise
        await self.db.refresh(payment)

        logger.info(
            "Payment created",
            payment_id=str(payment.id),
            reservation_id=str(reservation_id),
            method=payment.method,
        )
        return payment

    async def get(
        self,
        payment_id: Union[UUID, str],
        requester_id: Union[UUID, str],
        requester_role: UserRole,
    ) -> Payment:
        payment = await self._get(payment_id)
        authorize(
            requester_id,
            requester_role,
            payment.customer_id,
            required_roles=PAYMENT_OPERATORS,
            detail="You can only view your own payments",
        )
        return payment

    async def list_all(self, status: Optional[str] = None) -> List[Payment]:
        query = select(Payment)
        if status:
            query = query.where(Payment.status == status)
        result = await self.db.execute(query.order_by(Payment.created_at.desc()))
        return list(result.scalars().all())

    async def list_for_customer(self, customer_id: Union[UUID, str]) -> List[Payment]:
        customer_uuid = parse_id(customer_id, "customer")
        result = await self.db.execute(
            select(Payment)
            .where(Payment.customer_id == customer_uuid)
            .order_by(Payment.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_reservation(
        self,
        reservation_id: Union[UUID, str],
        requester_id: Union[UUID, str],
        requester_role: UserRole,
    ) -> List[Payment]:
        reservation = await self._get_reservation(reservation_id)
        authorize(
            requester_id,
            requester_role,
            reservation.user_id,
            required_roles=PAYMENT_OPERATORS,
            detail="You can only view payments for your own reservations",
        )
        result = await self.db.execute(
            select(Payment)
            .where(Payment.reservation_id == reservation.id)
            .order_by(Payment.created_at.desc())
        )
        return list(result.scalars().all())

    async def complete(self, payment_id: Union[UUID, str]) -> Payment:
        payment = await self._get(payment_id)
        if payment.status == PaymentStatus.COMPLETED:
            raise ConflictError(detail="Payment is already completed")
        if payment.status == PaymentStatus.FAILED:
            raise ConflictError(detail="Cannot complete a failed payment")

        payment.status = PaymentStatus.COMPLETED.value
        payment.completed_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(payment)

        logger.info("Payment completed", payment_id=str(payment.id))
        return payment

    async def fail(self, payment_id: Union[UUID, str]) -> Payment:
        payment = await self._get(payment_id)
        if payment.status == PaymentStatus.FAILED:
            raise ConflictError(detail="Payment is already marked as failed")
        if payment.status == PaymentStatus.COMPLETED:
            raise ConflictError(detail="Cannot fail a completed payment")

        payment.status = PaymentStatus.FAILED.value
        await self.db.commit()
        await self.db.refresh(payment)

        logger.info("Payment failed", payment_id=str(payment.id))
        return payment

    async def update(self, payment_id: Union[UUID, str], data: PaymentUpdate) -> Payment:
        """Correct the amount of a pending payment, or settle it"""
        payment = await self._get(payment_id)
        if data.amount is not None:
            if payment.status != PaymentStatus.PENDING:
                raise ConflictError(detail="Only pending payments can be amended")
            result = await PaymentAmountValidator().validate({"amount": data.amount})
            if not result.valid:
                raise ValidationFailedError(result.errors, message="Payment validation failed")
            payment.amount = Decimal(str(data.amount))
            await self.db.commit()
            await self.db.refresh(payment)
            logger.info("Payment amended", payment_id=str(payment.id))

        if data.status == PaymentStatus.COMPLETED:
            return await self.complete(payment.id)
        if data.status == PaymentStatus.FAILED:
            return await self.fail(payment.id)
        if data.status == PaymentStatus.PENDING and payment.status != PaymentStatus.PENDING:
            raise ConflictError(detail=f"Cannot reopen a {payment.status} payment")
        return payment

    async def list_by_status(self, status: str) -> List[Payment]:
        try:
            status = PaymentStatus(status).value
        except ValueError:
            raise BadRequestError(detail="Invalid payment status")
        return await self.list_all(status=status)

    async def list_by_date_range(self, start: str, end: str) -> List[Payment]:
        """Payments created between two days, both inclusive"""
        try:
            start_day = parse_date(start)
            end_day = parse_date(end)
        except ValueError:
            raise BadRequestError(detail="Date must be in YYYY-MM-DD format")
        if start_day > end_day:
            raise BadRequestError(detail="start must not be after end")

        result = await self.db.execute(
            select(Payment)
            .where(
                Payment.created_at >= datetime.combine(start_day, time.min),
                Payment.created_at < datetime.combine(end_day + timedelta(days=1), time.min),
            )
            .order_by(Payment.created_at.desc())
        )
        return list(result.scalars().all())

    async def delete(self, payment_id: Union[UUID, str]) -> None:
        payment = await self._get(payment_id)
        if payment.status == PaymentStatus.COMPLETED:
            raise ConflictError(detail="Completed payments cannot be deleted")

        await self.db.delete(payment)
        await self.db.commit()
        logger.info("Payment deleted", payment_id=str(payment_id))

    async def _find_pending(self, reservation_id: UUID) -> Optional[Payment]:
        result = await self.db.execute(
            select(Payment).where(
                Payment.reservation_id == reservation_id,
                Payment.status == PaymentStatus.PENDING.value,
            )
        )
        return result.scalars().first()

    async def _get(self, payment_id: Union[UUID, str]) -> Payment:
        payment_uuid = parse_id(payment_id, "payment")
        result = await self.db.execute(select(Payment).where(Payment.id == payment_uuid))
        payment = result.scalar_one_or_none()
        if payment is None:
            raise NotFoundError(detail=f"Payment with ID {payment_id} not found")
        return payment

    async def _get_reservation(self, reservation_id: Union[UUID, str]) -> Reservation:
        reservation_uuid = parse_id(reservation_id, "reservation")
        result = await self.db.execute(
            select(Reservation).where(Reservation.id == reservation_uuid)
        )
        reservation = result.scalar_one_or_none()
        if reservation is None:
            raise NotFoundError(detail=f"Reservation with ID {reservation_id} not found")
        return reservation
