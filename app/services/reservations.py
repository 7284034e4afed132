"""
Reservation lifecycle

ReservationService sequences validation, the duplicate-booking guard, table
availability and persistence for every reservation operation, and enforces
the state machine:

    pending -> confirmed -> completed
    pending -> cancelled
    confirmed -> cancelled

Cancelled and completed are terminal. Cancelling or rejecting a reservation
also cancels its pre-order unless it was already served. Customer
notifications are sent best-effort after a successful write; a failed send
is logged and never undoes the booking.
"""

from typing import Any, Dict, List, Optional, Union
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)
from app.models.menu_order import MenuOrderStatus
from app.models.reservation import Reservation, ReservationStatus, ACTIVE_STATUSES
from app.models.table import Table
from app.models.user import User, UserRole
from app.notifications import NotificationKind, NotificationSender, reservation_payload
from app.schemas.reservation import ReservationCreate, ReservationUpdate
from app.services.authorization import authorize, AUTHORIZERS
from app.services.availability import (
    ConflictDetector,
    TimeWindow,
    find_available_tables,
    parse_date,
)
from app.services.ids import parse_id
from app.services.users import UserDirectory
from app.services.validators import CompositeValidator, reservation_validator

logger = structlog.get_logger()

DUPLICATE_BOOKING = "You already have a reservation for this date and time"
TABLE_BOOKED = "Table is already booked for this time slot"
SLOT_UNAVAILABLE = "Time slot not available"

SLOT_FIELDS = ("reservation_date", "reservation_time", "duration_minutes")
EDITABLE_FIELDS = ("customer_name",) + SLOT_FIELDS + ("party_size",)


class ReservationService:
    """Orchestrates reservation create/approve/update/cancel and availability"""

    def __init__(
        self,
        db: AsyncSession,
        notifier: Optional[NotificationSender] = None,
        validator: Optional[CompositeValidator] = None,
    ):
        self.db = db
        self.notifier = notifier
        self.validator = validator or reservation_validator()
        self.users = UserDirectory(db)
        self.detector = ConflictDetector(db)

    # Queries

    async def get(
        self,
        reservation_id: Union[UUID, str],
        requester_id: Union[UUID, str],
        requester_role: UserRole,
    ) -> Reservation:
        reservation = await self._get(reservation_id)
        authorize(
            requester_id,
            requester_role,
            reservation.user_id,
            detail="You can only view your own reservations",
        )
        return reservation

    async def list_all(self, status: Optional[str] = None) -> List[Reservation]:
        query = select(Reservation)
        if status:
            query = query.where(Reservation.status == status)
        query = query.order_by(Reservation.reservation_date.desc(), Reservation.reservation_time.asc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_for_user(self, user_id: Union[UUID, str]) -> List[Reservation]:
        user_uuid = parse_id(user_id, "user")
        result = await self.db.execute(
            select(Reservation)
            .where(Reservation.user_id == user_uuid)
            .order_by(Reservation.reservation_date.desc(), Reservation.reservation_time.desc())
        )
        return list(result.scalars().all())

    async def list_by_date_range(self, start_date: str, end_date: str) -> List[Reservation]:
        try:
            start, end = parse_date(start_date), parse_date(end_date)
        except ValueError:
            raise BadRequestError(detail="Dates must be in YYYY-MM-DD format")
        if start > end:
            raise BadRequestError(detail="start_date must not be after end_date")

        result = await self.db.execute(
            select(Reservation)
            .where(
                Reservation.reservation_date >= start_date,
                Reservation.reservation_date <= end_date,
            )
            .order_by(Reservation.reservation_date.asc(), Reservation.reservation_time.asc())
        )
        return list(result.scalars().all())

    async def check_availability(
        self,
        reservation_date: str,
        reservation_time: str,
        party_size: int,
        duration_minutes: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Suitable, booked and available tables for a slot. Read-only."""
        candidate = {
            "reservation_date": reservation_date,
            "reservation_time": reservation_time,
            "party_size": party_size,
            "duration_minutes": duration_minutes or settings.default_duration_minutes,
        }
        await self._validate(candidate)

        window = TimeWindow.from_slot(
            reservation_date, reservation_time, candidate["duration_minutes"]
        )
        suitable, available = await find_available_tables(self.db, window, party_size)

        return {
            "date": reservation_date,
            "time": reservation_time,
            "end_time": window.end.strftime("%H:%M"),
            "party_size": party_size,
            "total_suitable_tables": len(suitable),
            "booked_tables": len(suitable) - len(available),
            "available_tables": available,
            "has_availability": bool(available),
        }

    async def available_tables(
        self,
        reservation_date: str,
        reservation_time: str,
        party_size: int,
    ) -> List[Table]:
        availability = await self.check_availability(reservation_date, reservation_time, party_size)
        return availability["available_tables"]

    # Commands

    async def create(self, data: ReservationCreate, owner_id: Union[UUID, str]) -> Reservation:
        """Create a pending reservation for the authenticated owner"""
        owner = await self.users.find_by_id(owner_id)
        if owner is None:
            raise NotFoundError(detail=f"User with ID {owner_id} not found")

        fields = data.model_dump()
        if fields.get("duration_minutes") is None:
            fields["duration_minutes"] = settings.default_duration_minutes
        candidate = {
            **fields,
            "customer_name": fields.get("customer_name") or owner.full_name or owner.email,
            # Never trust a client-supplied address
            "customer_email": owner.email,
        }
        await self._validate(candidate)

        duplicate = await self._find_owner_duplicate(
            owner.id, candidate["reservation_date"], candidate["reservation_time"]
        )
        if duplicate is not None:
            logger.info("Duplicate reservation rejected", user_id=str(owner.id))
            raise ConflictError(detail=DUPLICATE_BOOKING)

        reservation = Reservation(
            user_id=owner.id,
            customer_name=candidate["customer_name"],
            customer_email=owner.email,
            reservation_date=candidate["reservation_date"],
            reservation_time=candidate["reservation_time"],
            duration_minutes=candidate["duration_minutes"],
            party_size=candidate["party_size"],
            status=ReservationStatus.PENDING.value,
        )

        table = None
        if settings.auto_confirm_reservations:
            _, available = await find_available_tables(
                self.db, TimeWindow.of(reservation), reservation.party_size
            )
            if not available:
                raise ConflictError(detail="No tables available for this time slot")
            table = available[0]
            reservation.table_id = table.id
            reservation.status = ReservationStatus.CONFIRMED.value

        self.db.add(reservation)
        await self._commit(DUPLICATE_BOOKING)
        await self.db.refresh(reservation)

        logger.info(
            "Reservation created",
            reservation_id=str(reservation.id),
            user_id=str(owner.id),
            status=reservation.status,
        )
        kind = (
            NotificationKind.RESERVATION_CONFIRMED
            if table is not None
            else NotificationKind.RESERVATION_RECEIVED
        )
        await self._notify(kind, reservation, owner=owner, table=table)
        return reservation

    async def approve(self, reservation_id: Union[UUID, str], table_id: Union[UUID, str]) -> Reservation:
        """Assign a table and confirm a pending reservation"""
        reservation_uuid = parse_id(reservation_id, "reservation")
        table_uuid = parse_id(table_id, "table")

        reservation = await self._get(reservation_uuid)
        if reservation.status != ReservationStatus.PENDING:
            raise ConflictError(detail="Only pending reservations can be approved")

        # Row lock serializes concurrent approvals for the same table
        result = await self.db.execute(
            select(Table).where(Table.id == table_uuid).with_for_update()
        )
        table = result.scalar_one_or_none()
        if table is None:
            raise NotFoundError(detail=f"Table with ID {table_id} not found")
        if not table.is_available:
            raise BadRequestError(detail=f"Table {table.table_number} is out of service")
        if table.capacity < reservation.party_size:
            raise BadRequestError(
                detail=f"Table capacity ({table.capacity}) is less than party size ({reservation.party_size})"
            )

        booked = await self.detector.is_table_booked(
            table.id, TimeWindow.of(reservation), exclude_reservation_id=reservation.id
        )
        if booked:
            logger.info(
                "Table already booked",
                reservation_id=str(reservation.id),
                table_id=str(table.id),
            )
            raise ConflictError(detail=TABLE_BOOKED)

        reservation.table_id = table.id
        reservation.status = ReservationStatus.CONFIRMED.value
        await self._commit(TABLE_BOOKED)
        await self.db.refresh(reservation)

        logger.info(
            "Reservation approved",
            reservation_id=str(reservation.id),
            table_id=str(table.id),
        )
        await self._notify(NotificationKind.RESERVATION_CONFIRMED, reservation, table=table)
        return reservation

    async def reject(self, reservation_id: Union[UUID, str]) -> Reservation:
        reservation = await self._get(reservation_id)
        if reservation.status != ReservationStatus.PENDING:
            raise ConflictError(detail="Only pending reservations can be rejected")

        await self._cancel_pre_order(reservation)
        reservation.status = ReservationStatus.CANCELLED.value
        await self.db.commit()
        await self.db.refresh(reservation)

        logger.info("Reservation rejected", reservation_id=str(reservation.id))
        await self._notify(NotificationKind.RESERVATION_REJECTED, reservation)
        return reservation

    async def update(
        self,
        reservation_id: Union[UUID, str],
        patch: ReservationUpdate,
        requester_id: Union[UUID, str],
        requester_role: UserRole,
    ) -> Reservation:
        reservation = await self._get(reservation_id)
        authorize(
            requester_id,
            requester_role,
            reservation.user_id,
            detail="You can only update your own reservations",
        )
        if not reservation.is_active:
            raise ConflictError(detail=f"Cannot update a {reservation.status} reservation")

        changes = {
            field: value
            for field, value in patch.model_dump(exclude_unset=True).items()
            if value is not None
        }
        merged = {field: getattr(reservation, field) for field in EDITABLE_FIELDS}
        merged.update(changes)
        await self._validate(merged)

        slot_changed = any(merged[field] != getattr(reservation, field) for field in SLOT_FIELDS)
        if slot_changed:
            duplicate = await self._find_owner_duplicate(
                reservation.user_id,
                merged["reservation_date"],
                merged["reservation_time"],
                exclude_reservation_id=reservation.id,
            )
            if duplicate is not None:
                raise ConflictError(detail=DUPLICATE_BOOKING)

            if reservation.table_id is not None:
                window = TimeWindow.from_slot(
                    merged["reservation_date"],
                    merged["reservation_time"],
                    merged["duration_minutes"],
                )
                booked = await self.detector.is_table_booked(
                    reservation.table_id, window, exclude_reservation_id=reservation.id
                )
                if booked:
                    raise ConflictError(detail=SLOT_UNAVAILABLE)

        if reservation.table_id is not None and merged["party_size"] != reservation.party_size:
            table = await self.db.get(Table, reservation.table_id)
            if table is not None and table.capacity < merged["party_size"]:
                raise BadRequestError(
                    detail=f"Table capacity ({table.capacity}) is less than party size ({merged['party_size']})"
                )

        for field, value in changes.items():
            setattr(reservation, field, value)
        await self._commit(SLOT_UNAVAILABLE)
        await self.db.refresh(reservation)

        logger.info(
            "Reservation updated",
            reservation_id=str(reservation.id),
            fields=sorted(changes),
        )
        return reservation

    async def cancel(
        self,
        reservation_id: Union[UUID, str],
        requester_id: Union[UUID, str],
        requester_role: UserRole,
    ) -> Reservation:
        reservation = await self._get(reservation_id)
        authorize(
            requester_id,
            requester_role,
            reservation.user_id,
            detail="You can only cancel your own reservations",
        )
        if reservation.status == ReservationStatus.CANCELLED:
            raise ConflictError(detail="Reservation is already cancelled")
        if reservation.status == ReservationStatus.COMPLETED:
            raise ConflictError(detail="Completed reservations cannot be cancelled")

        await self._cancel_pre_order(reservation)
        reservation.status = ReservationStatus.CANCELLED.value
        await self.db.commit()
        await self.db.refresh(reservation)

        logger.info(
            "Reservation cancelled",
            reservation_id=str(reservation.id),
            cancelled_by=str(requester_id),
        )
        await self._notify(NotificationKind.RESERVATION_CANCELLED, reservation)
        return reservation

    async def complete(self, reservation_id: Union[UUID, str]) -> Reservation:
        reservation = await self._get(reservation_id)
        if reservation.status != ReservationStatus.CONFIRMED:
            raise ConflictError(detail="Only confirmed reservations can be completed")

        reservation.status = ReservationStatus.COMPLETED.value
        await self.db.commit()
        await self.db.refresh(reservation)

        logger.info("Reservation completed", reservation_id=str(reservation.id))
        return reservation

    async def delete(self, reservation_id: Union[UUID, str]) -> None:
        """Administrative purge"""
        reservation = await self._get(reservation_id)
        await self.db.delete(reservation)
        await self.db.commit()
        logger.info("Reservation deleted", reservation_id=str(reservation_id))

    # Helpers

    async def _get(self, reservation_id: Union[UUID, str]) -> Reservation:
        reservation_uuid = parse_id(reservation_id, "reservation")
        result = await self.db.execute(
            select(Reservation).where(Reservation.id == reservation_uuid)
        )
        reservation = result.scalar_one_or_none()
        if reservation is None:
            raise NotFoundError(detail=f"Reservation with ID {reservation_id} not found")
        return reservation

    async def _validate(self, candidate: Dict[str, Any]) -> None:
        result = await self.validator.validate(candidate)
        if not result.valid:
            raise ValidationFailedError(result.errors, message="Reservation validation failed")

    async def _find_owner_duplicate(
        self,
        user_id: UUID,
        reservation_date: str,
        reservation_time: str,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> Optional[Reservation]:
        query = select(Reservation).where(
            Reservation.user_id == user_id,
            Reservation.reservation_date == reservation_date,
            Reservation.reservation_time == reservation_time,
            Reservation.status.in_(ACTIVE_STATUSES),
        )
        if exclude_reservation_id is not None:
            query = query.where(Reservation.id != exclude_reservation_id)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def _cancel_pre_order(self, reservation: Reservation) -> None:
        await self.db.refresh(reservation, attribute_names=["pre_order"])
        pre_order = reservation.pre_order
        if pre_order is not None and pre_order.status != MenuOrderStatus.SERVED:
            pre_order.status = MenuOrderStatus.CANCELLED.value

    async def _commit(self, conflict_detail: str) -> None:
        """Commit, mapping a store-level uniqueness violation to a conflict"""
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning("Booking rejected by store constraint", detail=conflict_detail)
            raise ConflictError(detail=conflict_detail)

    async def _notify(
        self,
        kind: NotificationKind,
        reservation: Reservation,
        owner: Optional[User] = None,
        table: Optional[Table] = None,
    ) -> None:
        if self.notifier is None:
            return
        try:
            if owner is None:
                owner = await self.users.find_by_id(reservation.user_id)
            payload = reservation_payload(
                reservation,
                phone=owner.phone if owner else None,
                table_number=table.table_number if table else None,
            )
            await self.notifier.send(kind, payload)
        except Exception as e:
            logger.error(
                "Failed to send reservation notification",
                kind=kind.value,
                reservation_id=str(reservation.id),
                error=str(e),
            )
