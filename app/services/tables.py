"""Table inventory management"""

from typing import Any, Dict, List, Union
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import BadRequestError, ConflictError, NotFoundError
from app.models.reservation import Reservation, ACTIVE_STATUSES
from app.models.table import Table
from app.schemas.table import TableCreate, TableUpdate
from app.services.availability import ConflictDetector, TableInventory, TimeWindow, parse_date
from app.services.ids import parse_id

logger = structlog.get_logger()

MIN_CAPACITY = 1
MAX_CAPACITY = 20


def _check_capacity(capacity: int) -> None:
    if capacity < MIN_CAPACITY or capacity > MAX_CAPACITY:
        raise BadRequestError(
            detail=f"Table capacity must be between {MIN_CAPACITY} and {MAX_CAPACITY}"
        )


class TableService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: TableCreate) -> Table:
        _check_capacity(data.capacity)
        await self._ensure_number_free(data.table_number)

        table = Table(**data.model_dump())
        self.db.add(table)
        await self._commit(data.table_number)
        await self.db.refresh(table)

        logger.info("Table created", table_id=str(table.id), table_number=table.table_number)
        return table

    async def list_all(self) -> List[Table]:
        result = await self.db.execute(
            select(Table).order_by(Table.capacity.asc(), Table.table_number.asc())
        )
        return list(result.scalars().all())

    async def get(self, table_id: Union[UUID, str]) -> Table:
        table_uuid = parse_id(table_id, "table")
        result = await self.db.execute(select(Table).where(Table.id == table_uuid))
        table = result.scalar_one_or_none()
        if table is None:
            raise NotFoundError(detail=f"Table with ID {table_id} not found")
        return table

    async def update(self, table_id: Union[UUID, str], data: TableUpdate) -> Table:
        table = await self.get(table_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "capacity" in changes:
            _check_capacity(changes["capacity"])
            await self._ensure_fits_bookings(table, changes["capacity"])
        if "table_number" in changes and changes["table_number"] != table.table_number:
            await self._ensure_number_free(changes["table_number"])

        for field, value in changes.items():
            setattr(table, field, value)
        await self._commit(changes.get("table_number", table.table_number))
        await self.db.refresh(table)

        logger.info("Table updated", table_id=str(table.id), fields=sorted(changes))
        return table

    async def set_availability(self, table_id: Union[UUID, str], is_available: bool) -> Table:
        """Take a table in or out of service"""
        table = await self.get(table_id)
        table.is_available = is_available
        await self.db.commit()
        await self.db.refresh(table)

        logger.info("Table service status changed", table_id=str(table.id), is_available=is_available)
        return table

    async def delete(self, table_id: Union[UUID, str]) -> None:
        table = await self.get(table_id)

        result = await self.db.execute(
            select(Reservation.id).where(
                Reservation.table_id == table.id,
                Reservation.status.in_(ACTIVE_STATUSES),
            )
        )
        if result.first() is not None:
            raise ConflictError(detail="Table has active reservations and cannot be deleted")

        await self.db.delete(table)
        await self.db.commit()
        logger.info("Table deleted", table_id=str(table_id))

    async def find_available(self, reservation_date: str, from_hour: int, to_hour: int) -> Dict[str, Any]:
        """In-service tables with no active booking overlapping [from_hour, to_hour)"""
        if not (0 <= from_hour <= 23 and 0 <= to_hour <= 23):
            raise BadRequestError(detail="Hours must be between 0 and 23")
        if from_hour >= to_hour:
            raise BadRequestError(detail="from_hour must be less than to_hour")
        try:
            parse_date(reservation_date)
        except ValueError:
            raise BadRequestError(detail="Date must be in YYYY-MM-DD format")

        window = TimeWindow.from_hours(reservation_date, from_hour, to_hour)
        tables = await TableInventory(self.db).find_candidates(MIN_CAPACITY)
        booked = await ConflictDetector(self.db).find_booked_table_ids(window)
        available = [table for table in tables if table.id not in booked]

        return {
            "date": reservation_date,
            "time_range": f"{from_hour:02d}:00 - {to_hour:02d}:00",
            "total_tables": len(tables),
            "booked_tables": len(tables) - len(available),
            "available_tables": available,
            "available_count": len(available),
        }

    async def _ensure_fits_bookings(self, table: Table, capacity: int) -> None:
        """Active bookings on the table must still fit after a capacity change"""
        result = await self.db.execute(
            select(Reservation.id).where(
                Reservation.table_id == table.id,
                Reservation.status.in_(ACTIVE_STATUSES),
                Reservation.party_size > capacity,
            )
        )
        if result.first() is not None:
            raise ConflictError(
                detail=f"Table has active reservations for parties larger than {capacity}"
            )

    async def _ensure_number_free(self, table_number: str) -> None:
        result = await self.db.execute(select(Table).where(Table.table_number == table_number))
        if result.scalar_one_or_none() is not None:
            raise ConflictError(detail=f"Table {table_number} already exists")

    async def _commit(self, table_number: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(detail=f"Table {table_number} already exists")
