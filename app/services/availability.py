"""
Table availability

TableInventory finds tables big enough for a party, tightest fit first.
ConflictDetector finds active reservations whose [start, start + duration)
interval overlaps a requested window. Subtracting the detector's booked
table ids from the inventory's candidates gives the tables that can
actually be offered.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.reservation import Reservation, ACTIVE_STATUSES, DATE_FORMAT, TIME_FORMAT
from app.models.table import Table


def parse_date(value: str) -> date:
    return datetime.strptime(value, DATE_FORMAT).date()


def parse_time(value: str) -> time:
    return datetime.strptime(value, TIME_FORMAT).time()


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval [start, end)"""
    start: datetime
    end: datetime

    @classmethod
    def from_slot(cls, reservation_date: str, reservation_time: str, duration_minutes: int) -> "TimeWindow":
        start = datetime.combine(parse_date(reservation_date), parse_time(reservation_time))
        return cls(start=start, end=start + timedelta(minutes=duration_minutes))

    @classmethod
    def from_hours(cls, reservation_date: str, from_hour: int, to_hour: int) -> "TimeWindow":
        day = datetime.combine(parse_date(reservation_date), time())
        return cls(start=day + timedelta(hours=from_hour), end=day + timedelta(hours=to_hour))

    @classmethod
    def of(cls, reservation: Reservation) -> "TimeWindow":
        return cls(start=reservation.start_datetime, end=reservation.end_datetime)

    def overlaps(self, other: "TimeWindow") -> bool:
        return self.start < other.end and other.start < self.end

    def days(self) -> List[str]:
        """Calendar days whose reservations could reach into this window"""
        first = self.start.date() - timedelta(days=1)
        last = self.end.date()
        span = (last - first).days
        return [(first + timedelta(days=offset)).strftime(DATE_FORMAT) for offset in range(span + 1)]


class TableInventory:
    """Read-only lookup over the table inventory"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_candidates(self, min_capacity: int, require_in_service: bool = True) -> List[Table]:
        query = select(Table).where(Table.capacity >= min_capacity)
        if require_in_service:
            query = query.where(Table.is_available == True)  # noqa: E712
        query = query.order_by(Table.capacity.asc(), Table.table_number.asc())

        result = await self.db.execute(query)
        return list(result.scalars().all())


class ConflictDetector:
    """Finds reservations occupying an overlapping time window"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_conflicts(
        self,
        window: TimeWindow,
        statuses: Iterable[str] = ACTIVE_STATUSES,
        exclude_reservation_id: Optional[UUID] = None,
        table_id: Optional[UUID] = None,
    ) -> List[Reservation]:
        query = select(Reservation).where(
            Reservation.reservation_date.in_(window.days()),
            Reservation.status.in_(list(statuses)),
        )
        if exclude_reservation_id is not None:
            query = query.where(Reservation.id != exclude_reservation_id)
        if table_id is not None:
            query = query.where(Reservation.table_id == table_id)

        result = await self.db.execute(query)
        return [
            reservation
            for reservation in result.scalars().all()
            if window.overlaps(TimeWindow.of(reservation))
        ]

    async def find_booked_table_ids(
        self,
        window: TimeWindow,
        statuses: Iterable[str] = ACTIVE_STATUSES,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> Set[UUID]:
        conflicts = await self.find_conflicts(
            window, statuses=statuses, exclude_reservation_id=exclude_reservation_id
        )
        return {reservation.table_id for reservation in conflicts if reservation.table_id is not None}

    async def is_table_booked(
        self,
        table_id: UUID,
        window: TimeWindow,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> bool:
        conflicts = await self.find_conflicts(
            window, exclude_reservation_id=exclude_reservation_id, table_id=table_id
        )
        return bool(conflicts)


async def find_available_tables(
    db: AsyncSession,
    window: TimeWindow,
    party_size: int,
    exclude_reservation_id: Optional[UUID] = None,
) -> Tuple[List[Table], List[Table]]:
    """Return (suitable, available) tables for a party in a window"""
    suitable = await TableInventory(db).find_candidates(party_size, require_in_service=True)
    booked = await ConflictDetector(db).find_booked_table_ids(
        window, exclude_reservation_id=exclude_reservation_id
    )
    available = [table for table in suitable if table.id not in booked]
    return suitable, available
