"""Reservation schemas"""

from datetime import datetime
from typing import Any, Optional, List
from uuid import UUID
from pydantic import BaseModel


class ReservationCreate(BaseModel):
    """Create reservation request.

    Slot fields are left untyped: the reservation validators check them and
    report every violation together, including wrongly typed values. The
    customer email always comes from the authenticated account.
    """
    customer_name: Optional[str] = None
    reservation_date: Any = None
    reservation_time: Any = None
    party_size: Any = None
    duration_minutes: Any = None


class ReservationUpdate(BaseModel):
    """Update reservation request"""
    customer_name: Optional[str] = None
    reservation_date: Any = None
    reservation_time: Any = None
    party_size: Any = None
    duration_minutes: Any = None


class ApproveReservationRequest(BaseModel):
    """Approve a pending reservation onto a table"""
    table_id: str


class ReservationResponse(BaseModel):
    """Reservation response"""
    id: UUID
    user_id: UUID
    table_id: Optional[UUID]
    customer_name: str
    customer_email: str
    reservation_date: str
    reservation_time: str
    duration_minutes: int
    end_time: str
    party_size: int
    status: str
    reminder_sent_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AvailableTable(BaseModel):
    """Table offered for a slot"""
    id: UUID
    table_number: str
    capacity: int
    location: Optional[str] = None

    class Config:
        from_attributes = True


class AvailabilityResponse(BaseModel):
    """Availability check response"""
    date: str
    time: str
    end_time: str
    party_size: int
    total_suitable_tables: int
    booked_tables: int
    available_tables: List[AvailableTable] = []
    has_availability: bool


class MessageResponse(BaseModel):
    message: str
