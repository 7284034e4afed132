"""Reservation model"""

import uuid
import enum
from datetime import datetime, timedelta
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Index, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


class ReservationStatus(str, enum.Enum):
    """Reservation lifecycle states"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Reservations still holding a slot
ACTIVE_STATUSES = (ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value)

_ACTIVE_CLAUSE = "status IN ('pending', 'confirmed')"
_TABLE_SLOT_CLAUSE = _ACTIVE_CLAUSE + " AND table_id IS NOT NULL"


class Reservation(Base):
    """Table reservations"""
    __tablename__ = "reservations"
    __table_args__ = (
        # One active booking per table and exact slot
        Index(
            "uq_reservations_active_table_slot",
            "table_id",
            "reservation_date",
            "reservation_time",
            unique=True,
            postgresql_where=text(_TABLE_SLOT_CLAUSE),
            sqlite_where=text(_TABLE_SLOT_CLAUSE),
        ),
        # Duplicate-submission guard per owner
        Index(
            "uq_reservations_active_owner_slot",
            "user_id",
            "reservation_date",
            "reservation_time",
            unique=True,
            postgresql_where=text(_ACTIVE_CLAUSE),
            sqlite_where=text(_ACTIVE_CLAUSE),
        ),
        Index("ix_reservations_date_status", "reservation_date", "status"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    table_id = Column(UUID(as_uuid=True), ForeignKey("tables.id", ondelete="SET NULL"))

    # Customer information (email always copied from the owner's account)
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False)

    # Slot: calendar day "YYYY-MM-DD", wall-clock "HH:MM"
    reservation_date = Column(String(10), nullable=False)
    reservation_time = Column(String(5), nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=120)
    party_size = Column(Integer, nullable=False)

    # Status
    status = Column(String(20), nullable=False, default=ReservationStatus.PENDING.value)

    reminder_sent_at = Column(DateTime)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="reservations")
    table = relationship("Table", back_populates="reservations")
    payments = relationship(
        "Payment", back_populates="reservation", cascade="all, delete-orphan", passive_deletes=True
    )
    pre_order = relationship(
        "MenuOrder",
        back_populates="reservation",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def start_datetime(self) -> datetime:
        return datetime.strptime(
            f"{self.reservation_date} {self.reservation_time}",
            f"{DATE_FORMAT} {TIME_FORMAT}",
        )

    @property
    def end_datetime(self) -> datetime:
        return self.start_datetime + timedelta(minutes=self.duration_minutes)

    @property
    def end_time(self) -> str:
        """Derived end time, wall-clock"""
        return self.end_datetime.strftime(TIME_FORMAT)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
