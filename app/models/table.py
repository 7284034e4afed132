"""Dining table model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class Table(Base):
    """Bookable dining table"""
    __tablename__ = "tables"
    __table_args__ = (
        CheckConstraint("capacity BETWEEN 1 AND 20", name="ck_tables_capacity"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    table_number = Column(String(20), unique=True, nullable=False)
    capacity = Column(Integer, nullable=False)

    # In service / taken out of service; independent of bookings
    is_available = Column(Boolean, default=True, nullable=False)

    location = Column(String(100))  # patio, main room, bar

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    reservations = relationship("Reservation", back_populates="table", passive_deletes=True)
