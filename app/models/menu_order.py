"""Pre-order model"""

import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, JSON, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class MenuOrderStatus(str, enum.Enum):
    """Kitchen progress of a pre-order"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"
    CANCELLED = "cancelled"


class MenuOrder(Base):
    """Meal pre-ordered for a reservation; at most one per reservation"""
    __tablename__ = "menu_orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    reservation_id = Column(
        UUID(as_uuid=True),
        ForeignKey("reservations.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)

    # [{"menu_item_id": "...", "name": "...", "quantity": 2, "price_cents": 1450,
    #   "special_instructions": "...", "allergy_note": "..."}, ...]
    # Name and price are captured at order time.
    items_json = Column(JSON, nullable=False)
    total_cents = Column(Integer, nullable=False, default=0)
    estimated_preparation_minutes = Column(Integer, default=0)

    status = Column(String(20), nullable=False, default=MenuOrderStatus.PENDING.value)

    special_requests = Column(Text)
    dietary_restrictions = Column(Text)
    is_paid = Column(Boolean, default=False, nullable=False)

    confirmed_at = Column(DateTime)
    prepared_at = Column(DateTime)
    served_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    reservation = relationship("Reservation", back_populates="pre_order")
