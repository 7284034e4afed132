"""Guest feedback model"""

import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, JSON, Text, Index, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class FeedbackStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Feedback(Base):
    """Rating and review left after a completed reservation"""
    __tablename__ = "feedback"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_feedback_rating"),
        Index("ix_feedback_status_public", "status", "is_public"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    reservation_id = Column(
        UUID(as_uuid=True),
        ForeignKey("reservations.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)

    # Ratings, 1-5; only the overall rating is required
    rating = Column(Integer, nullable=False)
    food_quality = Column(Integer)
    service_quality = Column(Integer)
    ambience = Column(Integer)
    value_for_money = Column(Integer)

    title = Column(String(100))
    review = Column(Text, nullable=False)
    would_recommend = Column(Boolean, default=False, nullable=False)
    images = Column(JSON, default=list)

    # Restaurant reply
    admin_response = Column(Text)
    responded_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"))
    responded_at = Column(DateTime)

    # Moderation
    status = Column(String(20), nullable=False, default=FeedbackStatus.APPROVED.value)
    moderation_note = Column(Text)
    is_public = Column(Boolean, default=True, nullable=False)

    # Linked to a reservation the guest actually completed
    is_verified = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
