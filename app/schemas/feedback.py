"""Feedback schemas"""

from datetime import datetime
from typing import Any, Literal, Optional, List
from uuid import UUID
from pydantic import BaseModel, Field


class FeedbackCreate(BaseModel):
    """Submit feedback request.

    Ratings and text lengths are checked by the feedback validators so every
    problem is reported at once.
    """
    reservation_id: Optional[str] = None
    rating: Any = None
    food_quality: Any = None
    service_quality: Any = None
    ambience: Any = None
    value_for_money: Any = None
    review: Any = None
    title: Any = None
    would_recommend: bool = False
    images: List[str] = []


class FeedbackReply(BaseModel):
    admin_response: str = Field(..., min_length=10, max_length=500)


class FeedbackModeration(BaseModel):
    status: Literal["approved", "rejected"]
    moderation_note: Optional[str] = None


class FeedbackResponse(BaseModel):
    """Feedback response"""
    id: UUID
    reservation_id: UUID
    user_id: UUID
    rating: int
    food_quality: Optional[int]
    service_quality: Optional[int]
    ambience: Optional[int]
    value_for_money: Optional[int]
    title: Optional[str]
    review: str
    would_recommend: bool
    images: List[str]
    admin_response: Optional[str]
    responded_by: Optional[UUID]
    responded_at: Optional[datetime]
    status: str
    moderation_note: Optional[str]
    is_public: bool
    is_verified: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
