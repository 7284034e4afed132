"""Payment schemas"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID
from pydantic import BaseModel

from app.models.payment import PaymentStatus


class PaymentCreate(BaseModel):
    """Create payment request.

    Left untyped so the payment validators see the raw values and report every
    problem in one response, including non-numeric or non-finite amounts.
    """
    reservation_id: Optional[str] = None
    amount: Any = None
    method: Any = None


class PaymentUpdate(BaseModel):
    """Staff correction of a payment; status changes go through complete/fail"""
    amount: Any = None
    status: Optional[PaymentStatus] = None


class PaymentResponse(BaseModel):
    """Payment response"""
    id: UUID
    reservation_id: UUID
    customer_id: UUID
    amount: float
    method: str
    status: str
    completed_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True
