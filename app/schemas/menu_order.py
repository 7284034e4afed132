"""Pre-order schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field

from app.models.menu_order import MenuOrderStatus


class PreOrderLine(BaseModel):
    """One dish in a pre-order request"""
    menu_item_id: str
    quantity: int = Field(..., ge=1)
    special_instructions: Optional[str] = None
    allergy_note: Optional[str] = None


class PreOrderCreate(BaseModel):
    """Create pre-order request"""
    items: List[PreOrderLine] = Field(..., min_length=1)
    special_requests: Optional[str] = None
    dietary_restrictions: Optional[str] = None


class PreOrderUpdate(BaseModel):
    """Update pre-order request; items, when given, replace the whole order"""
    items: Optional[List[PreOrderLine]] = Field(None, min_length=1)
    special_requests: Optional[str] = None
    dietary_restrictions: Optional[str] = None


class PreOrderStatusUpdate(BaseModel):
    status: MenuOrderStatus


class PreOrderLineResponse(BaseModel):
    menu_item_id: UUID
    name: str
    quantity: int
    price_cents: int
    special_instructions: Optional[str] = None
    allergy_note: Optional[str] = None


class MenuOrderResponse(BaseModel):
    """Pre-order response"""
    id: UUID
    reservation_id: UUID
    user_id: UUID
    items: List[PreOrderLineResponse] = Field(validation_alias="items_json")
    total_cents: int
    estimated_preparation_minutes: Optional[int]
    status: str
    special_requests: Optional[str]
    dietary_restrictions: Optional[str]
    is_paid: bool
    confirmed_at: Optional[datetime]
    prepared_at: Optional[datetime]
    served_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
