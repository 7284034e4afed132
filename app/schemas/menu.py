"""Menu schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field

from app.models.menu import MenuCategory


class MenuItemCreate(BaseModel):
    """Create menu item request"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: MenuCategory
    price_cents: int = Field(..., ge=0)
    is_available: bool = True
    preparation_time_minutes: Optional[int] = Field(None, ge=0)
    calories: Optional[int] = Field(None, ge=0)
    allergens: List[str] = []
    tags: List[str] = []
    image_url: Optional[str] = None


class MenuItemUpdate(BaseModel):
    """Update menu item request"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[MenuCategory] = None
    price_cents: Optional[int] = Field(None, ge=0)
    is_available: Optional[bool] = None
    preparation_time_minutes: Optional[int] = Field(None, ge=0)
    calories: Optional[int] = Field(None, ge=0)
    allergens: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    image_url: Optional[str] = None


class MenuItemResponse(BaseModel):
    """Menu item response"""
    id: UUID
    name: str
    description: Optional[str]
    category: str
    price_cents: int
    is_available: bool
    preparation_time_minutes: Optional[int]
    calories: Optional[int]
    allergens: List[str]
    tags: List[str]
    image_url: Optional[str]
    order_count: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
