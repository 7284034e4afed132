"""Table schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field


class TableCreate(BaseModel):
    """Create table request"""
    table_number: str = Field(..., min_length=1, max_length=20)
    capacity: int
    is_available: bool = True
    location: Optional[str] = None


class TableUpdate(BaseModel):
    """Update table request"""
    table_number: Optional[str] = Field(None, min_length=1, max_length=20)
    capacity: Optional[int] = None
    is_available: Optional[bool] = None
    location: Optional[str] = None


class TableAvailabilityUpdate(BaseModel):
    is_available: bool


class TableResponse(BaseModel):
    """Table response"""
    id: UUID
    table_number: str
    capacity: int
    is_available: bool
    location: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TableWindowAvailability(BaseModel):
    """Tables free during an hour range"""
    date: str
    time_range: str
    total_tables: int
    booked_tables: int
    available_tables: List[TableResponse] = []
    available_count: int
