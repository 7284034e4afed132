"""Menu item model"""

import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, Text, Index, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class MenuCategory(str, enum.Enum):
    APPETIZER = "appetizer"
    MAIN_COURSE = "main"
    DESSERT = "dessert"
    BEVERAGE = "beverage"
    SPECIAL = "special"


class MenuItem(Base):
    """Dishes and drinks guests can browse and pre-order"""
    __tablename__ = "menu_items"
    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="ck_menu_items_price"),
        Index("ix_menu_items_category_available", "category", "is_available"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(20), nullable=False)
    price_cents = Column(Integer, nullable=False)  # Price in cents to avoid float issues

    # Temporarily off the menu (sold out, seasonal)
    is_available = Column(Boolean, default=True, nullable=False)

    preparation_time_minutes = Column(Integer)
    calories = Column(Integer)
    allergens = Column(JSON, default=list)  # ["nuts", "dairy", ...]
    tags = Column(JSON, default=list)  # ["vegetarian", "spicy", ...]
    image_url = Column(String(500))

    # Popularity, bumped once per pre-ordered line
    order_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
