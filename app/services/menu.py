"""Menu catalogue"""

from typing import List, Optional, Union
from uuid import UUID

import structlog
from sqlalchemy import select, or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import BadRequestError, NotFoundError
from app.models.menu import MenuItem, MenuCategory
from app.schemas.menu import MenuItemCreate, MenuItemUpdate
from app.services.ids import parse_id

logger = structlog.get_logger()


class MenuService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: MenuItemCreate) -> MenuItem:
        item = MenuItem(**data.model_dump(mode="json"))
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)

        logger.info("Menu item created", menu_item_id=str(item.id), category=item.category)
        return item

    async def list_items(
        self,
        category: Optional[str] = None,
        available: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[MenuItem]:
        """Browse the menu, optionally filtered; search matches name or description"""
        query = select(MenuItem)
        if category:
            query = query.where(MenuItem.category == self._category(category))
        if available is not None:
            query = query.where(MenuItem.is_available == available)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(MenuItem.name.ilike(pattern), MenuItem.description.ilike(pattern))
            )
        result = await self.db.execute(query.order_by(MenuItem.category, MenuItem.name))
        return list(result.scalars().all())

    async def list_by_category(self, category: str) -> List[MenuItem]:
        """Available items in one category, most ordered first"""
        result = await self.db.execute(
            select(MenuItem)
            .where(MenuItem.category == self._category(category), MenuItem.is_available.is_(True))
            .order_by(MenuItem.order_count.desc(), MenuItem.name)
        )
        return list(result.scalars().all())

    async def list_popular(self, limit: int = 10) -> List[MenuItem]:
        if limit < 1 or limit > 50:
            raise BadRequestError(detail="limit must be between 1 and 50")
        result = await self.db.execute(
            select(MenuItem)
            .where(MenuItem.is_available.is_(True))
            .order_by(MenuItem.order_count.desc(), MenuItem.name)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get(self, item_id: Union[UUID, str]) -> MenuItem:
        item_uuid = parse_id(item_id, "menu item")
        item = await self.db.get(MenuItem, item_uuid)
        if item is None:
            raise NotFoundError(detail=f"Menu item with ID {item_id} not found")
        return item

    async def update(self, item_id: Union[UUID, str], data: MenuItemUpdate) -> MenuItem:
        item = await self.get(item_id)
        changes = data.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(item, field, value)
        await self.db.commit()
        await self.db.refresh(item)

        logger.info("Menu item updated", menu_item_id=str(item.id), fields=sorted(changes))
        return item

    async def toggle_availability(self, item_id: Union[UUID, str]) -> MenuItem:
        item = await self.get(item_id)
        item.is_available = not item.is_available
        await self.db.commit()
        await self.db.refresh(item)

        logger.info("Menu item availability toggled", menu_item_id=str(item.id), is_available=item.is_available)
        return item

    async def delete(self, item_id: Union[UUID, str]) -> None:
        # Pre-orders keep their own copy of name and price
        item = await self.get(item_id)
        await self.db.delete(item)
        await self.db.commit()
        logger.info("Menu item deleted", menu_item_id=str(item_id))

    async def record_orders(self, item_ids: List[UUID]) -> None:
        """Bump popularity once per ordered line; caller commits"""
        for item_id in item_ids:
            await self.db.execute(
                update(MenuItem)
                .where(MenuItem.id == item_id)
                .values(order_count=MenuItem.order_count + 1)
            )

    @staticmethod
    def _category(value: str) -> str:
        try:
            return MenuCategory(value).value
        except ValueError:
            allowed = ", ".join(category.value for category in MenuCategory)
            raise BadRequestError(detail=f"Unknown category. Allowed categories: {allowed}")
