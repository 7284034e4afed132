"""
Meal pre-orders

A guest may attach one pre-order to an active reservation. Dish names and
prices are copied into the order when it is placed, so later menu edits do
not change what was ordered. The kitchen moves an order forward:

    pending -> confirmed -> preparing -> ready -> served

and any order that has not been served can be cancelled. Guests may only
edit an order while it is still pending.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Tuple, Union
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import BadRequestError, ConflictError, NotFoundError
from app.models.menu import MenuItem
from app.models.menu_order import MenuOrder, MenuOrderStatus
from app.models.reservation import Reservation, DATE_FORMAT
from app.models.user import UserRole
from app.schemas.menu_order import PreOrderCreate, PreOrderLine, PreOrderStatusUpdate, PreOrderUpdate
from app.services.authorization import authorize, STAFF_ROLES
from app.services.ids import parse_id
from app.services.menu import MenuService

logger = structlog.get_logger()

PRE_ORDER_EXISTS = "Pre-order already exists for this reservation"

# Kitchen progression; cancelled is reachable from every non-final state
NEXT_STATUS = {
    MenuOrderStatus.PENDING: MenuOrderStatus.CONFIRMED,
    MenuOrderStatus.CONFIRMED: MenuOrderStatus.PREPARING,
    MenuOrderStatus.PREPARING: MenuOrderStatus.READY,
    MenuOrderStatus.READY: MenuOrderStatus.SERVED,
}
FINAL_STATUSES = (MenuOrderStatus.SERVED, MenuOrderStatus.CANCELLED)


class MenuOrderService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.menu = MenuService(db)

    async def create(
        self,
        reservation_id: Union[UUID, str],
        data: PreOrderCreate,
        requester_id: Union[UUID, str],
        requester_role: UserRole,
    ) -> MenuOrder:
        reservation = await self._get_reservation(reservation_id)
        authorize(
            requester_id,
            requester_role,
            reservation.user_id,
            detail="You can only pre-order for your own reservations",
        )
        if not reservation.is_active:
            raise ConflictError(detail=f"Cannot pre-order for a {reservation.status} reservation")

        order = await self._find(reservation.id)
        if order is not None and order.status != MenuOrderStatus.CANCELLED:
            raise ConflictError(detail=PRE_ORDER_EXISTS)

        lines, total, prep_minutes = await self._price(data.items)
        if order is None:
            order = MenuOrder(reservation_id=reservation.id, user_id=reservation.user_id)
            self.db.add(order)
        else:
            # A cancelled order is replaced in place
            order.confirmed_at = order.prepared_at = order.served_at = None

        order.items_json = lines
        order.total_cents = total
        order.estimated_preparation_minutes = prep_minutes
        order.special_requests = data.special_requests
        order.dietary_restrictions = data.dietary_restrictions
        order.status = MenuOrderStatus.PENDING.value

        try:
            await self.menu.record_orders([UUID(line["menu_item_id"]) for line in lines])
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(detail=PRE_ORDER_EXISTS)
        await self.db.refresh(order)

        logger.info(
            "Pre-order placed",
            menu_order_id=str(order.id),
            reservation_id=str(reservation.id),
            total_cents=total,
        )
        return order

    async def get_for_reservation(
        self,
        reservation_id: Union[UUID, str],
        requester_id: Union[UUID, str],
        requester_role: UserRole,
    ) -> MenuOrder:
        reservation = await self._get_reservation(reservation_id)
        authorize(
            requester_id,
            requester_role,
            reservation.user_id,
            required_roles=STAFF_ROLES,
            detail="You can only view pre-orders for your own reservations",
        )
        return await self._require(reservation.id)

    async def update(
        self,
        reservation_id: Union[UUID, str],
        data: PreOrderUpdate,
        requester_id: Union[UUID, str],
        requester_role: UserRole,
    ) -> MenuOrder:
        reservation = await self._get_reservation(reservation_id)
        authorize(
            requester_id,
            requester_role,
            reservation.user_id,
            detail="You can only change pre-orders for your own reservations",
        )
        order = await self._require(reservation.id)
        if order.status != MenuOrderStatus.PENDING:
            raise ConflictError(detail="Cannot update a pre-order after it has been confirmed")

        if data.items is not None:
            lines, total, prep_minutes = await self._price(data.items)
            order.items_json = lines
            order.total_cents = total
            order.estimated_preparation_minutes = prep_minutes
        if data.special_requests is not None:
            order.special_requests = data.special_requests
        if data.dietary_restrictions is not None:
            order.dietary_restrictions = data.dietary_restrictions

        await self.db.commit()
        await self.db.refresh(order)

        logger.info("Pre-order updated", menu_order_id=str(order.id))
        return order

    async def cancel(
        self,
        reservation_id: Union[UUID, str],
        requester_id: Union[UUID, str],
        requester_role: UserRole,
    ) -> MenuOrder:
        reservation = await self._get_reservation(reservation_id)
        authorize(
            requester_id,
            requester_role,
            reservation.user_id,
            detail="You can only cancel pre-orders for your own reservations",
        )
        order = await self._require(reservation.id)
        return await self._move(order, MenuOrderStatus.CANCELLED)

    async def set_status(self, order_id: Union[UUID, str], data: PreOrderStatusUpdate) -> MenuOrder:
        """Kitchen progress update"""
        order_uuid = parse_id(order_id, "order")
        order = await self.db.get(MenuOrder, order_uuid)
        if order is None:
            raise NotFoundError(detail=f"Pre-order with ID {order_id} not found")
        return await self._move(order, data.status)

    async def list_for_day(self, day: Optional[str] = None) -> List[MenuOrder]:
        """Open pre-orders for reservations on one day, earliest seating first"""
        if day is None:
            day = date.today().strftime(DATE_FORMAT)
        else:
            try:
                datetime.strptime(day, DATE_FORMAT)
            except ValueError:
                raise BadRequestError(detail="Date must be in YYYY-MM-DD format")

        result = await self.db.execute(
            select(MenuOrder)
            .join(Reservation, MenuOrder.reservation_id == Reservation.id)
            .where(
                Reservation.reservation_date == day,
                MenuOrder.status != MenuOrderStatus.CANCELLED.value,
            )
            .order_by(Reservation.reservation_time.asc(), MenuOrder.created_at.asc())
        )
        return list(result.scalars().all())

    # Helpers

    async def _move(self, order: MenuOrder, target: MenuOrderStatus) -> MenuOrder:
        current = MenuOrderStatus(order.status)
        if current in FINAL_STATUSES:
            raise ConflictError(detail=f"Pre-order is already {current.value}")
        if target != MenuOrderStatus.CANCELLED and NEXT_STATUS.get(current) != target:
            raise ConflictError(
                detail=f"Cannot move a pre-order from {current.value} to {target.value}"
            )

        now = datetime.utcnow()
        order.status = target.value
        if target == MenuOrderStatus.CONFIRMED:
            order.confirmed_at = now
        elif target == MenuOrderStatus.READY:
            order.prepared_at = now
        elif target == MenuOrderStatus.SERVED:
            order.served_at = now

        await self.db.commit()
        await self.db.refresh(order)

        logger.info("Pre-order status changed", menu_order_id=str(order.id), status=order.status)
        return order

    async def _price(self, lines: List[PreOrderLine]) -> Tuple[List[Dict], int, int]:
        """Resolve dishes, snapshot name and price, and total the order"""
        priced = []
        total = 0
        prep_minutes = 0
        for line in lines:
            item: MenuItem = await self.menu.get(line.menu_item_id)
            if not item.is_available:
                raise BadRequestError(detail=f'Menu item "{item.name}" is currently unavailable')

            total += item.price_cents * line.quantity
            prep_minutes = max(prep_minutes, item.preparation_time_minutes or 0)
            priced.append({
                "menu_item_id": str(item.id),
                "name": item.name,
                "quantity": line.quantity,
                "price_cents": item.price_cents,
                "special_instructions": line.special_instructions,
                "allergy_note": line.allergy_note,
            })
        return priced, total, prep_minutes

    async def _find(self, reservation_id: UUID) -> Optional[MenuOrder]:
        result = await self.db.execute(
            select(MenuOrder).where(MenuOrder.reservation_id == reservation_id)
        )
        return result.scalar_one_or_none()

    async def _require(self, reservation_id: UUID) -> MenuOrder:
        order = await self._find(reservation_id)
        if order is None:
            raise NotFoundError(detail="Pre-order not found for this reservation")
        return order

    async def _get_reservation(self, reservation_id: Union[UUID, str]) -> Reservation:
        reservation_uuid = parse_id(reservation_id, "reservation")
        reservation = await self.db.get(Reservation, reservation_uuid)
        if reservation is None:
            raise NotFoundError(detail=f"Reservation with ID {reservation_id} not found")
        return reservation
