"""
Customer notifications

NotificationSender hands a rendered-on-delivery notification to the Celery
worker. Delivery is best-effort: callers catch and log any failure so a
booking never fails because a message could not be queued.
"""

import enum
from typing import Any, Dict

import structlog
from fastapi.concurrency import run_in_threadpool

from app.config import settings

logger = structlog.get_logger()


class NotificationKind(str, enum.Enum):
    RESERVATION_RECEIVED = "reservation_received"
    RESERVATION_CONFIRMED = "reservation_confirmed"
    RESERVATION_REJECTED = "reservation_rejected"
    RESERVATION_CANCELLED = "reservation_cancelled"
    RESERVATION_REMINDER = "reservation_reminder"


TEMPLATES = {
    NotificationKind.RESERVATION_RECEIVED: (
        "Hi {customer_name}, we received your request at {restaurant_name} for "
        "{party_size} guests on {reservation_date} at {reservation_time}. "
        "We'll let you know once it is confirmed."
    ),
    NotificationKind.RESERVATION_CONFIRMED: (
        "Your reservation at {restaurant_name} is confirmed! {party_size} guests on "
        "{reservation_date} at {reservation_time}, table {table_number}."
    ),
    NotificationKind.RESERVATION_REJECTED: (
        "Sorry {customer_name}, we could not accept your reservation at {restaurant_name} "
        "on {reservation_date} at {reservation_time}."
    ),
    NotificationKind.RESERVATION_CANCELLED: (
        "Your reservation at {restaurant_name} on {reservation_date} at "
        "{reservation_time} has been cancelled."
    ),
    NotificationKind.RESERVATION_REMINDER: (
        "Reminder: your reservation at {restaurant_name} is coming up! "
        "{party_size} guests on {reservation_date} at {reservation_time}. See you soon!"
    ),
}


class _Defaults(dict):
    def __missing__(self, key):
        return "TBD"


def render(kind: str, payload: Dict[str, Any]) -> str:
    """Render a notification body; unknown placeholders become TBD"""
    template = TEMPLATES[NotificationKind(kind)]
    values = _Defaults(restaurant_name=settings.restaurant_name)
    values.update({key: value for key, value in payload.items() if value is not None})
    return template.format_map(values)


def reservation_payload(reservation, phone=None, table_number=None) -> Dict[str, Any]:
    return {
        "reservation_id": str(reservation.id),
        "customer_name": reservation.customer_name,
        "customer_email": reservation.customer_email,
        "customer_phone": phone,
        "reservation_date": reservation.reservation_date,
        "reservation_time": reservation.reservation_time,
        "party_size": reservation.party_size,
        "table_number": table_number,
    }


class NotificationSender:
    """Queues notifications for asynchronous delivery"""

    async def send(self, kind: NotificationKind, payload: Dict[str, Any]) -> None:
        if not settings.notifications_enabled:
            logger.info("Notifications disabled, skipping", kind=kind.value)
            return

        from app.jobs.tasks import send_notification

        # Publishing to the broker is blocking I/O
        await run_in_threadpool(send_notification.delay, kind.value, payload)
        logger.info(
            "Notification queued",
            kind=kind.value,
            reservation_id=payload.get("reservation_id"),
        )


def get_notifier() -> NotificationSender:
    """Notification sender dependency"""
    return NotificationSender()
