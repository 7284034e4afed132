"""Background job tasks"""

from datetime import datetime, timedelta
from typing import Any, Dict, List
import asyncio
import structlog

from sqlalchemy import select

from app.jobs.celery_app import celery_app
from app.config import settings
from app.models.reservation import Reservation, ReservationStatus, DATE_FORMAT
from app.notifications import NotificationKind, render, reservation_payload
from app.services.users import UserDirectory

logger = structlog.get_logger()


def run_async(coro):
    """Helper to run async functions in sync context"""
    return asyncio.run(coro)


def deliver(kind: str, payload: Dict[str, Any]) -> bool:
    """Send a rendered notification by SMS. Returns True when a message went out."""
    to = payload.get("customer_phone")
    if not to:
        logger.info("No phone on file, notification skipped", kind=kind)
        return False
    if not settings.twilio_configured:
        logger.info("Twilio not configured, notification skipped", kind=kind)
        return False

    from twilio.rest import Client as TwilioClient

    client = TwilioClient(settings.twilio_account_sid, settings.twilio_auth_token)
    client.messages.create(
        body=render(kind, payload),
        from_=settings.twilio_phone_number,
        to=to,
    )
    return True


@celery_app.task(name="send_notification")
def send_notification(kind: str, payload: Dict[str, Any]):
    """Deliver a single customer notification"""
    try:
        if deliver(kind, payload):
            logger.info(
                "Notification sent",
                kind=kind,
                reservation_id=payload.get("reservation_id"),
                to=payload["customer_phone"][-4:],  # Log last 4 digits only
            )
    except Exception as e:
        logger.error(
            "Failed to send notification",
            kind=kind,
            reservation_id=payload.get("reservation_id"),
            error=str(e),
        )


async def find_due_reminders(db, target_date: str) -> List[Reservation]:
    """Confirmed reservations on target_date that have not been reminded"""
    result = await db.execute(
        select(Reservation).where(
            Reservation.reservation_date == target_date,
            Reservation.status == ReservationStatus.CONFIRMED.value,
            Reservation.reminder_sent_at.is_(None),
        )
    )
    return list(result.scalars().all())


async def dispatch_reminders(db, today=None) -> int:
    """Remind owners of confirmed reservations reminder_lead_days ahead"""
    today = today or datetime.now().date()
    target_date = (today + timedelta(days=settings.reminder_lead_days)).strftime(DATE_FORMAT)
    reservations = await find_due_reminders(db, target_date)
    directory = UserDirectory(db)

    sent = 0
    for reservation in reservations:
        try:
            owner = await directory.find_by_id(reservation.user_id)
            payload = reservation_payload(reservation, phone=owner.phone if owner else None)
            if deliver(NotificationKind.RESERVATION_REMINDER.value, payload):
                reservation.reminder_sent_at = datetime.utcnow()
                await db.commit()
                sent += 1
                logger.info("Sent reservation reminder", reservation_id=str(reservation.id))
        except Exception as e:
            logger.error(
                "Failed to send reservation reminder",
                reservation_id=str(reservation.id),
                error=str(e),
            )
    return sent


@celery_app.task(name="send_reservation_reminders")
def send_reservation_reminders():
    """Send reminders for tomorrow's confirmed reservations"""
    logger.info("Sending reservation reminders")

    async def _send_reminders():
        from app.database import SessionLocal

        async with SessionLocal() as db:
            sent = await dispatch_reminders(db)
            logger.info("Reservation reminders done", sent=sent)

    run_async(_send_reminders())


async def complete_finished(db, now=None) -> int:
    """Mark confirmed reservations whose slot has ended as completed"""
    now = now or datetime.now()
    result = await db.execute(
        select(Reservation).where(
            Reservation.status == ReservationStatus.CONFIRMED.value,
            Reservation.reservation_date <= now.strftime(DATE_FORMAT),
        )
    )

    completed = 0
    for reservation in result.scalars().all():
        if reservation.end_datetime <= now:
            reservation.status = ReservationStatus.COMPLETED.value
            completed += 1

    if completed:
        await db.commit()
    return completed


@celery_app.task(name="complete_finished_reservations")
def complete_finished_reservations():
    """Move finished visits from confirmed to completed"""
    logger.info("Completing finished reservations")

    async def _complete():
        from app.database import SessionLocal

        async with SessionLocal() as db:
            completed = await complete_finished(db)
            logger.info("Completed finished reservations", completed_count=completed)

    run_async(_complete())
