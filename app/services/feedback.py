"""
Guest feedback

Guests rate a reservation once it is completed. Feedback is published
straight away; an admin can reply to it or hide it through moderation.
"""

from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, NotFoundError, ValidationFailedError
from app.models.feedback import Feedback, FeedbackStatus
from app.models.reservation import Reservation, ReservationStatus
from app.models.user import UserRole
from app.schemas.feedback import FeedbackCreate, FeedbackModeration
from app.services.authorization import authorize, STAFF_ROLES
from app.services.ids import parse_id
from app.services.validators import CompositeValidator, feedback_validator

logger = structlog.get_logger()

ALREADY_SUBMITTED = "Feedback already submitted for this reservation"


class FeedbackService:
    def __init__(self, db: AsyncSession, validator: Optional[CompositeValidator] = None):
        self.db = db
        self.validator = validator or feedback_validator()

    async def create(self, data: FeedbackCreate, requester_id: Union[UUID, str]) -> Feedback:
        candidate = data.model_dump()
        result = await self.validator.validate(candidate)
        if not result.valid:
            raise ValidationFailedError(result.errors, message="Feedback validation failed")

        reservation = await self._get_reservation(data.reservation_id)
        authorize(
            requester_id,
            None,
            reservation.user_id,
            detail="You can only review your own reservations",
        )
        if reservation.status != ReservationStatus.COMPLETED:
            raise ConflictError(detail="Feedback can only be left for completed reservations")

        existing = await self.db.execute(
            select(Feedback.id).where(Feedback.reservation_id == reservation.id)
        )
        if existing.first() is not None:
            raise ConflictError(detail=ALREADY_SUBMITTED)

        feedback = Feedback(
            reservation_id=reservation.id,
            user_id=reservation.user_id,
            rating=data.rating,
            food_quality=data.food_quality,
            service_quality=data.service_quality,
            ambience=data.ambience,
            value_for_money=data.value_for_money,
            title=data.title,
            review=data.review.strip(),
            would_recommend=data.would_recommend,
            images=data.images,
            status=FeedbackStatus.APPROVED.value,
            is_public=True,
            is_verified=True,
        )
        self.db.add(feedback)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(detail=ALREADY_SUBMITTED)
        await self.db.refresh(feedback)

        logger.info(
            "Feedback submitted",
            feedback_id=str(feedback.id),
            reservation_id=str(reservation.id),
            rating=feedback.rating,
        )
        return feedback

    async def list_all(
        self,
        status: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> List[Feedback]:
        query = select(Feedback)
        if status:
            query = query.where(Feedback.status == status)
        if is_public is not None:
            query = query.where(Feedback.is_public == is_public)
        result = await self.db.execute(query.order_by(Feedback.created_at.desc()))
        return list(result.scalars().all())

    async def list_public(self) -> List[Feedback]:
        return await self.list_all(status=FeedbackStatus.APPROVED.value, is_public=True)

    async def list_for_user(self, user_id: Union[UUID, str]) -> List[Feedback]:
        user_uuid = parse_id(user_id, "user")
        result = await self.db.execute(
            select(Feedback)
            .where(Feedback.user_id == user_uuid)
            .order_by(Feedback.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_for_reservation(
        self,
        reservation_id: Union[UUID, str],
        requester_id: Union[UUID, str],
        requester_role: UserRole,
    ) -> Optional[Feedback]:
        """Feedback left for a reservation, or None when there is none yet"""
        reservation = await self._get_reservation(reservation_id)
        authorize(
            requester_id,
            requester_role,
            reservation.user_id,
            required_roles=STAFF_ROLES,
            detail="You can only view feedback for your own reservations",
        )
        result = await self.db.execute(
            select(Feedback).where(Feedback.reservation_id == reservation.id)
        )
        return result.scalar_one_or_none()

    async def respond(
        self,
        feedback_id: Union[UUID, str],
        admin_response: str,
        responder_id: Union[UUID, str],
    ) -> Feedback:
        feedback = await self._get(feedback_id)
        feedback.admin_response = admin_response
        feedback.responded_by = parse_id(responder_id, "user")
        feedback.responded_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(feedback)

        logger.info("Feedback answered", feedback_id=str(feedback.id))
        return feedback

    async def moderate(self, feedback_id: Union[UUID, str], data: FeedbackModeration) -> Feedback:
        """Approve or reject; only approved feedback is public"""
        feedback = await self._get(feedback_id)
        feedback.status = data.status
        feedback.is_public = data.status == FeedbackStatus.APPROVED.value
        if data.moderation_note:
            feedback.moderation_note = data.moderation_note
        await self.db.commit()
        await self.db.refresh(feedback)

        logger.info("Feedback moderated", feedback_id=str(feedback.id), status=feedback.status)
        return feedback

    async def _get(self, feedback_id: Union[UUID, str]) -> Feedback:
        feedback = await self.db.get(Feedback, parse_id(feedback_id, "feedback"))
        if feedback is None:
            raise NotFoundError(detail=f"Feedback with ID {feedback_id} not found")
        return feedback

    async def _get_reservation(self, reservation_id: Union[UUID, str]) -> Reservation:
        reservation = await self.db.get(Reservation, parse_id(reservation_id, "reservation"))
        if reservation is None:
            raise NotFoundError(detail=f"Reservation with ID {reservation_id} not found")
        return reservation
