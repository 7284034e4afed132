"""Feedback API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.feedback import (
    FeedbackCreate,
    FeedbackReply,
    FeedbackModeration,
    FeedbackResponse,
)
from app.services.feedback import FeedbackService
from app.api.auth import get_current_active_user, require_roles

router = APIRouter()


def get_feedback_service(db: AsyncSession = Depends(get_db)) -> FeedbackService:
    return FeedbackService(db)


@router.post("", response_model=FeedbackResponse, status_code=201)
async def submit_feedback(
    feedback_data: FeedbackCreate,
    current_user: User = Depends(get_current_active_user),
    service: FeedbackService = Depends(get_feedback_service),
):
    """Rate a completed reservation"""
    return await service.create(feedback_data, current_user.id)


@router.get("", response_model=List[FeedbackResponse])
async def list_feedback(
    status: Optional[str] = None,
    is_public: Optional[bool] = None,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: FeedbackService = Depends(get_feedback_service),
):
    return await service.list_all(status=status, is_public=is_public)


@router.get("/public", response_model=List[FeedbackResponse])
async def list_public_feedback(
    current_user: User = Depends(get_current_active_user),
    service: FeedbackService = Depends(get_feedback_service),
):
    return await service.list_public()


@router.get("/mine", response_model=List[FeedbackResponse])
async def list_my_feedback(
    current_user: User = Depends(get_current_active_user),
    service: FeedbackService = Depends(get_feedback_service),
):
    return await service.list_for_user(current_user.id)


@router.get("/reservation/{reservation_id}", response_model=Optional[FeedbackResponse])
async def get_reservation_feedback(
    reservation_id: str,
    current_user: User = Depends(get_current_active_user),
    service: FeedbackService = Depends(get_feedback_service),
):
    """Feedback for one reservation, null when none was left"""
    return await service.get_for_reservation(reservation_id, current_user.id, current_user.role)


@router.put("/{feedback_id}/respond", response_model=FeedbackResponse)
async def respond_to_feedback(
    feedback_id: str,
    request: FeedbackReply,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: FeedbackService = Depends(get_feedback_service),
):
    return await service.respond(feedback_id, request.admin_response, current_user.id)


@router.put("/{feedback_id}/moderate", response_model=FeedbackResponse)
async def moderate_feedback(
    feedback_id: str,
    request: FeedbackModeration,
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    service: FeedbackService = Depends(get_feedback_service),
):
    """Approve or hide a review"""
    return await service.moderate(feedback_id, request)
