"""Pydantic schemas for request/response validation"""

from app.schemas.auth import Token, RefreshRequest, RegisterRequest
from app.schemas.user import UserResponse, ProfileUpdate, RoleUpdate
from app.schemas.table import (
    TableCreate,
    TableUpdate,
    TableAvailabilityUpdate,
    TableResponse,
    TableWindowAvailability,
)
from app.schemas.reservation import (
    ReservationCreate,
    ReservationUpdate,
    ApproveReservationRequest,
    ReservationResponse,
    AvailableTable,
    AvailabilityResponse,
    MessageResponse,
)
from app.schemas.payment import PaymentCreate, PaymentUpdate, PaymentResponse
from app.schemas.menu import MenuItemCreate, MenuItemUpdate, MenuItemResponse
from app.schemas.menu_order import (
    PreOrderLine,
    PreOrderCreate,
    PreOrderUpdate,
    PreOrderStatusUpdate,
    MenuOrderResponse,
)
from app.schemas.feedback import (
    FeedbackCreate,
    FeedbackReply,
    FeedbackModeration,
    FeedbackResponse,
)

__all__ = [
    "Token",
    "RefreshRequest",
    "RegisterRequest",
    "UserResponse",
    "ProfileUpdate",
    "RoleUpdate",
    "TableCreate",
    "TableUpdate",
    "TableAvailabilityUpdate",
    "TableResponse",
    "TableWindowAvailability",
    "ReservationCreate",
    "ReservationUpdate",
    "ApproveReservationRequest",
    "ReservationResponse",
    "AvailableTable",
    "AvailabilityResponse",
    "MessageResponse",
    "PaymentCreate",
    "PaymentUpdate",
    "PaymentResponse",
    "MenuItemCreate",
    "MenuItemUpdate",
    "MenuItemResponse",
    "PreOrderLine",
    "PreOrderCreate",
    "PreOrderUpdate",
    "PreOrderStatusUpdate",
    "MenuOrderResponse",
    "FeedbackCreate",
    "FeedbackReply",
    "FeedbackModeration",
    "FeedbackResponse",
]
