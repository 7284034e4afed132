"""Database models"""

from app.models.user import User, UserRole
from app.models.table import Table
from app.models.reservation import Reservation, ReservationStatus, ACTIVE_STATUSES
from app.models.payment import Payment, PaymentStatus, PaymentMethod
from app.models.menu import MenuItem, MenuCategory
from app.models.menu_order import MenuOrder, MenuOrderStatus
from app.models.feedback import Feedback, FeedbackStatus

__all__ = [
    "User",
    "UserRole",
    "Table",
    "Reservation",
    "ReservationStatus",
    "ACTIVE_STATUSES",
    "Payment",
    "PaymentStatus",
    "PaymentMethod",
    "MenuItem",
    "MenuCategory",
    "MenuOrder",
    "MenuOrderStatus",
    "Feedback",
    "FeedbackStatus",
]
