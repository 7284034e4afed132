"""Domain services"""

from app.services.validators import (
    ValidationResult,
    ValidationStrategy,
    CompositeValidator,
    reservation_validator,
    payment_validator,
    feedback_validator,
)
from app.services.availability import TimeWindow, TableInventory, ConflictDetector
from app.services.authorization import authorize, AUTHORIZERS, PAYMENT_OPERATORS, STAFF_ROLES

__all__ = [
    "ValidationResult",
    "ValidationStrategy",
    "CompositeValidator",
    "reservation_validator",
    "payment_validator",
    "feedback_validator",
    "TimeWindow",
    "TableInventory",
    "ConflictDetector",
    "authorize",
    "AUTHORIZERS",
    "PAYMENT_OPERATORS",
    "STAFF_ROLES",
]
