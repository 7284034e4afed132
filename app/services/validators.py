"""
Validation strategies for reservations, payments and feedback

Each strategy checks one rule and reports every violation it finds.
CompositeValidator runs a set of strategies concurrently and merges their
messages without short-circuiting, so callers can present the full list of
problems in one response.
"""

import asyncio
import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence

from app.config import settings
from app.models.payment import PaymentMethod
from app.models.reservation import DATE_FORMAT


TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass
class ValidationResult:
    """Outcome of a validation run"""
    valid: bool = True
    errors: List[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationResult":
        return cls(valid=not errors, errors=list(errors))


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    """Finite int or float; bools, NaN and infinities are rejected"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _format_amount(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


class ValidationStrategy(ABC):
    """A single independent rule over a candidate record"""

    @abstractmethod
    async def validate(self, candidate: Mapping[str, Any]) -> ValidationResult:
        """Check the candidate, with no side effects"""
        pass


class CompositeValidator(ValidationStrategy):
    """Runs every member strategy and collects all of their errors"""

    def __init__(self, strategies: Sequence[ValidationStrategy]):
        self.strategies = list(strategies)

    async def validate(self, candidate: Mapping[str, Any]) -> ValidationResult:
        results = await asyncio.gather(
            *(strategy.validate(candidate) for strategy in self.strategies)
        )
        errors: List[str] = []
        for result in results:
            errors.extend(result.errors)
        return ValidationResult(
            valid=all(result.valid for result in results) and not errors,
            errors=errors,
        )


# Reservation rules

class ReservationTimeValidator(ValidationStrategy):
    """reservation_time must be a wall-clock "HH:MM" string (24-hour).

    No business-hours window is enforced; any valid clock time is accepted.
    """

    async def validate(self, candidate: Mapping[str, Any]) -> ValidationResult:
        value = candidate.get("reservation_time")
        if not isinstance(value, str):
            return ValidationResult.from_errors(
                ["Missing or invalid reservation_time. Expected string"]
            )
        if not TIME_PATTERN.match(value):
            return ValidationResult.from_errors(
                ["Reservation time must be in HH:MM format (e.g., 19:30)"]
            )
        return ValidationResult()


class ReservationDateValidator(ValidationStrategy):
    """reservation_date must be an ISO calendar day; past dates are allowed"""

    async def validate(self, candidate: Mapping[str, Any]) -> ValidationResult:
        value = candidate.get("reservation_date")
        if not value or not isinstance(value, str):
            return ValidationResult.from_errors(["Missing or invalid reservation_date"])
        if not DATE_PATTERN.match(value):
            return ValidationResult.from_errors(
                ["Reservation date must be in YYYY-MM-DD format (e.g., 2025-12-15)"]
            )
        try:
            datetime.strptime(value, DATE_FORMAT)
        except ValueError:
            return ValidationResult.from_errors(
                ["Invalid date. Please provide a real calendar date in YYYY-MM-DD format"]
            )
        return ValidationResult()


class PartySizeValidator(ValidationStrategy):
    """Party size must fall within the configured bounds"""

    def __init__(self, min_size: Optional[int] = None, max_size: Optional[int] = None):
        self.min_size = settings.min_party_size if min_size is None else min_size
        self.max_size = settings.max_party_size if max_size is None else max_size

    async def validate(self, candidate: Mapping[str, Any]) -> ValidationResult:
        party_size = candidate.get("party_size")
        if not _is_integer(party_size):
            return ValidationResult.from_errors(["Invalid or missing party_size"])

        errors = []
        if party_size < self.min_size:
            errors.append(f"Party size must be at least {self.min_size}")
        if party_size > self.max_size:
            errors.append(f"Party size cannot exceed {self.max_size}")
        return ValidationResult.from_errors(errors)


class DurationValidator(ValidationStrategy):
    """Optional duration override, in minutes"""

    def __init__(self, min_minutes: Optional[int] = None, max_minutes: Optional[int] = None):
        self.min_minutes = settings.min_duration_minutes if min_minutes is None else min_minutes
        self.max_minutes = settings.max_duration_minutes if max_minutes is None else max_minutes

    async def validate(self, candidate: Mapping[str, Any]) -> ValidationResult:
        duration = candidate.get("duration_minutes")
        if duration is None:
            return ValidationResult()
        if not _is_integer(duration):
            return ValidationResult.from_errors(["Duration must be a whole number of minutes"])
        if duration < self.min_minutes or duration > self.max_minutes:
            return ValidationResult.from_errors(
                [f"Duration must be between {self.min_minutes} and {self.max_minutes} minutes"]
            )
        return ValidationResult()


# Payment rules

class PaymentAmountValidator(ValidationStrategy):
    def __init__(self, max_amount: Optional[float] = None):
        self.min_amount = 0
        self.max_amount = settings.max_payment_amount if max_amount is None else max_amount

    async def validate(self, candidate: Mapping[str, Any]) -> ValidationResult:
        amount = candidate.get("amount")
        if not _is_number(amount):
            return ValidationResult.from_errors(["Payment amount must be a valid number"])
        if amount < self.min_amount:
            return ValidationResult.from_errors(
                [f"Payment amount must be at least {self.min_amount}"]
            )
        if amount > self.max_amount:
            return ValidationResult.from_errors(
                [f"Payment amount cannot exceed {_format_amount(self.max_amount)}"]
            )
        return ValidationResult()


class PaymentMethodValidator(ValidationStrategy):
    def __init__(self, allowed_methods: Optional[Sequence[str]] = None):
        if allowed_methods is None:
            allowed_methods = [method.value for method in PaymentMethod]
        self.allowed_methods = list(allowed_methods)

    async def validate(self, candidate: Mapping[str, Any]) -> ValidationResult:
        method = candidate.get("method")
        if not method:
            return ValidationResult.from_errors(["Payment method is required"])
        if method not in self.allowed_methods:
            return ValidationResult.from_errors(
                [f"Invalid payment method. Allowed methods: {', '.join(self.allowed_methods)}"]
            )
        return ValidationResult()


class ReservationReferenceValidator(ValidationStrategy):
    async def validate(self, candidate: Mapping[str, Any]) -> ValidationResult:
        reservation_id = candidate.get("reservation_id")
        if not reservation_id:
            return ValidationResult.from_errors(["Reservation ID is required for payment"])
        if not str(reservation_id).strip():
            return ValidationResult.from_errors(["Invalid reservation ID format"])
        return ValidationResult()


@dataclass(frozen=True)
class DepositPolicy:
    """Minimum deposit: ratio of (party size x per-head price)"""
    per_head_price: float
    ratio: float

    @classmethod
    def from_settings(cls) -> "DepositPolicy":
        return cls(per_head_price=settings.deposit_per_head_price, ratio=settings.deposit_ratio)

    def minimum_for(self, party_size: int) -> float:
        return round(party_size * self.per_head_price * self.ratio, 2)


class DepositValidator(ValidationStrategy):
    """Amount must cover the policy deposit when a party size is known"""

    def __init__(self, policy: Optional[DepositPolicy] = None):
        self.policy = policy or DepositPolicy.from_settings()

    async def validate(self, candidate: Mapping[str, Any]) -> ValidationResult:
        party_size = candidate.get("party_size")
        amount = candidate.get("amount")
        if not _is_integer(party_size) or party_size <= 0 or not _is_number(amount):
            return ValidationResult()

        minimum = self.policy.minimum_for(party_size)
        if amount < minimum:
            percentage = _format_amount(self.policy.ratio * 100)
            return ValidationResult.from_errors([
                f"Payment amount should be at least {minimum:.2f} "
                f"({percentage}% deposit for {party_size} people)"
            ])
        return ValidationResult()


# Feedback rules

class RatingValidator(ValidationStrategy):
    """Star ratings are whole numbers from 1 to 5; only the overall rating is required"""

    FIELDS = ("rating", "food_quality", "service_quality", "ambience", "value_for_money")

    async def validate(self, candidate: Mapping[str, Any]) -> ValidationResult:
        errors = []
        for name in self.FIELDS:
            value = candidate.get(name)
            if value is None:
                if name == "rating":
                    errors.append("Rating is required")
                continue
            if not _is_integer(value) or not 1 <= value <= 5:
                label = name.replace("_", " ").capitalize()
                errors.append(f"{label} must be a whole number from 1 to 5")
        return ValidationResult.from_errors(errors)


class ReviewTextValidator(ValidationStrategy):
    def __init__(self, min_length: int = 10, max_length: int = 1000, max_title_length: int = 100):
        self.min_length = min_length
        self.max_length = max_length
        self.max_title_length = max_title_length

    async def validate(self, candidate: Mapping[str, Any]) -> ValidationResult:
        errors = []
        review = candidate.get("review")
        if not isinstance(review, str):
            errors.append("Review text is required")
        elif not self.min_length <= len(review.strip()) <= self.max_length:
            errors.append(
                f"Review must be between {self.min_length} and {self.max_length} characters"
            )

        title = candidate.get("title")
        if title is not None and (not isinstance(title, str) or len(title) > self.max_title_length):
            errors.append(f"Title must be text of at most {self.max_title_length} characters")
        return ValidationResult.from_errors(errors)


class FeedbackReferenceValidator(ValidationStrategy):
    async def validate(self, candidate: Mapping[str, Any]) -> ValidationResult:
        if not candidate.get("reservation_id"):
            return ValidationResult.from_errors(["Reservation ID is required for feedback"])
        return ValidationResult()


def reservation_validator() -> CompositeValidator:
    """Default rule set for reservation create/update"""
    return CompositeValidator([
        ReservationTimeValidator(),
        ReservationDateValidator(),
        PartySizeValidator(),
        DurationValidator(),
    ])


def payment_validator(include_deposit: bool = True) -> CompositeValidator:
    """Default rule set for payment creation"""
    strategies: List[ValidationStrategy] = [
        PaymentAmountValidator(),
        PaymentMethodValidator(),
        ReservationReferenceValidator(),
    ]
    if include_deposit:
        strategies.append(DepositValidator())
    return CompositeValidator(strategies)


def feedback_validator() -> CompositeValidator:
    return CompositeValidator([
        FeedbackReferenceValidator(),
        RatingValidator(),
        ReviewTextValidator(),
    ])
