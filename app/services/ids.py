"""Identifier parsing"""

from typing import Union
from uuid import UUID

from app.exceptions import BadRequestError


def parse_id(value: Union[UUID, str], label: str) -> UUID:
    """Parse a path/body id, raising BadRequestError when malformed"""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise BadRequestError(detail=f"Invalid {label} ID")
