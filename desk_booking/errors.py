"""
Error kinds raised by the booking core.

Services raise these instead of ``HTTPException`` so they stay free of
transport details; ``desk_booking.main`` maps each kind to a status code.
"""
import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    AUTH = "auth"
    INTERNAL = "internal"


class BookingError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    kind = ErrorKind.VALIDATION


class ConflictError(BookingError):
    kind = ErrorKind.CONFLICT

    def __init__(self, message: str, existing_id: Optional[str] = None):
        super().__init__(message)
        self.existing_id = existing_id


class NotFoundError(BookingError):
    kind = ErrorKind.NOT_FOUND


class AuthError(BookingError):
    kind = ErrorKind.AUTH

    MISSING_TOKEN = "missing token"
    INVALID_TOKEN = "invalid token"
    INVALID_CREDENTIALS = "invalid credentials"
    FORBIDDEN = "forbidden"

    def __init__(self, reason: str, message: Optional[str] = None):
        super().__init__(message or reason)
        self.reason = reason

    @property
    def forbidden(self) -> bool:
        return self.reason == self.FORBIDDEN


class InternalError(BookingError):
    kind = ErrorKind.INTERNAL
