from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import field_validator
from desk_booking.schemas.common import CamelModel, as_utc


class BookingCreate(CamelModel):
    name: Optional[str] = None
    user_id: Optional[str] = None
    desk_id: Optional[str] = None
    date_timestamp: Optional[str] = None


class BookingUpdate(CamelModel):
    name: Optional[str] = None
    user_id: Optional[str] = None
    desk_id: Optional[str] = None
    date_timestamp: Optional[str] = None


class BookingCancel(CamelModel):
    reason: Optional[str] = None


class BookingResponse(CamelModel):
    id: str
    name: str
    user_id: str
    desk_id: str
    date_timestamp: datetime
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    old_modifications: Optional[Dict[str, Any]] = None

    @field_validator("date_timestamp", "created_at", "updated_at", "cancelled_at")
    @classmethod
    def attach_utc(cls, value):
        return as_utc(value)


class BookingEnvelope(CamelModel):
    message: str
    booking: BookingResponse


class BookingListEnvelope(CamelModel):
    message: str
    bookings: List[BookingResponse]
