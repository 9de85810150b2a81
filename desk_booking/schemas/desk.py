from datetime import datetime
from typing import List, Optional
from pydantic import field_validator
from desk_booking.schemas.common import CamelModel, as_utc


class DeskCreate(CamelModel):
    name: Optional[str] = None
    seats: Optional[int] = None


class DeskUpdate(CamelModel):
    name: Optional[str] = None
    seats: Optional[int] = None


class DeskResponse(CamelModel):
    id: str
    name: str
    seats: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def attach_utc(cls, value):
        return as_utc(value)


class DeskEnvelope(CamelModel):
    message: str
    desk: DeskResponse


class DeskListEnvelope(CamelModel):
    message: str
    desks: List[DeskResponse]
