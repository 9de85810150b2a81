import uuid
from sqlalchemy import Column, String, DateTime, Index, JSON, text
from desk_booking.db import Base


ACTIVE = "active"
CANCELLED = "cancelled"


def new_id():
    return uuid.uuid4().hex


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # At most one active booking per desk and calendar day.
        Index(
            "uq_active_booking_desk_day",
            "desk_id",
            "date_key",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, index=True, nullable=False)
    user_id = Column(String, index=True, nullable=False)
    desk_id = Column(String, index=True, nullable=False)
    date_timestamp = Column(DateTime, index=True, nullable=False)
    date_key = Column(String(10), nullable=False)
    status = Column(String(16), nullable=False, default=ACTIVE)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(String, nullable=True)
    old_modifications = Column(JSON, nullable=True)

    def to_document(self):
        """Snapshot of the stored fields, keyed by their JSON names."""
        return {
            "id": self.id,
            "name": self.name,
            "userId": self.user_id,
            "deskId": self.desk_id,
            "dateTimestamp": _isoformat(self.date_timestamp),
            "status": self.status,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
            "cancelledAt": _isoformat(self.cancelled_at),
            "cancellationReason": self.cancellation_reason,
            "oldModifications": self.old_modifications,
        }


def _isoformat(value):
    # Stored datetimes are naive UTC.
    return value.isoformat() + "Z" if value is not None else None
