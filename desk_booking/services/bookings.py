import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from desk_booking.errors import ConflictError, NotFoundError, ValidationError
from desk_booking.models.booking import ACTIVE, CANCELLED, Booking
from desk_booking.utils.auth import Principal, require_admin
from desk_booking.utils.validation_helpers import (
    day_bounds,
    from_utc_naive,
    is_blank,
    parse_booking_date,
    to_utc_naive,
    utcnow,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "name": "name",
    "userId": "user_id",
    "deskId": "desk_id",
    "dateTimestamp": "date_timestamp",
}


class BookingService:
    """
    Creates, reads and cancels desk bookings.

    Enforces at most one active booking per desk per calendar day. Day
    boundaries are computed in ``zone``. The conflict query reports the
    clashing booking; the partial unique index on ``(desk_id, date_key)``
    rejects a concurrent writer that slipped past the query.
    """

    def __init__(self, db: Session, zone, clock=utcnow):
        self.db = db
        self.zone = zone
        self.clock = clock

    def create_booking(self, name, user_id, desk_id, date) -> Booking:
        if any(is_blank(value) for value in (name, user_id, desk_id, date)):
            logger.error("Rejected booking: missing field")
            raise ValidationError("missing field")

        moment = parse_booking_date(date, self.zone)
        start, end, date_key = day_bounds(moment, self.zone)

        conflicting = self._find_conflict(desk_id, start, end)
        if conflicting:
            logger.error(f"Conflicting booking {conflicting.id} for desk {desk_id} on {date_key}")
            raise ConflictError(
                f"Conflicting booking with existing booking: {conflicting.id}",
                existing_id=conflicting.id,
            )

        db_booking = Booking(
            name=name,
            user_id=user_id,
            desk_id=desk_id,
            date_timestamp=to_utc_naive(moment),
            date_key=date_key,
            status=ACTIVE,
            created_at=self.clock(),
        )
        self.db.add(db_booking)
        self._commit_or_conflict(desk_id, start, end)
        self.db.refresh(db_booking)
        logger.debug(f"Created booking: {db_booking.id}, desk: {desk_id}, day: {date_key}")
        return db_booking

    def get_by_id(self, booking_id: str) -> Booking:
        booking = self.db.get(Booking, booking_id)
        if not booking:
            logger.error(f"Booking not found: {booking_id}")
            raise NotFoundError("Booking not found.")
        return booking

    def get_by_name(self, name: str):
        if is_blank(name):
            raise ValidationError("missing field")
        bookings = self.db.query(Booking).filter(Booking.name == name).order_by(Booking.created_at).all()
        if not bookings:
            logger.error(f"No bookings found for name: {name}")
            raise NotFoundError("No booking(s) found.")
        return bookings

    def get_by_date(self, date, desk_id: Optional[str] = None):
        """Bookings of any status on the calendar day of ``date``; empty when none match."""
        if is_blank(date):
            raise ValidationError("missing field")
        start, end, _ = day_bounds(parse_booking_date(date, self.zone), self.zone)
        query = self.db.query(Booking).filter(
            Booking.date_timestamp >= start,
            Booking.date_timestamp < end,
        )
        if desk_id:
            query = query.filter(Booking.desk_id == desk_id)
        bookings = query.order_by(Booking.created_at, Booking.id).all()
        logger.debug(f"Retrieved {len(bookings)} bookings between {start} and {end}")
        return bookings

    def get_all(self):
        bookings = self.db.query(Booking).order_by(Booking.created_at, Booking.id).all()
        logger.debug(f"Retrieved {len(bookings)} bookings")
        return bookings

    def update(self, booking_id: str, fields: dict) -> Booking:
        """
        Overwrite the supplied fields of a booking.

        The pre-update document is kept in ``oldModifications``. Moving an
        active booking to another desk or day re-runs the conflict check.
        """
        db_booking = self.get_by_id(booking_id)
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        changes = {}
        for key, value in fields.items():
            if value is None:
                continue
            if is_blank(value):
                raise ValidationError("missing field")
            changes[UPDATABLE_FIELDS[key]] = value

        desk_id = changes.get("desk_id", db_booking.desk_id)
        if "date_timestamp" in changes:
            moment = parse_booking_date(changes["date_timestamp"], self.zone)
            start, end, date_key = day_bounds(moment, self.zone)
            changes["date_timestamp"] = to_utc_naive(moment)
            changes["date_key"] = date_key
        else:
            start, end, date_key = day_bounds(from_utc_naive(db_booking.date_timestamp), self.zone)

        moved = desk_id != db_booking.desk_id or date_key != db_booking.date_key
        if db_booking.status == ACTIVE and moved:
            conflicting = self._find_conflict(desk_id, start, end, exclude_id=booking_id)
            if conflicting:
                logger.error(f"Update of {booking_id} conflicts with booking {conflicting.id}")
                raise ConflictError(
                    f"Conflicting booking with existing booking: {conflicting.id}",
                    existing_id=conflicting.id,
                )

        db_booking.old_modifications = db_booking.to_document()
        for key, value in changes.items():
            setattr(db_booking, key, value)
        db_booking.updated_at = self.clock()
        self._commit_or_conflict(desk_id, start, end, exclude_id=booking_id)
        self.db.refresh(db_booking)
        logger.debug(f"Updated booking: {booking_id}, fields: {sorted(changes)}")
        return db_booking

    def cancel(self, booking_id: str, reason: Optional[str] = None) -> Booking:
        db_booking = self.get_by_id(booking_id)
        db_booking.status = CANCELLED
        db_booking.cancelled_at = self.clock()
        if reason:
            db_booking.cancellation_reason = reason
        self.db.commit()
        self.db.refresh(db_booking)
        logger.debug(f"Cancelled booking: {booking_id}")
        return db_booking

    def delete(self, booking_id: str, principal: Principal) -> None:
        require_admin(principal)
        db_booking = self.get_by_id(booking_id)
        self.db.delete(db_booking)
        self.db.commit()
        logger.debug(f"Deleted booking: {booking_id} by admin {principal.user_id}")

    def _find_conflict(self, desk_id, start, end, exclude_id=None) -> Optional[Booking]:
        query = self.db.query(Booking).filter(
            Booking.desk_id == desk_id,
            Booking.status == ACTIVE,
            Booking.date_timestamp >= start,
            Booking.date_timestamp < end,
        )
        if exclude_id:
            query = query.filter(Booking.id != exclude_id)
        return query.order_by(Booking.created_at, Booking.id).first()

    def _commit_or_conflict(self, desk_id, start, end, exclude_id=None):
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            conflicting = self._find_conflict(desk_id, start, end, exclude_id=exclude_id)
            existing_id = conflicting.id if conflicting else None
            logger.error(f"Concurrent booking for desk {desk_id} rejected, winner: {existing_id}")
            raise ConflictError(
                f"Conflicting booking with existing booking: {existing_id}",
                existing_id=existing_id,
            )
