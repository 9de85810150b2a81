import logging
from sqlalchemy.orm import Session
from desk_booking.errors import NotFoundError, ValidationError
from desk_booking.models.desk import Desk
from desk_booking.utils.validation_helpers import is_blank, utcnow

logger = logging.getLogger(__name__)


def _validate_seats(seats):
    if isinstance(seats, bool) or not isinstance(seats, int) or seats < 1:
        raise ValidationError("Seats must be a positive integer.")


class DeskService:
    def __init__(self, db: Session, clock=utcnow):
        self.db = db
        self.clock = clock

    def create(self, name, seats) -> Desk:
        if is_blank(name) or seats is None:
            raise ValidationError("Name and seats are required.")
        _validate_seats(seats)
        db_desk = Desk(name=name, seats=seats, created_at=self.clock())
        self.db.add(db_desk)
        self.db.commit()
        self.db.refresh(db_desk)
        logger.debug(f"Created desk: {db_desk.id}, name: {name}")
        return db_desk

    def get_by_id(self, desk_id: str) -> Desk:
        desk = self.db.get(Desk, desk_id)
        if not desk:
            logger.error(f"Desk not found: {desk_id}")
            raise NotFoundError("Desk not found.")
        return desk

    def get_by_name(self, name: str):
        desks = self.db.query(Desk).filter(Desk.name == name).order_by(Desk.created_at).all()
        if not desks:
            raise NotFoundError("No desks found.")
        return desks

    def get_all(self):
        return self.db.query(Desk).order_by(Desk.created_at, Desk.id).all()

    def update(self, desk_id: str, fields: dict) -> Desk:
        db_desk = self.get_by_id(desk_id)
        if fields.get("name") is not None:
            if is_blank(fields["name"]):
                raise ValidationError("Name cannot be empty.")
            db_desk.name = fields["name"]
        if fields.get("seats") is not None:
            _validate_seats(fields["seats"])
            db_desk.seats = fields["seats"]
        db_desk.updated_at = self.clock()
        self.db.commit()
        self.db.refresh(db_desk)
        logger.debug(f"Updated desk: {desk_id}")
        return db_desk

    def delete(self, desk_id: str) -> None:
        db_desk = self.get_by_id(desk_id)
        self.db.delete(db_desk)
        self.db.commit()
        logger.debug(f"Deleted desk: {desk_id}")
