from sqlalchemy import Column, Integer, String, DateTime
from desk_booking.db import Base
from desk_booking.models.booking import new_id


class Desk(Base):
    __tablename__ = "desks"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, index=True, nullable=False)
    seats = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)
