from typing import Optional
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from desk_booking.db import get_db
from desk_booking.schemas.booking import (
    BookingCancel,
    BookingCreate,
    BookingEnvelope,
    BookingListEnvelope,
    BookingUpdate,
)
from desk_booking.schemas.user import MessageResponse
from desk_booking.services.bookings import BookingService
from desk_booking.utils.auth import Principal, get_admin
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/booking",
    tags=["bookings"],
)


def get_booking_service(request: Request, db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db, request.app.state.zone)


@router.post(
    "/",
    response_model=BookingEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
    description="Reserve a desk for one calendar day. Fails with 409 if the desk already has an active booking that day.",
)
def create_booking(
    booking: BookingCreate,
    service: BookingService = Depends(get_booking_service),
):
    """
    Create a booking for a desk.

    - **name**: Display name of the requester.
    - **userId**: ID of the requesting user.
    - **deskId**: ID of the desk to book.
    - **dateTimestamp**: Day of the booking (`YYYY-MM-DD` or an ISO 8601 timestamp).
    """
    logger.debug(f"Creating booking for user: {booking.user_id}, desk: {booking.desk_id}")
    db_booking = service.create_booking(
        booking.name, booking.user_id, booking.desk_id, booking.date_timestamp
    )
    return {"message": "Booking created successfully.", "booking": db_booking}


@router.get(
    "/",
    response_model=BookingListEnvelope,
    summary="List all bookings",
)
def get_all_bookings(service: BookingService = Depends(get_booking_service)):
    bookings = service.get_all()
    return {"message": "Successfully returned all bookings.", "bookings": bookings}


@router.get(
    "/by-date",
    response_model=BookingListEnvelope,
    summary="List bookings on a day",
    description="Return every booking on the calendar day of dateTimestamp, optionally for one desk. Empty when none match.",
)
def get_bookings_by_date(
    dateTimestamp: Optional[str] = None,
    deskId: Optional[str] = None,
    service: BookingService = Depends(get_booking_service),
):
    bookings = service.get_by_date(dateTimestamp, desk_id=deskId)
    return {"message": f"{len(bookings)} booking(s) returned successfully.", "bookings": bookings}


@router.get(
    "/name/{name}",
    response_model=BookingListEnvelope,
    summary="List bookings by requester name",
)
def get_bookings_by_name(name: str, service: BookingService = Depends(get_booking_service)):
    bookings = service.get_by_name(name)
    return {"message": f"{len(bookings)} booking(s) returned successfully.", "bookings": bookings}


@router.patch(
    "/cancel/{booking_id}",
    response_model=BookingEnvelope,
    summary="Cancel a booking",
    description="Mark a booking cancelled. The record is kept.",
)
def cancel_booking(
    booking_id: str,
    cancel: Optional[BookingCancel] = None,
    service: BookingService = Depends(get_booking_service),
):
    reason = cancel.reason if cancel else None
    db_booking = service.cancel(booking_id, reason)
    return {"message": "Booking cancelled successfully.", "booking": db_booking}


@router.patch(
    "/{booking_id}",
    response_model=BookingEnvelope,
    summary="Update a booking",
)
def update_booking(
    booking_id: str,
    booking_update: BookingUpdate,
    service: BookingService = Depends(get_booking_service),
):
    """
    Update the supplied fields of a booking.

    The previous version of the booking is stored in `oldModifications`.
    """
    db_booking = service.update(booking_id, booking_update.model_dump(exclude_unset=True, by_alias=True))
    return {"message": "Booking updated successfully.", "booking": db_booking}


@router.delete(
    "/{booking_id}",
    response_model=MessageResponse,
    summary="Delete a booking",
    description="Hard delete a booking. Admin only.",
)
def delete_booking(
    booking_id: str,
    principal: Principal = Depends(get_admin),
    service: BookingService = Depends(get_booking_service),
):
    service.delete(booking_id, principal)
    return {"message": "Booking deleted successfully."}


@router.get(
    "/{booking_id}",
    response_model=BookingEnvelope,
    summary="Get a booking by ID",
)
def get_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    db_booking = service.get_by_id(booking_id)
    return {"message": "Booking returned successfully.", "booking": db_booking}
