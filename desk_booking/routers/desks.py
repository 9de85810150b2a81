from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from desk_booking.db import get_db
from desk_booking.schemas.desk import DeskCreate, DeskEnvelope, DeskListEnvelope, DeskUpdate
from desk_booking.schemas.user import MessageResponse
from desk_booking.services.desks import DeskService
from desk_booking.utils.auth import Principal, get_admin


router = APIRouter(
    prefix="/api/desk",
    tags=["desks"],
)


def get_desk_service(db: Session = Depends(get_db)) -> DeskService:
    return DeskService(db)


@router.post("/", response_model=DeskEnvelope, status_code=status.HTTP_201_CREATED)
def create_desk(
    desk: DeskCreate,
    service: DeskService = Depends(get_desk_service),
    admin: Principal = Depends(get_admin),
):
    """
    Register a new desk.
    Requires an admin token.
    """
    db_desk = service.create(desk.name, desk.seats)
    return {"message": "Desk created successfully.", "desk": db_desk}


@router.get("/", response_model=DeskListEnvelope)
def get_desks(service: DeskService = Depends(get_desk_service)):
    """
    Retrieve a list of all desks.
    """
    return {"message": "Successfully returned all desks.", "desks": service.get_all()}


@router.get("/name/{name}", response_model=DeskListEnvelope)
def get_desks_by_name(name: str, service: DeskService = Depends(get_desk_service)):
    desks = service.get_by_name(name)
    return {"message": f"{len(desks)} desk(s) returned successfully.", "desks": desks}


@router.get("/{desk_id}", response_model=DeskEnvelope)
def get_desk(desk_id: str, service: DeskService = Depends(get_desk_service)):
    """
    Retrieve a specific desk by ID.
    """
    return {"message": "Desk returned successfully.", "desk": service.get_by_id(desk_id)}


@router.patch("/{desk_id}", response_model=DeskEnvelope)
def update_desk(
    desk_id: str,
    desk_update: DeskUpdate,
    service: DeskService = Depends(get_desk_service),
    admin: Principal = Depends(get_admin),
):
    """
    Update a desk's details.
    Requires an admin token.
    """
    db_desk = service.update(desk_id, desk_update.model_dump(exclude_unset=True))
    return {"message": "Desk updated successfully.", "desk": db_desk}


@router.delete("/{desk_id}", response_model=MessageResponse)
def delete_desk(
    desk_id: str,
    service: DeskService = Depends(get_desk_service),
    admin: Principal = Depends(get_admin),
):
    """
    Delete a desk.
    Requires an admin token.
    """
    service.delete(desk_id)
    return {"message": "Desk deleted successfully."}
