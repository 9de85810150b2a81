import logging
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from desk_booking.db import get_db
from desk_booking.schemas.user import (
    MessageResponse,
    UserCreate,
    UserEnvelope,
    UserListEnvelope,
    UserUpdate,
)
from desk_booking.services.users import UserService
from desk_booking.utils.auth import Principal, get_admin

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/user",
    tags=["users"],
)


def get_user_service(request: Request, db: Session = Depends(get_db)) -> UserService:
    return UserService(db, request.app.state.token_verifier)


@router.post("/create-user", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def create_user(
    user: UserCreate,
    service: UserService = Depends(get_user_service),
    admin: Principal = Depends(get_admin),
):
    db_user, temporary_password = service.create_user(
        user.name, user.email, user.phone_number, password=user.password
    )
    logger.debug(f"Admin {admin.user_id} created user {db_user.id}")
    return {
        "message": "User created successfully.",
        "user": db_user,
        "temporary_password": temporary_password,
    }


@router.get("/get-user-by-email/{email}", response_model=UserEnvelope)
def get_user_by_email(
    email: str,
    service: UserService = Depends(get_user_service),
    admin: Principal = Depends(get_admin),
):
    return {"message": "User returned successfully.", "user": service.get_by_email(email)}


@router.get("/get-user/{user_id}", response_model=UserEnvelope)
def get_user_by_id(
    user_id: str,
    service: UserService = Depends(get_user_service),
    admin: Principal = Depends(get_admin),
):
    return {"message": "User returned successfully.", "user": service.get_by_id(user_id)}


@router.get("/get-user-by-phone/{phone_number}", response_model=UserEnvelope)
def get_user_by_phone(
    phone_number: str,
    service: UserService = Depends(get_user_service),
    admin: Principal = Depends(get_admin),
):
    return {"message": "User returned successfully.", "user": service.get_by_phone(phone_number)}


@router.get("/get-all-users", response_model=UserListEnvelope)
def get_all_users(
    service: UserService = Depends(get_user_service),
    admin: Principal = Depends(get_admin),
):
    users = service.list_users()
    return {"message": f"{len(users)} user(s) returned successfully.", "users": users}


@router.patch("/update-user/{email}", response_model=UserEnvelope)
def update_user(
    email: str,
    user_update: UserUpdate,
    service: UserService = Depends(get_user_service),
    admin: Principal = Depends(get_admin),
):
    db_user = service.update_user(email, user_update.model_dump(exclude_unset=True, by_alias=True))
    return {"message": "User updated successfully.", "user": db_user}


@router.delete("/delete-user/{email}", response_model=MessageResponse)
def delete_user(
    email: str,
    service: UserService = Depends(get_user_service),
    admin: Principal = Depends(get_admin),
):
    service.delete_user(email)
    return {"message": f"User {email} deleted successfully."}


@router.post("/set-admin-role/{email}", response_model=MessageResponse)
def set_admin_role(
    email: str,
    service: UserService = Depends(get_user_service),
    admin: Principal = Depends(get_admin),
):
    """Grant the admin claim to a user. Takes effect on their next login."""
    db_user = service.set_admin(email)
    return {"message": f"Successfully promoted {db_user.email} to admin."}
