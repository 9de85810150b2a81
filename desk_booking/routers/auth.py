from fastapi import APIRouter, Depends, status
from desk_booking.routers.users import get_user_service
from desk_booking.schemas.user import Token, UserEnvelope, UserLogin, UserRegister
from desk_booking.services.users import UserService


router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
)


@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def register(user: UserRegister, service: UserService = Depends(get_user_service)):
    """Create an account with an e-mail address and password."""
    db_user = service.register(user.email, user.password, name=user.name)
    return {"message": "User registered successfully.", "user": db_user}


@router.post("/login", response_model=Token)
def login(credentials: UserLogin, service: UserService = Depends(get_user_service)):
    """Exchange credentials for a bearer token carrying the admin claim."""
    return {"access_token": service.authenticate(credentials.email, credentials.password)}
