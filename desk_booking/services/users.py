import logging
import secrets
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from desk_booking.errors import AuthError, ConflictError, NotFoundError, ValidationError
from desk_booking.models.user import User
from desk_booking.utils.auth import TokenVerifier, get_password_hash, verify_password
from desk_booking.utils.validation_helpers import is_blank, utcnow

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Local identity store: registration, login and admin user management."""

    def __init__(self, db: Session, verifier: TokenVerifier, clock=utcnow):
        self.db = db
        self.verifier = verifier
        self.clock = clock

    def register(self, email, password, name=None) -> User:
        if is_blank(email) or is_blank(password):
            raise ValidationError("Both email and password are needed.")
        return self._create(email, password, name=name)

    def authenticate(self, email, password) -> str:
        """Check credentials and return a signed access token."""
        if is_blank(email) or is_blank(password):
            raise ValidationError("Both email and password are needed.")
        user = self.db.query(User).filter(User.email == normalize_email(email)).first()
        if not user or not verify_password(password, user.hashed_password):
            logger.error(f"Failed login for: {email}")
            raise AuthError(AuthError.INVALID_CREDENTIALS, "Incorrect email or password")
        return self.verifier.create_access_token(user.id, admin=user.is_admin, email=user.email)

    def create_user(self, name, email, phone_number, password: Optional[str] = None):
        """
        Create a user on behalf of an admin.

        Returns ``(user, temporary_password)``; the temporary password is
        only generated when none was supplied and is not stored in clear.
        """
        if is_blank(name) or is_blank(email) or is_blank(phone_number):
            raise ValidationError("Name, email, and phone number are required.")
        temporary_password = None
        if is_blank(password):
            temporary_password = secrets.token_urlsafe(12)
            password = temporary_password
        user = self._create(email, password, name=name, phone_number=phone_number)
        return user, temporary_password

    def get_by_email(self, email: str) -> User:
        if is_blank(email):
            raise ValidationError("Email is required.")
        user = self.db.query(User).filter(User.email == normalize_email(email)).first()
        if not user:
            raise NotFoundError(f"No user with email {email} found.")
        return user

    def get_by_id(self, user_id: str) -> User:
        user = self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found.")
        return user

    def get_by_phone(self, phone_number: str) -> User:
        user = self.db.query(User).filter(User.phone_number == phone_number).first()
        if not user:
            raise NotFoundError("User not found.")
        return user

    def list_users(self):
        return self.db.query(User).order_by(User.created_at, User.id).all()

    def update_user(self, email_query: str, fields: dict) -> User:
        user = self.get_by_email(email_query)
        for key in ("email", "name", "phoneNumber"):
            if key in fields and fields[key] is not None and is_blank(fields[key]):
                raise ValidationError(f"{key} cannot be empty.")
        if fields.get("email") is not None:
            user.email = normalize_email(fields["email"])
        if fields.get("name") is not None:
            user.name = fields["name"]
        if fields.get("phoneNumber") is not None:
            user.phone_number = fields["phoneNumber"]
        if fields.get("password"):
            user.hashed_password = get_password_hash(fields["password"])
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Email already in use.")
        self.db.refresh(user)
        logger.debug(f"Updated user: {user.id}")
        return user

    def delete_user(self, email: str) -> None:
        user = self.get_by_email(email)
        self.db.delete(user)
        self.db.commit()
        logger.debug(f"Deleted user: {user.id}")

    def set_admin(self, email: str) -> User:
        user = self.get_by_email(email)
        user.is_admin = True
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Promoted {user.email} to admin")
        return user

    def _create(self, email, password, name=None, phone_number=None) -> User:
        db_user = User(
            email=normalize_email(email),
            name=name,
            phone_number=phone_number,
            hashed_password=get_password_hash(password),
            is_admin=False,
            created_at=self.clock(),
        )
        self.db.add(db_user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.error(f"Email already in use: {email}")
            raise ConflictError("Email already in use.")
        self.db.refresh(db_user)
        logger.debug(f"Created user: {db_user.id}")
        return db_user
