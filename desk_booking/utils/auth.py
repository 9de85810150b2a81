from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext
from desk_booking.errors import AuthError

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# HTTP Bearer scheme; a missing header is reported by ``authorize`` itself
bearer_scheme = HTTPBearer(
    scheme_name="JWT",
    description="Enter 'Bearer <your_jwt_token>' in the Value field. Obtain the token via /api/auth/login.",
    auto_error=False,
)


@dataclass(frozen=True)
class VerifiedToken:
    user_id: str
    claims: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Principal:
    user_id: str
    is_admin: bool = False


def verify_password(plain_password, hashed_password):
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    """Hash a password for storage."""
    return pwd_context.hash(password)


class TokenVerifier:
    """Issues and verifies signed bearer tokens carrying the ``admin`` claim."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def create_access_token(self, user_id: str, admin: bool = False, email: Optional[str] = None,
                            expires_delta: Optional[timedelta] = None):
        """Create a JWT access token with an expiration time."""
        expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=self.expire_minutes))
        to_encode = {"sub": user_id, "admin": admin, "exp": expire}
        if email:
            to_encode["email"] = email
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> VerifiedToken:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise AuthError(AuthError.INVALID_TOKEN, f"invalid token: {e}")
        user_id = payload.get("sub")
        if not user_id:
            raise AuthError(AuthError.INVALID_TOKEN)
        return VerifiedToken(user_id=user_id, claims=payload)


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthError(AuthError.MISSING_TOKEN)
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError(AuthError.MISSING_TOKEN)
    return token.strip()


def authorize(authorization: Optional[str], verifier: TokenVerifier) -> Principal:
    """Resolve the caller behind an ``Authorization: Bearer <token>`` header."""
    token = extract_bearer_token(authorization)
    verified = verifier.verify_token(token)
    return Principal(user_id=verified.user_id, is_admin=verified.claims.get("admin") is True)


def require_admin(principal: Principal) -> Principal:
    if not principal.is_admin:
        raise AuthError(AuthError.FORBIDDEN)
    return principal


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> Principal:
    """Verify the Bearer token and return the calling principal."""
    header = f"{credentials.scheme} {credentials.credentials}" if credentials else None
    return authorize(header, verifier)


def get_admin(principal: Principal = Depends(get_principal)) -> Principal:
    return require_admin(principal)
