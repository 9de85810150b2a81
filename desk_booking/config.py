import os
from dataclasses import dataclass
from dotenv import load_dotenv


DEFAULT_DATABASE_URL = "sqlite:///./data/desk_booking.db"


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    secret_key: str = "change-me-desk-booking-secret"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    timezone: str = "UTC"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the environment, loading a .env file first if present."""
        load_dotenv()
        return cls(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            secret_key=os.getenv("SECRET_KEY", cls.secret_key),
            algorithm=os.getenv("JWT_ALGORITHM", cls.algorithm),
            access_token_expire_minutes=int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", cls.access_token_expire_minutes)
            ),
            timezone=os.getenv("BOOKING_TIMEZONE", cls.timezone),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )
