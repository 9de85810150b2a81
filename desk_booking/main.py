import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from desk_booking.config import Settings
from desk_booking.db import build_engine, build_session_factory, init_database
from desk_booking.errors import AuthError, BookingError, ConflictError, ErrorKind, InternalError
from desk_booking.routers import auth, bookings, desks, users
from desk_booking.utils.auth import TokenVerifier
from desk_booking.utils.validation_helpers import resolve_timezone

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.AUTH: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(exc: BookingError) -> JSONResponse:
    """Translate a core error into its HTTP response."""
    status_code = STATUS_BY_KIND[exc.kind]
    content = {"detail": exc.message}
    headers = None
    if isinstance(exc, AuthError):
        if exc.forbidden:
            status_code = status.HTTP_403_FORBIDDEN
        else:
            headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, ConflictError) and exc.existing_id:
        content["conflictingId"] = exc.existing_id
    elif exc.kind is ErrorKind.INTERNAL:
        content = {"detail": "Internal server error"}
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def booking_error_handler(request: Request, exc: BookingError):
    if exc.kind is ErrorKind.INTERNAL:
        logger.error(f"Internal error on {request.method} {request.url.path}: {exc.message}")
    return error_response(exc)


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Database failures surface as opaque internal errors."""
    logger.exception(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return await booking_error_handler(request, InternalError(f"database failure: {type(exc).__name__}"))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    engine = build_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        "lifespan for initing database"
        init_database(engine)
        yield
        engine.dispose()

    app = FastAPI(
        lifespan=lifespan,
        title="Desk booker",
        description="Desk booking service: one active booking per desk per day.",
        version="0.1.0",
        license_info={
            "name": "MIT",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.zone = resolve_timezone(settings.timezone)
    app.state.token_verifier = TokenVerifier(
        settings.secret_key,
        algorithm=settings.algorithm,
        expire_minutes=settings.access_token_expire_minutes,
    )

    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health", tags=["health"])
    def health():
        return {
            "status": "ok",
            "message": "Backend is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    app.include_router(auth.router)
    app.include_router(bookings.router)
    app.include_router(desks.router)
    app.include_router(users.router)
    return app
