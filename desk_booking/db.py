import os
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker


Base = declarative_base()


def build_engine(database_url: str):
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    return create_engine(database_url, connect_args=connect_args)


def build_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_database(engine):
    """Create the SQLite data directory if needed, then all tables."""
    url = engine.url
    if url.drivername.startswith("sqlite") and url.database:
        directory = os.path.dirname(url.database)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)
    # Models must be imported so their tables are registered on Base.
    from desk_booking.models import booking, desk, user  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    """Provide a database session."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
