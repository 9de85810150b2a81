import os
import pytest
from fastapi.testclient import TestClient

from desk_booking.config import Settings
from desk_booking.db import Base
from desk_booking.main import create_app
from desk_booking.models.booking import Booking
from desk_booking.models.desk import Desk
from desk_booking.models.user import User
from desk_booking.utils.auth import get_password_hash
from desk_booking.utils.validation_helpers import utcnow

# Test database setup
if not os.path.exists("./out"):
    os.makedirs("./out")

TEST_SETTINGS = Settings(
    database_url="sqlite:///./out/tests.db",
    secret_key="test-secret-key-1234567890",
    timezone="Australia/Perth",
    log_level="DEBUG",
)

app = create_app(TEST_SETTINGS)
engine = app.state.engine
TestingSessionLocal = app.state.session_factory
ZONE = app.state.zone
verifier = app.state.token_verifier

# Create test tables
Base.metadata.create_all(bind=engine)

client = TestClient(app)

TEST_PASSWORD = "testpassword"


# Fixtures
@pytest.fixture(autouse=True)
def clear_db():
    """Clear all data from all tables before each test"""
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def test_db():
    """Provide a database session for testing"""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_next_user():
    """Helper function to generate unique e-mail addresses"""
    if not hasattr(get_next_user, "user_count"):
        get_next_user.user_count = 0
    get_next_user.user_count += 1
    return get_next_user.user_count


def make_user(db, is_admin=False, phone_number=None):
    number = get_next_user()
    user = User(
        email=f"user_{number}@example.com",
        name=f"User {number}",
        phone_number=phone_number,
        hashed_password=get_password_hash(TEST_PASSWORD),
        is_admin=is_admin,
        created_at=utcnow(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def login_headers(user):
    response = client.post(
        "/api/auth/login",
        json={"email": user.email, "password": TEST_PASSWORD},
    )
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_user(test_db):
    """Fixture to create an ordinary user in the database"""
    return make_user(test_db)


@pytest.fixture
def test_admin(test_db):
    """Fixture to create an admin user in the database"""
    return make_user(test_db, is_admin=True)


@pytest.fixture
def auth_headers(test_user):
    """Bearer headers for an ordinary user, obtained through the login route"""
    return login_headers(test_user)


@pytest.fixture
def admin_headers(test_admin):
    """Bearer headers for an admin, obtained through the login route"""
    return login_headers(test_admin)


@pytest.fixture
def test_desk(test_db):
    desk = Desk(name="Desk 1A", seats=1, created_at=utcnow())
    test_db.add(desk)
    test_db.commit()
    test_db.refresh(desk)
    return desk


def count_bookings(db):
    return db.query(Booking).count()
