import pytest
from fastapi import status
from sqlalchemy.exc import OperationalError

from desk_booking.errors import InternalError
from desk_booking.main import error_response
from desk_booking.models.booking import Booking
from desk_booking.services.bookings import BookingService

from tests.conf_tests import (
    ZONE,
    client,
    clear_db,
    count_bookings,
    test_db,
    test_user,
    test_admin,
    auth_headers,
    admin_headers,
)

# Test data
TEST_BOOKING_DATA = {
    "name": "Alice",
    "userId": "user-1",
    "deskId": "desk-1",
    "dateTimestamp": "2025-10-23T00:00:00+08:00",
}


# Fixtures
@pytest.fixture
def test_booking(test_db): # pylint: disable=redefined-outer-name
    return BookingService(test_db, ZONE).create_booking(
        TEST_BOOKING_DATA["name"],
        TEST_BOOKING_DATA["userId"],
        TEST_BOOKING_DATA["deskId"],
        TEST_BOOKING_DATA["dateTimestamp"],
    )


# Tests
def test_create_booking_success():
    response = client.post("/api/booking/", json=TEST_BOOKING_DATA)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["message"] == "Booking created successfully."
    booking = data["booking"]
    assert booking["name"] == TEST_BOOKING_DATA["name"]
    assert booking["userId"] == TEST_BOOKING_DATA["userId"]
    assert booking["deskId"] == TEST_BOOKING_DATA["deskId"]
    assert booking["dateTimestamp"] == "2025-10-22T16:00:00Z"
    assert booking["status"] == "active"
    assert booking["id"]
    assert booking["createdAt"]


def test_create_then_get_booking_by_id():
    created = client.post("/api/booking/", json=TEST_BOOKING_DATA).json()["booking"]
    response = client.get(f"/api/booking/{created['id']}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["booking"] == created


@pytest.mark.parametrize("missing", ["name", "userId", "deskId", "dateTimestamp"])
# pylint: disable-next=redefined-outer-name
def test_create_booking_missing_field(test_db, missing):
    payload = {key: value for key, value in TEST_BOOKING_DATA.items() if key != missing}
    response = client.post("/api/booking/", json=payload)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "missing field"
    assert count_bookings(test_db) == 0


def test_create_booking_invalid_date():
    response = client.post("/api/booking/", json={**TEST_BOOKING_DATA, "dateTimestamp": "tomorrow"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "invalid date"


# pylint: disable-next=redefined-outer-name
def test_create_booking_conflict(test_booking):
    payload = {**TEST_BOOKING_DATA, "name": "Bob", "userId": "user-2", "dateTimestamp": "2025-10-23T15:00:00+08:00"}
    response = client.post("/api/booking/", json=payload)
    assert response.status_code == status.HTTP_409_CONFLICT
    data = response.json()
    assert data["conflictingId"] == test_booking.id
    assert test_booking.id in data["detail"]


def test_get_all_bookings_empty():
    response = client.get("/api/booking/")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["bookings"] == []


# pylint: disable-next=redefined-outer-name
def test_get_all_bookings(test_booking):
    response = client.get("/api/booking/")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["bookings"]
    assert len(data) == 1
    assert data[0]["id"] == test_booking.id


# pylint: disable-next=redefined-outer-name
def test_get_bookings_by_date(test_booking):
    response = client.get("/api/booking/by-date", params={"dateTimestamp": "2025-10-23"})
    assert response.status_code == status.HTTP_200_OK
    assert [b["id"] for b in response.json()["bookings"]] == [test_booking.id]

    response = client.get(
        "/api/booking/by-date", params={"dateTimestamp": "2025-10-23", "deskId": "desk-2"}
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["bookings"] == []


def test_get_bookings_by_date_requires_date():
    response = client.get("/api/booking/by-date")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


# pylint: disable-next=redefined-outer-name
def test_get_bookings_by_name(test_booking):
    response = client.get("/api/booking/name/Alice")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["bookings"][0]["id"] == test_booking.id


def test_get_bookings_by_name_not_found():
    response = client.get("/api/booking/name/Nobody")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_get_booking_not_found():
    response = client.get("/api/booking/missing")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Booking not found."


# pylint: disable-next=redefined-outer-name
def test_update_booking(test_booking):
    response = client.patch(f"/api/booking/{test_booking.id}", json={"name": "Alice Smith"})
    assert response.status_code == status.HTTP_200_OK
    booking = response.json()["booking"]
    assert booking["name"] == "Alice Smith"
    assert booking["deskId"] == TEST_BOOKING_DATA["deskId"]
    assert booking["oldModifications"]["name"] == "Alice"
    assert booking["updatedAt"]


def test_update_booking_not_found():
    response = client.patch("/api/booking/missing", json={"name": "Nobody"})
    assert response.status_code == status.HTTP_404_NOT_FOUND


# pylint: disable-next=redefined-outer-name
def test_cancel_booking(test_booking):
    response = client.patch(f"/api/booking/cancel/{test_booking.id}", json={"reason": "Sick"})
    assert response.status_code == status.HTTP_200_OK
    booking = response.json()["booking"]
    assert booking["status"] == "cancelled"
    assert booking["cancellationReason"] == "Sick"
    assert booking["cancelledAt"]


# pylint: disable-next=redefined-outer-name
def test_cancel_booking_without_body(test_booking):
    response = client.patch(f"/api/booking/cancel/{test_booking.id}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["booking"]["status"] == "cancelled"


def test_cancel_booking_not_found():
    response = client.patch("/api/booking/cancel/missing", json={})
    assert response.status_code == status.HTTP_404_NOT_FOUND


# pylint: disable-next=redefined-outer-name
def test_delete_booking_without_token(test_booking):
    response = client.delete(f"/api/booking/{test_booking.id}")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "missing token"


# pylint: disable-next=redefined-outer-name
def test_delete_booking_invalid_token(test_booking):
    response = client.delete(
        f"/api/booking/{test_booking.id}", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


# pylint: disable-next=redefined-outer-name
def test_delete_booking_not_admin(auth_headers, test_booking, test_db):
    response = client.delete(f"/api/booking/{test_booking.id}", headers=auth_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "forbidden"
    assert count_bookings(test_db) == 1


# pylint: disable-next=redefined-outer-name
def test_delete_booking_as_admin(admin_headers, test_booking, test_db):
    response = client.delete(f"/api/booking/{test_booking.id}", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert test_db.query(Booking).filter(Booking.id == test_booking.id).first() is None
    assert client.get(f"/api/booking/{test_booking.id}").status_code == status.HTTP_404_NOT_FOUND


# pylint: disable-next=redefined-outer-name
def test_delete_booking_not_found(admin_headers):
    response = client.delete("/api/booking/missing", headers=admin_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_health():
    response = client.get("/api/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "ok"


def test_database_failure_is_opaque(monkeypatch):
    def failing_get_all(self):
        raise OperationalError("SELECT * FROM bookings", {}, Exception("db down secret"))

    monkeypatch.setattr(BookingService, "get_all", failing_get_all)
    response = client.get("/api/booking/")
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"detail": "Internal server error"}
    assert "secret" not in response.text


def test_internal_error_hides_message():
    response = error_response(InternalError("connection refused at 10.0.0.5"))
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert b"10.0.0.5" not in response.body
