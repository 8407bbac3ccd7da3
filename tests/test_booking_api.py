import uuid

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.routers.bookings import get_booking_service
from app.services.booking_service import BookingService
from app.services.event_service import EventService
from tests.conftest import TEST_TABLE_NAME


@pytest.fixture
def client(dynamodb_resource):
    """Create test client with overridden dependencies"""

    def get_test_booking_service():
        return BookingService(dynamodb_resource, TEST_TABLE_NAME)

    app.dependency_overrides[get_booking_service] = get_test_booking_service

    with TestClient(app) as test_client:
        yield test_client

    # Clean up dependency overrides
    app.dependency_overrides = {}


@pytest.fixture
def event(dynamodb_resource, valid_event_data):
    return EventService(dynamodb_resource, TEST_TABLE_NAME).create_event(valid_event_data)


def test_create_booking_api_success(client, event):
    response = client.post(
        "/api/bookings/",
        json={"eventId": event.id, "slug": event.slug, "email": "Jane@Example.com"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["booking"]["email"] == "jane@example.com"
    assert body["booking"]["eventId"] == event.id


def test_create_booking_api_invalid_email(client, event):
    response = client.post(
        "/api/bookings/",
        json={"eventId": event.id, "slug": event.slug, "email": "not-an-email"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["cause"] == "InvalidEmailError"


def test_create_booking_api_missing_event(client, event):
    response = client.post(
        "/api/bookings/",
        json={"eventId": str(uuid.uuid4()), "slug": "gone", "email": "jane@example.com"},
    )

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["cause"] == "DanglingReferenceError"


def test_create_booking_api_requires_event_id(client):
    response = client.post("/api/bookings/", json={"email": "jane@example.com"})

    assert response.status_code == 422


def test_create_booking_api_failure_body(client, event):
    response = client.post(
        "/api/bookings/",
        json={"eventId": event.id, "slug": event.slug, "email": "not-an-email"},
    )

    body = response.json()
    assert "detail" not in body
    assert body["message"] == "Booking Failed"
    assert body["field"] == "email"
    assert "not-an-email" in body["error"]
