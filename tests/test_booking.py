import uuid
from unittest.mock import patch

import pytest
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import EndpointConnectionError

from app.core.errors import DanglingReferenceError, InvalidEmailError, StoreError
from app.schemas.booking import BookingCreate, BookingOut
from app.services.booking_service import BookingService
from app.services.event_service import EventService
from tests.conftest import TEST_TABLE_NAME


@pytest.fixture
def event_service(dynamodb_resource):
    """Create EventService instance with test table"""
    return EventService(dynamodb_resource, TEST_TABLE_NAME)


@pytest.fixture
def booking_service(dynamodb_resource):
    """Create BookingService instance with test table"""
    return BookingService(dynamodb_resource, TEST_TABLE_NAME)


@pytest.fixture
def event(event_service, valid_event_data):
    return event_service.create_event(valid_event_data)


def _booking_items(dynamodb_resource):
    table = dynamodb_resource.Table(TEST_TABLE_NAME)
    return table.scan(FilterExpression=Attr("entity").eq("BOOKING"))["Items"]


def test_create_booking_success(booking_service, event):
    result = booking_service.create_booking(
        BookingCreate(eventId=event.id, slug=event.slug, email=" Jane@Example.com ")
    )

    assert isinstance(result, BookingOut)
    assert result.eventId == event.id
    assert result.slug == event.slug
    assert result.email == "jane@example.com"
    assert uuid.UUID(result.id)


def test_create_booking_for_missing_event(booking_service, dynamodb_resource, event):
    with pytest.raises(DanglingReferenceError):
        booking_service.create_booking(
            BookingCreate(eventId=str(uuid.uuid4()), email="jane@example.com")
        )

    assert _booking_items(dynamodb_resource) == []


def test_create_booking_invalid_email(booking_service, dynamodb_resource, event):
    with pytest.raises(InvalidEmailError):
        booking_service.create_booking(
            BookingCreate(eventId=event.id, slug=event.slug, email="not-an-email")
        )

    assert _booking_items(dynamodb_resource) == []


def test_create_booking_with_malformed_event_id(booking_service):
    with pytest.raises(DanglingReferenceError):
        booking_service.create_booking({"eventId": "abc", "email": "jane@example.com"})


def test_list_and_count_bookings_for_event(
    booking_service, event_service, make_event_data, event
):
    other = event_service.create_event(make_event_data(title="Rust Nation"))

    for email in ["a@example.com", "b@example.com"]:
        booking_service.create_booking(BookingCreate(eventId=event.id, email=email))
    booking_service.create_booking(BookingCreate(eventId=other.id, email="c@example.com"))

    bookings = booking_service.list_bookings_for_event(event.id)

    assert sorted(b.email for b in bookings) == ["a@example.com", "b@example.com"]
    assert booking_service.count_bookings_for_event(event.id) == 2
    assert booking_service.count_bookings_for_event(other.id) == 1
    assert booking_service.count_bookings_for_event(str(uuid.uuid4())) == 0


def test_create_booking_wraps_connection_failures(booking_service, dynamodb_resource, event):
    error = EndpointConnectionError(endpoint_url="http://dynamodb.invalid")

    with patch.object(booking_service.event_service.table, "get_item", side_effect=error):
        with pytest.raises(StoreError):
            booking_service.create_booking(
                BookingCreate(eventId=event.id, email="jane@example.com")
            )

    assert _booking_items(dynamodb_resource) == []


def test_booking_queries_wrap_connection_failures(booking_service, event):
    error = EndpointConnectionError(endpoint_url="http://dynamodb.invalid")

    with patch.object(booking_service.table, "query", side_effect=error):
        with pytest.raises(StoreError):
            booking_service.list_bookings_for_event(event.id)
        with pytest.raises(StoreError):
            booking_service.count_bookings_for_event(event.id)
