from .event import EventBase, EventCreate, EventUpdate, EventOut, EventDetail
from .booking import BookingCreate, BookingOut
from .common import (
    EventResponse,
    EventListResponse,
    BookingResponse,
    BookingListResponse,
    ErrorResponse,
)

__all__ = [
    "EventBase",
    "EventCreate",
    "EventUpdate",
    "EventOut",
    "EventDetail",
    "BookingCreate",
    "BookingOut",
    "EventResponse",
    "EventListResponse",
    "BookingResponse",
    "BookingListResponse",
    "ErrorResponse",
]
