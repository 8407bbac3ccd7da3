from pydantic import BaseModel
from typing import List, Optional

from app.schemas.booking import BookingOut
from app.schemas.event import EventOut


class EventResponse(BaseModel):
    message: str
    event: EventOut


class EventListResponse(BaseModel):
    message: str
    events: List[EventOut]


class BookingResponse(BaseModel):
    success: bool
    booking: Optional[BookingOut] = None


class BookingListResponse(BaseModel):
    bookings: List[BookingOut]
    count: int


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: str
    cause: str
    field: Optional[str] = None
