from pydantic import BaseModel
from typing import Optional


class BookingCreate(BaseModel):
    eventId: str
    slug: Optional[str] = None
    # Checked by the booking validator so the error type stays consistent
    email: str


class BookingOut(BaseModel):
    id: str
    eventId: str
    slug: Optional[str] = None
    email: str
    createdAt: str
    updatedAt: str
