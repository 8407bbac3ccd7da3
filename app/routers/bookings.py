import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import DevEventError
from app.database.dynamodb import get_db_connection
from app.schemas.booking import BookingCreate
from app.schemas.common import BookingResponse, ErrorResponse
from app.services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


def get_booking_service():
    """Dependency to get BookingService instance"""
    db = get_db_connection()
    return BookingService(db, settings.DYNAMODB_TABLE_NAME)


@router.post(
    "/",
    response_model=BookingResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def create_booking(
    booking_data: BookingCreate,
    booking_service: BookingService = Depends(get_booking_service),
):
    """Book a seat for an event with an email address"""
    try:
        booking = booking_service.create_booking(booking_data)
    except DevEventError as e:
        logger.info("Booking rejected for event %s: %s", booking_data.eventId, e)
        error = ErrorResponse(
            message="Booking Failed", error=str(e), cause=e.cause, field=e.field
        )
        return JSONResponse(status_code=e.status_code, content=error.model_dump())
    return {"success": True, "booking": booking}
