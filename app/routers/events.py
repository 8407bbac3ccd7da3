import logging
from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, Depends, Request
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from app.core.config import settings
from app.core.errors import DevEventError
from app.database.dynamodb import get_db_connection
from app.routers.bookings import get_booking_service
from app.schemas.booking import BookingOut
from app.schemas.common import BookingListResponse, EventListResponse, EventResponse
from app.schemas.event import EventDetail, EventOut, EventUpdate
from app.services.booking_service import BookingService
from app.services.event_service import EventService
from app.services.upload_service import UploadService, create_s3_client
from app.utils.forms import parse_list_field
from app.validation.event_validator import validate_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])

LIST_FIELDS = ("agenda", "tags")


def get_event_service():
    """Dependency to get EventService instance"""
    db = get_db_connection()
    return EventService(db, settings.DYNAMODB_TABLE_NAME)


def get_upload_service():
    """Dependency to get UploadService instance"""
    return UploadService(
        create_s3_client(settings),
        settings.IMAGE_BUCKET,
        public_base_url=settings.IMAGE_BASE_URL,
        folder=settings.IMAGE_FOLDER,
        max_size=settings.MAX_IMAGE_SIZE,
    )


def error_detail(message: str, error: DevEventError) -> Dict[str, Any]:
    return {
        "message": message,
        "error": str(error),
        "cause": error.cause,
        "field": error.field,
    }


def _form_to_event_data(form) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for key, value in form.multi_items():
        if key == "image" or key in LIST_FIELDS or not isinstance(value, str):
            continue
        data[key] = value

    for key in LIST_FIELDS:
        values = form.getlist(key)
        # A repeated field is already a list; a single one may be JSON or CSV
        raw = values if len(values) > 1 else (values[0] if values else None)
        data[key] = parse_list_field(raw)
    return data


@router.post("/", response_model=EventResponse, status_code=201)
async def create_event(
    request: Request,
    event_service: EventService = Depends(get_event_service),
    upload_service: UploadService = Depends(get_upload_service),
):
    """Create an event from a multipart form with an image file"""
    form = await request.form()
    image = form.get("image")
    if not isinstance(image, UploadFile) or not image.filename:
        raise HTTPException(status_code=400, detail={"message": "No image file found."})

    data = _form_to_event_data(form)
    try:
        # Reject bad payloads before the upload
        validate_event({**data, "image": image.filename})

        content = await image.read()
        data["image"] = await run_in_threadpool(
            upload_service.upload_image,
            content,
            filename=image.filename,
            content_type=image.content_type,
        )
        event = await run_in_threadpool(event_service.create_event, data)
    except DevEventError as e:
        logger.info("Event creation rejected: %s", e)
        raise HTTPException(
            status_code=e.status_code, detail=error_detail("Event Creation Failed", e)
        )

    return {"message": "Event created successfully", "event": event}


@router.get("/", response_model=EventListResponse)
def list_events(event_service: EventService = Depends(get_event_service)):
    """List all events, newest first"""
    try:
        events = event_service.list_events()
    except DevEventError as e:
        raise HTTPException(
            status_code=e.status_code, detail=error_detail("Event fetching failed", e)
        )
    return {"message": "Events fetched successfully", "events": events}


@router.get("/{slug}/similar", response_model=List[EventOut])
def get_similar_events(
    slug: str, event_service: EventService = Depends(get_event_service)
):
    return event_service.get_similar_events_by_slug(slug)


@router.get("/{slug}/bookings", response_model=BookingListResponse)
def list_event_bookings(
    slug: str,
    event_service: EventService = Depends(get_event_service),
    booking_service: BookingService = Depends(get_booking_service),
):
    event = event_service.get_event_by_slug(slug)
    if event is None:
        raise HTTPException(status_code=404, detail={"message": f"Event '{slug}' not found"})

    bookings: List[BookingOut] = booking_service.list_bookings_for_event(event.id)
    return {"bookings": bookings, "count": len(bookings)}


@router.get("/{slug}", response_model=EventDetail)
def get_event_detail(
    slug: str,
    event_service: EventService = Depends(get_event_service),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Event detail view: the event, similar events and its booking count"""
    try:
        event = event_service.get_event_by_slug(slug)
        if event is None:
            raise HTTPException(
                status_code=404, detail={"message": f"Event '{slug}' not found"}
            )
        return {
            "event": event,
            "similarEvents": event_service.get_similar_events_by_slug(event.slug),
            "bookingCount": booking_service.count_bookings_for_event(event.id),
        }
    except DevEventError as e:
        raise HTTPException(
            status_code=e.status_code, detail=error_detail("Event fetching failed", e)
        )


@router.patch("/{slug}", response_model=EventResponse)
def update_event(
    slug: str,
    changes: EventUpdate,
    event_service: EventService = Depends(get_event_service),
):
    """Update event fields; the record is re-validated before saving"""
    try:
        event = event_service.update_event(slug, changes)
    except DevEventError as e:
        raise HTTPException(
            status_code=e.status_code, detail=error_detail("Event Update Failed", e)
        )
    return {"message": "Event updated successfully", "event": event}
