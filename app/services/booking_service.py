import uuid
import logging
from typing import Any, Dict, List, Union

from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from app.core.errors import StoreError
from app.schemas.booking import BookingCreate, BookingOut
from app.services.event_service import EventService, _utcnow
from app.validation.booking_validator import validate_booking

logger = logging.getLogger(__name__)

BOOKINGS_BY_EVENT_INDEX = "GSI_BookingsByEvent"


class BookingService:
    def __init__(self, dynamodb_resource, table_name="DevEvent"):
        self.dynamodb = dynamodb_resource
        self.table = dynamodb_resource.Table(table_name)
        self.event_service = EventService(dynamodb_resource, table_name)

    @staticmethod
    def _to_booking_out(item: Dict[str, Any]) -> BookingOut:
        return BookingOut(**{k: item[k] for k in BookingOut.model_fields if k in item})

    def create_booking(
        self, booking_data: Union[BookingCreate, Dict[str, Any]]
    ) -> BookingOut:
        """Validate a booking and store it.

        The event existence check and the put are two separate requests; an
        event removed in between still gets the booking.
        """
        if isinstance(booking_data, BookingCreate):
            booking_data = booking_data.model_dump()
        booking = validate_booking(booking_data, self.event_service.event_exists)

        booking_id = str(uuid.uuid4())
        now = _utcnow()
        item = {
            "PK": f"BOOKING#{booking_id}",
            "SK": "DETAIL",
            "entity": "BOOKING",
            "id": booking_id,
            "eventId": booking["eventId"],
            "email": booking["email"],
            "createdAt": now,
            "updatedAt": now,
        }
        if booking.get("slug"):
            item["slug"] = booking["slug"]

        # Secondary index on the referenced event
        item["GSI_BookingsByEvent_PK"] = f"EVENT#{booking['eventId']}"
        item["GSI_BookingsByEvent_SK"] = f"CREATED#{now}#BOOKING#{booking_id}"

        try:
            self.table.put_item(
                Item=item, ConditionExpression="attribute_not_exists(PK)"
            )
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"Failed to create booking: {e}") from e

        logger.info("Created booking %s for event %s", booking_id, booking["eventId"])
        return self._to_booking_out(item)

    def list_bookings_for_event(self, event_id: str) -> List[BookingOut]:
        items: List[Dict[str, Any]] = []
        query_kwargs = {
            "IndexName": BOOKINGS_BY_EVENT_INDEX,
            "KeyConditionExpression": Key("GSI_BookingsByEvent_PK").eq(f"EVENT#{event_id}"),
        }
        try:
            while True:
                response = self.table.query(**query_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"Failed to list bookings: {e}") from e
        return [self._to_booking_out(item) for item in items]

    def count_bookings_for_event(self, event_id: str) -> int:
        count = 0
        query_kwargs = {
            "IndexName": BOOKINGS_BY_EVENT_INDEX,
            "KeyConditionExpression": Key("GSI_BookingsByEvent_PK").eq(f"EVENT#{event_id}"),
            "Select": "COUNT",
        }
        try:
            while True:
                response = self.table.query(**query_kwargs)
                count += response.get("Count", 0)
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    return count
                query_kwargs["ExclusiveStartKey"] = last_key
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"Failed to count bookings: {e}") from e
