import uuid
import logging
from datetime import datetime, timezone
from functools import reduce
from operator import or_
from typing import Any, Dict, List, Optional, Union

from boto3.dynamodb.conditions import Key, Attr
from botocore.exceptions import BotoCoreError, ClientError

from app.core.errors import (
    DuplicateSlugError,
    EventNotFoundError,
    StoreError,
)
from app.schemas.event import EventCreate, EventOut, EventUpdate
from app.validation.event_validator import validate_event

logger = logging.getLogger(__name__)

TIMELINE_INDEX = "GSI_EventsByCreated"
TIMELINE_PK = "EVENT_TIMELINE"

KEY_ATTRIBUTES = (
    "PK",
    "SK",
    "entity",
    "GSI_EventsByCreated_PK",
    "GSI_EventsByCreated_SK",
)


def _utcnow() -> str:
    """UTC timestamp with fixed-width microseconds so it sorts as a string"""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def event_key(event_id: str) -> Dict[str, str]:
    return {"PK": f"EVENT#{event_id}", "SK": "DETAIL"}


def slug_key(slug: str) -> Dict[str, str]:
    return {"PK": f"SLUG#{slug}", "SK": "EVENT"}


class EventService:
    def __init__(self, dynamodb_resource, table_name="DevEvent"):
        self.dynamodb = dynamodb_resource
        self.table = dynamodb_resource.Table(table_name)

    # -------- item helpers --------

    def _build_item(
        self, event: Dict[str, Any], event_id: str, created_at: str, updated_at: str
    ) -> Dict[str, Any]:
        item = {k: v for k, v in event.items() if k not in KEY_ATTRIBUTES}
        item.update(event_key(event_id))
        item["entity"] = "EVENT"
        item["id"] = event_id
        item["createdAt"] = created_at
        item["updatedAt"] = updated_at

        # GSI attributes for the newest-first listing
        item["GSI_EventsByCreated_PK"] = TIMELINE_PK
        item["GSI_EventsByCreated_SK"] = f"CREATED#{created_at}#EVENT#{event_id}"
        return item

    def _slug_claim(self, slug: str, event_id: str) -> Dict[str, Any]:
        return {**slug_key(slug), "entity": "SLUG", "slug": slug, "eventId": event_id}

    @staticmethod
    def _to_event_out(item: Dict[str, Any]) -> EventOut:
        return EventOut(**{k: item[k] for k in EventOut.model_fields if k in item})

    @staticmethod
    def _strip_keys(item: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in item.items() if k not in KEY_ATTRIBUTES}

    def _raise_for_transaction(
        self, error: ClientError, slug: str, slug_index: Optional[int] = None
    ):
        """Translate a failed write transaction into the error taxonomy.

        `slug_index` is the position of the slug-claim Put in the
        transaction, or None when the transaction claims no slug.
        """
        if error.response["Error"]["Code"] != "TransactionCanceledException":
            raise StoreError(f"Failed to write event: {error}") from error

        if slug_index is not None:
            reasons = error.response.get("CancellationReasons", [])
            if reasons:
                claim_failed = (
                    len(reasons) > slug_index
                    and reasons[slug_index].get("Code") == "ConditionalCheckFailed"
                )
            else:
                # No cancellation reasons returned; the claim tells us who won
                try:
                    claim_failed = self._get_slug_owner(slug) is not None
                except (BotoCoreError, ClientError) as e:
                    raise StoreError(f"Transaction failed: {error}") from e
            if claim_failed:
                raise DuplicateSlugError(
                    f"An event with slug '{slug}' already exists", field="slug"
                ) from error
        raise StoreError(f"Transaction failed: {error}") from error

    def _get_slug_owner(self, slug: str) -> Optional[str]:
        response = self.table.get_item(Key=slug_key(slug), ConsistentRead=True)
        item = response.get("Item")
        return item["eventId"] if item else None

    def _get_item(self, event_id: str) -> Optional[Dict[str, Any]]:
        response = self.table.get_item(Key=event_key(event_id))
        return response.get("Item")

    def _get_item_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        event_id = self._get_slug_owner(slug.strip().lower())
        if event_id is None:
            return None
        return self._get_item(event_id)

    def _query_timeline(self, **query_kwargs) -> List[Dict[str, Any]]:
        """Query every event on the timeline index, newest first"""
        items: List[Dict[str, Any]] = []
        query_kwargs.update(
            IndexName=TIMELINE_INDEX,
            KeyConditionExpression=Key("GSI_EventsByCreated_PK").eq(TIMELINE_PK),
            ScanIndexForward=False,
        )
        while True:
            response = self.table.query(**query_kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            query_kwargs["ExclusiveStartKey"] = last_key

    # -------- writes --------

    def create_event(self, event_data: Union[EventCreate, Dict[str, Any]]) -> EventOut:
        """Validate, normalize and store a new event together with its slug claim"""
        if isinstance(event_data, EventCreate):
            event_data = event_data.model_dump()
        event = validate_event(event_data)

        event_id = str(uuid.uuid4())
        now = _utcnow()
        item = self._build_item(event, event_id, now, now)

        transact_items = [
            {
                "Put": {
                    "TableName": self.table.table_name,
                    "Item": item,
                    "ConditionExpression": "attribute_not_exists(PK)",
                }
            },
            # The slug claim acts as the unique index on slug
            {
                "Put": {
                    "TableName": self.table.table_name,
                    "Item": self._slug_claim(event["slug"], event_id),
                    "ConditionExpression": "attribute_not_exists(PK)",
                }
            },
        ]

        try:
            self.dynamodb.meta.client.transact_write_items(TransactItems=transact_items)
        except ClientError as e:
            self._raise_for_transaction(e, event["slug"], slug_index=1)
        except BotoCoreError as e:
            raise StoreError(f"Failed to create event: {e}") from e

        logger.info("Created event %s (%s)", event_id, event["slug"])
        return self._to_event_out(item)

    def update_event(
        self, slug: str, changes: Union[EventUpdate, Dict[str, Any]]
    ) -> EventOut:
        """Apply field changes to an event and re-run validation.

        The slug follows the title; when it changes the old claim is released
        and the new one taken in the same transaction.
        """
        if isinstance(changes, EventUpdate):
            changes = changes.model_dump(exclude_unset=True)

        try:
            existing_item = self._get_item_by_slug(slug)
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"Failed to fetch event: {e}") from e
        if existing_item is None:
            raise EventNotFoundError(f"Event '{slug}' not found", field="slug")

        existing = self._strip_keys(existing_item)
        merged = dict(existing)
        merged.update({k: v for k, v in changes.items() if v is not None})
        event = validate_event(merged, existing)

        event_id = existing["id"]
        item = self._build_item(event, event_id, existing["createdAt"], _utcnow())

        transact_items = [
            {
                "Put": {
                    "TableName": self.table.table_name,
                    "Item": item,
                    "ConditionExpression": "attribute_exists(PK)",
                }
            }
        ]
        slug_changed = event["slug"] != existing["slug"]
        if slug_changed:
            transact_items.append(
                {
                    "Put": {
                        "TableName": self.table.table_name,
                        "Item": self._slug_claim(event["slug"], event_id),
                        "ConditionExpression": "attribute_not_exists(PK)",
                    }
                }
            )
            transact_items.append(
                {
                    "Delete": {
                        "TableName": self.table.table_name,
                        "Key": slug_key(existing["slug"]),
                    }
                }
            )

        try:
            self.dynamodb.meta.client.transact_write_items(TransactItems=transact_items)
        except ClientError as e:
            self._raise_for_transaction(e, event["slug"], slug_index=1 if slug_changed else None)
        except BotoCoreError as e:
            raise StoreError(f"Failed to update event: {e}") from e

        if slug_changed:
            logger.info(
                "Event %s slug changed %s -> %s", event_id, existing["slug"], event["slug"]
            )
        return self._to_event_out(item)

    # -------- reads --------

    def get_event(self, event_id: str) -> Optional[EventOut]:
        try:
            item = self._get_item(event_id)
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"Failed to fetch event: {e}") from e
        return self._to_event_out(item) if item else None

    def get_event_by_slug(self, slug: str) -> Optional[EventOut]:
        try:
            item = self._get_item_by_slug(slug)
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"Failed to fetch event: {e}") from e
        return self._to_event_out(item) if item else None

    def event_exists(self, event_id: str) -> bool:
        try:
            response = self.table.get_item(
                Key=event_key(event_id), ProjectionExpression="PK", ConsistentRead=True
            )
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"Failed to check event: {e}") from e
        return "Item" in response

    def list_events(self) -> List[EventOut]:
        """All events, most recently created first"""
        try:
            items = self._query_timeline()
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"Failed to list events: {e}") from e
        return [self._to_event_out(item) for item in items]

    def get_similar_events_by_slug(self, slug: str) -> List[EventOut]:
        """Other events sharing at least one tag with the event at `slug`.

        Best effort: unknown slugs and store failures both yield [].
        """
        try:
            event = self.get_event_by_slug(slug)
            if event is None or not event.tags:
                return []

            shares_tag = reduce(or_, [Attr("tags").contains(tag) for tag in event.tags])
            items = self._query_timeline(
                FilterExpression=shares_tag & Attr("id").ne(event.id)
            )
            return [self._to_event_out(item) for item in items]
        except Exception as e:
            logger.warning("Similar events lookup failed for %r: %s", slug, e)
            return []
