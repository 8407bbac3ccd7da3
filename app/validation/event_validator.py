"""
Write-time validation and normalization for Event records.

`validate_event` is called explicitly by the event store before every create
and update. Steps run in order and the first failure aborts the write.
"""

from typing import Any, Dict, List, Optional

from app.core.errors import (
    EmptyCollectionError,
    EmptySlugError,
    RequiredFieldError,
    SlugGenerationError,
)
from app.validation.normalizers import normalize_date, normalize_time, slugify

REQUIRED_STRING_FIELDS = (
    "title",
    "description",
    "overview",
    "image",
    "venue",
    "location",
    "date",
    "time",
    "mode",
    "audience",
    "organizer",
)

# Everything an Event record stores; other keys are dropped before saving
EVENT_FIELDS = REQUIRED_STRING_FIELDS + ("slug", "agenda", "tags")


def _changed(field: str, data: Dict[str, Any], existing: Optional[Dict[str, Any]]) -> bool:
    if existing is None:
        return True
    return data.get(field) != existing.get(field)


def _clean_string_list(field: str, value: Any, lowercase: bool = False) -> List[str]:
    if not isinstance(value, (list, tuple)) or len(value) == 0:
        raise EmptyCollectionError(f"{field} cannot be empty", field=field)

    cleaned = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise EmptyCollectionError(
                f"{field} items must be non-empty strings", field=field
            )
        item = item.strip()
        if lowercase:
            item = item.lower()
        cleaned.append(item)
    return cleaned


def check_required_fields(data: Dict[str, Any]) -> Dict[str, str]:
    """Return the required string fields trimmed, or raise RequiredFieldError."""
    trimmed = {}
    for field in REQUIRED_STRING_FIELDS:
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            raise RequiredFieldError(
                f"{field} is required and cannot be empty", field=field
            )
        trimmed[field] = value.strip()
    return trimmed


def validate_event(
    data: Dict[str, Any], existing: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Validate and normalize an Event record before it is persisted.

    `existing` is the stored record when updating and None when creating.
    Slug, date and time are only recomputed when the relevant field changed
    (or, for the slug, when no slug is set yet). Returns a new dict holding
    only the Event fields; unknown keys are dropped.
    """
    event = {k: v for k, v in data.items() if k in EVENT_FIELDS}

    # 1. Required strings
    event.update(check_required_fields(data))

    # 2. Slug
    if _changed("title", event, existing) or not event.get("slug"):
        try:
            event["slug"] = slugify(event["title"])
        except EmptySlugError as e:
            raise SlugGenerationError(str(e), field="slug") from e

    # 3. Date
    if _changed("date", event, existing):
        event["date"] = normalize_date(event["date"])

    # 4. Time
    if _changed("time", event, existing):
        event["time"] = normalize_time(event["time"])

    # 5. Collections
    event["agenda"] = _clean_string_list("agenda", data.get("agenda"))
    tags = _clean_string_list("tags", data.get("tags"), lowercase=True)
    event["tags"] = list(dict.fromkeys(tags))

    return event
