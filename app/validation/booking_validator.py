import re
import uuid
from typing import Any, Callable, Dict

from app.core.errors import DanglingReferenceError, InvalidEmailError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: Any) -> str:
    """Trim, check against a permissive local@domain.tld pattern and lowercase."""
    if not isinstance(email, str) or not email.strip():
        raise InvalidEmailError("Email is required", field="email")
    email = email.strip()
    if not EMAIL_RE.match(email):
        raise InvalidEmailError(f"Invalid email format: {email!r}", field="email")
    return email.lower()


def is_well_formed_id(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def validate_booking(
    data: Dict[str, Any], event_exists: Callable[[str], bool]
) -> Dict[str, Any]:
    """Validate a Booking before it is persisted.

    `event_exists` performs the lookup against the event store. The check and
    the later insert are separate store operations, so an event removed in
    between is not detected.
    """
    booking = dict(data)
    booking["email"] = normalize_email(data.get("email"))

    event_id = data.get("eventId")
    if not is_well_formed_id(event_id):
        raise DanglingReferenceError(f"Invalid eventId: {event_id!r}", field="eventId")
    if not event_exists(event_id):
        raise DanglingReferenceError(
            f"Referenced event {event_id} does not exist", field="eventId"
        )
    return booking
