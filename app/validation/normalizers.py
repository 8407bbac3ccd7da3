"""
Pure normalizers for event fields: slugs, calendar dates and clock times.
"""

import re
import unicodedata
from datetime import datetime, timezone

from dateutil import parser as date_parser

from app.core.errors import EmptySlugError, InvalidDateError, InvalidTimeError

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_MULTI_HYPHEN = re.compile(r"-{2,}")

# 24-hour H:MM / HH:MM with an optional, ignored :SS
_TIME_24H = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::[0-5]\d)?$")
# 12-hour H or H:MM followed by am/pm; range checks happen after the match
_TIME_12H = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(am|pm)$", re.IGNORECASE)

_REFERENCE_DATE = datetime(1970, 1, 1)
_DATE_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def slugify(title: str) -> str:
    """Map a free-text title to a lowercase, hyphen-separated ASCII slug.

    Accented letters lose their diacritics ("Café" -> "cafe"), every run of
    other characters becomes a single hyphen and edge hyphens are stripped.
    Raises EmptySlugError when nothing alphanumeric is left.
    """
    if not isinstance(title, str):
        raise EmptySlugError("Cannot generate a slug from a non-string title", field="slug")

    decomposed = unicodedata.normalize("NFKD", title.strip().lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    ascii_only = stripped.encode("ascii", "ignore").decode("ascii")

    slug = _NON_ALNUM.sub("-", ascii_only)
    slug = _MULTI_HYPHEN.sub("-", slug).strip("-")
    if not slug:
        raise EmptySlugError(
            f"Title {title!r} does not produce a usable slug", field="slug"
        )
    return slug


def normalize_date(value: str) -> str:
    """Normalize a loosely formatted date to YYYY-MM-DD.

    Timezone-aware inputs are converted to UTC before the calendar date is
    taken; naive inputs keep their calendar date.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError("Date is required", field="date")

    try:
        parsed = date_parser.parse(value.strip(), default=_DATE_FILL_DEFAULTS[0])
        alternate = date_parser.parse(value.strip(), default=_DATE_FILL_DEFAULTS[1])
    except (ValueError, OverflowError) as e:
        raise InvalidDateError(f"Invalid date format: {value!r}", field="date") from e

    # Any part filled in from the default differs between the two parses
    if (parsed.year, parsed.month, parsed.day) != (
        alternate.year,
        alternate.month,
        alternate.day,
    ):
        raise InvalidDateError(
            f"Date must include a year, month and day: {value!r}", field="date"
        )

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return f"{parsed.year:04d}-{parsed.month:02d}-{parsed.day:02d}"


def normalize_time(value: str) -> str:
    """Normalize a 12h or 24h time string to zero-padded 24-hour HH:MM.

    A bare "9:00" is read as 24-hour 09:00, never as 9 AM.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidTimeError("Time is required", field="time")
    s = value.strip()

    match = _TIME_24H.match(s)
    if match:
        return f"{int(match.group(1)):02d}:{match.group(2)}"

    match = _TIME_12H.match(s)
    if match:
        hour = int(match.group(1))
        minutes = int(match.group(2) or 0)
        period = match.group(3).lower()
        if not 1 <= hour <= 12:
            raise InvalidTimeError(
                f"Hour {hour} is out of range for a 12-hour time: {value!r}", field="time"
            )
        if not 0 <= minutes <= 59:
            raise InvalidTimeError(
                f"Minutes {minutes} are out of range: {value!r}", field="time"
            )
        if period == "pm" and hour != 12:
            hour += 12
        if period == "am" and hour == 12:
            hour = 0
        return f"{hour:02d}:{minutes:02d}"

    try:
        parsed = date_parser.parse(s, default=_REFERENCE_DATE)
    except (ValueError, OverflowError) as e:
        raise InvalidTimeError(f"Invalid time format: {value!r}", field="time") from e

    # Inputs that carry their own calendar date are dates, not times
    if parsed.date() != _REFERENCE_DATE.date():
        raise InvalidTimeError(f"Invalid time format: {value!r}", field="time")
    return f"{parsed.hour:02d}:{parsed.minute:02d}"
