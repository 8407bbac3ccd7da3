"""
Parsing of list-valued multipart form fields (agenda, tags).

Browsers submit these either as a JSON-encoded array ('["a", "b"]') or as a
comma-separated string ("a, b"). Both decode to the same list of strings.
"""

import json
from dataclasses import dataclass, field
from typing import Any, List, Union


@dataclass(frozen=True)
class JsonArrayField:
    items: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DelimitedField:
    items: List[str] = field(default_factory=list)


ListField = Union[JsonArrayField, DelimitedField]


def _as_string(item: Any) -> str:
    if item is None:
        return ""
    if isinstance(item, str):
        return item
    return json.dumps(item)


def decode_list_field(raw: Any, delimiter: str = ",") -> ListField:
    """Decode a raw form value, trying a JSON array first."""
    if raw is None:
        return DelimitedField([])
    if isinstance(raw, (list, tuple)):
        return JsonArrayField([_as_string(item) for item in raw])

    raw = str(raw)
    try:
        decoded = json.loads(raw)
    except ValueError:
        decoded = None
    if isinstance(decoded, list):
        return JsonArrayField([_as_string(item) for item in decoded])

    items = [part.strip() for part in raw.split(delimiter)]
    return DelimitedField([item for item in items if item])


def parse_list_field(raw: Any, delimiter: str = ",") -> List[str]:
    return list(decode_list_field(raw, delimiter).items)
