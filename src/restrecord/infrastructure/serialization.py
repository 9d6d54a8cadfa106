"""JSON wire encoding for record bodies."""

import json
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from restrecord.domain.entities.record import Record

JSON_CONTENT_TYPE = "application/json"


def _default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize(record: "Record") -> str:
    """Encode the full attribute mapping of ``record`` (not a diff)."""
    return json.dumps(record.to_representation(), default=_default)


def parse(text: str) -> Any:
    """Decode a JSON response body.

    Raises:
        ValueError: If ``text`` is not valid JSON.
    """
    return json.loads(text)


def is_json_content_type(content_type: str | None) -> bool:
    """True for ``application/json``, ignoring parameters such as charset."""
    if not content_type:
        return False
    return content_type.split(";")[0].strip().lower() == JSON_CONTENT_TYPE
