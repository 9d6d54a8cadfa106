"""restrecord - persistent, validatable, observable records over REST.

Importing this module does not open any connection; the shared
HttpxTransport is created on first use from ``restrecord.core.config``.
"""

from restrecord.core.events import RecordEvent
from restrecord.domain.entities.field_error import FieldError
from restrecord.domain.entities.record import Record, define_record
from restrecord.domain.entities.schema import Schema
from restrecord.domain.exceptions import (
    NotPersistedError,
    RecordDestroyedError,
    RecordError,
    TransportError,
    UnknownAttributeError,
    ValidationFailedError,
)
from restrecord.domain.services.validation import (
    email,
    length,
    of_type,
    pattern,
    required,
    url,
)
from restrecord.infrastructure.transport import (
    HttpxTransport,
    Transport,
    TransportResponse,
    set_default_transport,
)

__version__ = "0.1.0"

__all__ = [
    "Record",
    "Schema",
    "define_record",
    "FieldError",
    "RecordEvent",
    # Errors
    "RecordError",
    "ValidationFailedError",
    "NotPersistedError",
    "RecordDestroyedError",
    "TransportError",
    "UnknownAttributeError",
    # Validators
    "required",
    "length",
    "pattern",
    "email",
    "url",
    "of_type",
    # Transports
    "Transport",
    "TransportResponse",
    "HttpxTransport",
    "set_default_transport",
]
