"""Exceptions for record validation, lifecycle and transport failures.

Persistence operations deliver these through their completion callback;
only UnknownAttributeError is raised directly, because it signals caller
misuse rather than an operational failure.
"""

from typing import Any, Optional


class RecordError(Exception):
    """Base class for all record errors."""
    pass


class ValidationFailedError(RecordError):
    """Delivered by save/update when at least one validator failed.

    The failing attributes are on ``record.errors``; a snapshot is kept on
    the exception as ``errors``.
    """

    def __init__(self, errors: Optional[list[Any]] = None) -> None:
        self.errors = list(errors or [])
        super().__init__("validation failed")


class NotPersistedError(RecordError):
    """Delivered by destroy when the record was never saved."""

    def __init__(self, message: str = "not saved") -> None:
        super().__init__(message)


class RecordDestroyedError(RecordError):
    """Delivered by save/update/destroy on a record that was already destroyed."""

    def __init__(self, message: str = "record destroyed") -> None:
        super().__init__(message)


class TransportError(RecordError):
    """A request did not complete with a 2xx response.

    ``status_code`` is None when no response was received at all
    (connection refused, timeout and so on).
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
        body: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.method = method
        self.url = url
        self.body = body
        super().__init__(message)


class UnknownAttributeError(RecordError, AttributeError):
    """Raised when assigning an attribute the schema does not declare."""

    def __init__(self, record_type: str, attribute: str) -> None:
        self.record_type = record_type
        self.attribute = attribute
        super().__init__(f"{record_type} has no attribute '{attribute}'")
