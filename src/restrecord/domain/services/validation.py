"""Validation engine and built-in validator factories.

A validator is any callable taking the record; it reports problems by
calling ``record.error(attribute, message)``. Validators run in
registration order and a failing validator never stops the rest.
"""

import json
import re
from typing import TYPE_CHECKING, Any, Iterable, Optional

from restrecord.domain.entities.field_error import FieldError
from restrecord.domain.entities.schema import Validator

if TYPE_CHECKING:
    from restrecord.domain.entities.record import Record


# Email validation pattern (simplified but effective)
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

# URL validation pattern (simplified)
URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)


class ValidationEngine:
    """Runs a fixed sequence of validators against a record.

    ``errors`` is rebuilt from scratch on every run; it is never merged
    with the results of a previous run.
    """

    def __init__(self, validators: Iterable[Validator] = ()) -> None:
        self._validators: tuple[Validator, ...] = tuple(validators)
        self.errors: list[FieldError] = []

    @property
    def validators(self) -> tuple[Validator, ...]:
        return self._validators

    def add_error(self, attribute: str, message: str) -> None:
        self.errors.append(FieldError(attribute=attribute, message=message))

    def run(self, record: "Record") -> list[FieldError]:
        """Reset ``errors`` and invoke every validator with ``record``."""
        self.errors = []
        for validator in self._validators:
            validator(record)
        return self.errors

    def is_valid(self, record: "Record") -> bool:
        return not self.run(record)


# ---------------------------------------------------------------------------
# Built-in validators
# ---------------------------------------------------------------------------


def required(attribute: str, message: Optional[str] = None) -> Validator:
    """Fail when the attribute is unset, None, or a blank string."""

    def validate_required(record: "Record") -> None:
        value = record.get(attribute)
        if value is None or (isinstance(value, str) and not value.strip()):
            record.error(attribute, message or f"{attribute} is required")

    return validate_required


def length(
    attribute: str,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
) -> Validator:
    """Bound the length of a string or collection attribute.

    Unset values pass; combine with ``required`` to forbid them.
    """

    def validate_length(record: "Record") -> None:
        value = record.get(attribute)
        if value is None:
            return
        try:
            size = len(value)
        except TypeError:
            record.error(attribute, f"Expected a value with a length, got {type(value).__name__}")
            return
        if min_length is not None and size < min_length:
            record.error(attribute, f"{attribute} must be at least {min_length} long")
        if max_length is not None and size > max_length:
            record.error(attribute, f"{attribute} must be at most {max_length} long")

    return validate_length


def pattern(attribute: str, regex: str | re.Pattern[str], message: Optional[str] = None) -> Validator:
    """Require a string attribute to match ``regex``. Unset values pass."""
    compiled = re.compile(regex) if isinstance(regex, str) else regex

    def validate_pattern(record: "Record") -> None:
        value = record.get(attribute)
        if value is None:
            return
        if not isinstance(value, str) or not compiled.match(value):
            record.error(attribute, message or f"{attribute} has an invalid format")

    return validate_pattern


def email(attribute: str) -> Validator:
    """Require a well-formed email address. Unset values pass."""
    return pattern(attribute, EMAIL_PATTERN, "Invalid email format")


def url(attribute: str) -> Validator:
    """Require an http(s) URL. Unset values pass."""
    return pattern(
        attribute,
        URL_PATTERN,
        "Invalid URL format. Must start with http:// or https://",
    )


_TYPE_CHECKS = {
    "text": lambda v: isinstance(v, str),
    "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "integer": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "boolean": lambda v: isinstance(v, bool),
    "list": lambda v: isinstance(v, list),
    "object": lambda v: isinstance(v, dict),
}


def of_type(attribute: str, kind: str) -> Validator:
    """Check the JSON type of an attribute.

    ``kind`` is one of text, number, integer, boolean, list, object or
    json (anything JSON-serializable). Unset values pass.
    """
    if kind != "json" and kind not in _TYPE_CHECKS:
        raise ValueError(f"Unknown type '{kind}'")

    def validate_type(record: "Record") -> None:
        value = record.get(attribute)
        if value is None:
            return
        if kind == "json":
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                record.error(attribute, "Value must be JSON-serializable")
            return
        if not _TYPE_CHECKS[kind](value):
            record.error(attribute, f"Expected {kind} value, got {type(value).__name__}")

    return validate_type
