"""Domain entities."""

from restrecord.domain.entities.field_error import FieldError
from restrecord.domain.entities.schema import Schema, Validator

__all__ = ["FieldError", "Schema", "Validator"]
