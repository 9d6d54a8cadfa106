"""Domain services composed by every Record."""

from restrecord.domain.services.attribute_store import AttributeStore, DirtyTracker
from restrecord.domain.services.validation import ValidationEngine

__all__ = ["AttributeStore", "DirtyTracker", "ValidationEngine"]
