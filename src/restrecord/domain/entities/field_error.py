"""A single validation error registered against a record attribute."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """A single record validation error.

    Attributes:
        attribute: Name of the offending attribute.
        message: Human-readable reason.
    """

    attribute: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"attribute": self.attribute, "message": self.message}
