"""Schema entity shared by every record of one resource family.

A Schema names the primary-key attribute, the declared attributes, the
validators to run before persisting, and the collection path the
resource lives under.
"""

from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Validator = Callable[[Any], None]


class Schema(BaseModel):
    """Immutable definition of a record family.

    Attributes:
        name: Record type name, used in logs and error messages.
        base_path: Collection path, e.g. "/users". Record URLs are
            ``base_path + "/" + primary key``.
        primary_key: Name of the primary-key attribute.
        attributes: Declared attribute names, in declaration order. The
            primary key is always included.
        validators: Validator functions, run in this order.

    Example:
        schema = Schema(
            name="User",
            base_path="/users",
            attributes=("name", "email"),
            validators=(required("name"),),
        )
        schema.url()         # "/users"
        schema.url("active") # "/users/active"
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1)
    base_path: str
    primary_key: str = Field(default="id", min_length=1)
    attributes: tuple[str, ...] = ()
    validators: tuple[Validator, ...] = ()

    @field_validator("base_path")
    @classmethod
    def normalize_base_path(cls, v: str) -> str:
        """Strip the trailing slash so URL joins never double it."""
        v = v.strip()
        if not v:
            raise ValueError("base_path cannot be empty")
        return v.rstrip("/") or "/"

    @field_validator("attributes")
    @classmethod
    def unique_attributes(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        seen: list[str] = []
        for name in v:
            if not name.isidentifier():
                raise ValueError(f"Attribute name '{name}' is not a valid identifier")
            if name in seen:
                raise ValueError(f"Attribute '{name}' declared twice")
            seen.append(name)
        return v

    @model_validator(mode="after")
    def include_primary_key(self) -> "Schema":
        if self.primary_key not in self.attributes:
            # frozen model: bypass __setattr__ once, during construction
            object.__setattr__(self, "attributes", (self.primary_key, *self.attributes))
        return self

    def url(self, path: Optional[str] = None) -> str:
        """Collection URL, optionally with ``path`` appended."""
        base = self.base_path.rstrip("/")
        if path is None:
            return base or "/"
        return f"{base}/{path}"
