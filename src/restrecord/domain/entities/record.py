"""Record base class.

A Record is an attribute bag synchronized with one REST resource. It
composes the components that share its state:

- AttributeStore: the ``attrs`` backing map
- DirtyTracker: attributes written locally since the last confirmed save
- ValidationEngine: the schema's validators and the latest ``errors``
- EventRegistry: per-record listeners
- PersistenceOrchestrator: save / update / destroy over a Transport

Concrete record types declare a Schema; one accessor per declared
attribute is generated when the class is defined.

Example:
    class User(Record):
        __schema__ = Schema(
            name="User",
            base_path="/users",
            attributes=("name", "email"),
            validators=(required("name"), email("email")),
        )

    user = User(name="a")
    user.is_new()        # True
    await user.save()    # POST /users
    user.primary()       # id assigned by the server
"""

from typing import Any, Callable, ClassVar, Iterable, Literal, Mapping, Optional

from restrecord.core.events import EmitResult, EventRegistry, RecordEvent, change_event
from restrecord.domain.entities.field_error import FieldError
from restrecord.domain.entities.schema import Schema, Validator
from restrecord.domain.exceptions import RecordError, TransportError, UnknownAttributeError
from restrecord.domain.services.attribute_store import AttributeStore, DirtyTracker
from restrecord.domain.services.persistence import (
    Callback,
    PersistenceOrchestrator,
    request,
)
from restrecord.domain.services.validation import ValidationEngine
from restrecord.infrastructure.transport import Transport, get_default_transport

_MISSING = object()


class AttributeAccessor:
    """Data descriptor generated for each declared attribute.

    Reads go to the attribute store; writes go through the record so the
    attribute is marked dirty and change events fire.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def __get__(self, record: Optional["Record"], owner: type) -> Any:
        if record is None:
            return self
        return record.get(self.name)

    def __set__(self, record: "Record", value: Any) -> None:
        record._write(self.name, value)

    def __repr__(self) -> str:
        return f"AttributeAccessor({self.name!r})"


class Record:
    """Base class for persistent, validatable, observable records."""

    __schema__: ClassVar[Optional[Schema]] = None
    _transport: ClassVar[Optional[Transport]] = None
    _class_events: ClassVar[EventRegistry] = EventRegistry()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._class_events = EventRegistry()

        schema = cls.__dict__.get("__schema__")
        if schema is None:
            return
        if not isinstance(schema, Schema):
            raise TypeError(f"{cls.__name__}.__schema__ must be a Schema")

        for name in schema.attributes:
            if hasattr(Record, name):
                raise TypeError(
                    f"Attribute '{name}' of {cls.__name__} clashes with a Record member"
                )
            if name not in cls.__dict__:
                setattr(cls, name, AttributeAccessor(name))

    def __init__(
        self,
        attrs: Optional[Mapping[str, Any]] = None,
        *,
        transport: Optional[Transport] = None,
        **kwargs: Any,
    ) -> None:
        if self.__schema__ is None:
            raise TypeError(f"{type(self).__name__} does not declare a __schema__")

        initial = {**(attrs or {}), **kwargs}
        for key in initial:
            if key not in self.__schema__.attributes:
                raise UnknownAttributeError(type(self).__name__, key)

        # Initial attributes are the clean starting state: nothing is dirty.
        self._store = AttributeStore(initial)
        self._tracker = DirtyTracker()
        self._validation = ValidationEngine(self.__schema__.validators)
        self._events = EventRegistry()
        self._persistence = PersistenceOrchestrator(self)
        self._own_transport = transport
        self._destroyed = False

    def __setattr__(self, name: str, value: Any) -> None:
        if not name.startswith("_") and not hasattr(type(self), name):
            raise UnknownAttributeError(type(self).__name__, name)
        super().__setattr__(name, value)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._store.representation()!r}>"

    # ------------------------------------------------------------------ #
    # configuration
    # ------------------------------------------------------------------ #

    @property
    def schema(self) -> Schema:
        return self.__schema__  # type: ignore[return-value]

    @property
    def transport(self) -> Transport:
        """Transport for this record: its own, its class's, or the shared default."""
        return self._own_transport or type(self)._resolve_transport()

    @classmethod
    def _resolve_transport(cls) -> Transport:
        return cls._transport or get_default_transport()

    @classmethod
    def use(cls, transport: Transport) -> type["Record"]:
        """Bind ``transport`` to this record class (and its subclasses)."""
        cls._transport = transport
        return cls

    # ------------------------------------------------------------------ #
    # attributes
    # ------------------------------------------------------------------ #

    def get(self, attribute: str) -> Any:
        """Get ``attribute``, or None when it is unset."""
        return self._store.get(attribute)

    def has(self, attribute: str) -> bool:
        """Check if ``attribute`` is present (neither unset nor None)."""
        return self._store.has(attribute)

    def set(self, attrs: Mapping[str, Any]) -> "Record":
        """Assign several attributes, each through its accessor.

        Raises:
            UnknownAttributeError: If a key is not a declared attribute.
        """
        for key, value in attrs.items():
            if key not in self.schema.attributes:
                raise UnknownAttributeError(type(self).__name__, key)
            setattr(self, key, value)
        return self

    def to_representation(self) -> dict[str, Any]:
        """The live attribute mapping (not a copy)."""
        return self._store.representation()

    def _write(self, attribute: str, value: Any) -> None:
        previous = self._store.put(attribute, value)
        self._tracker.mark(attribute)
        self.emit(RecordEvent.CHANGE, attribute, value, previous)
        self.emit(change_event(attribute), value, previous)

    def changed(self) -> frozenset[str] | Literal[False]:
        """False when nothing is dirty, else the names of the dirty attributes."""
        return self._tracker.changed()

    # ------------------------------------------------------------------ #
    # primary key
    # ------------------------------------------------------------------ #

    def primary(self, value: Any = _MISSING) -> Any:
        """Get the primary key, or set it when ``value`` is given."""
        key = self.schema.primary_key
        if value is _MISSING:
            return self.get(key)
        setattr(self, key, value)
        return self

    def is_new(self) -> bool:
        """A record is new until it has a primary key."""
        return not self.has(self.schema.primary_key)

    def url(self, path: Optional[str] = None) -> str:
        """Resource URL of this record, e.g. ``/users/5`` or ``/users/5/edit``.

        Only meaningful once the record has a primary key.
        """
        if path is None:
            return self.schema.url(str(self.primary()))
        return self.schema.url(f"{self.primary()}/{path}")

    # ------------------------------------------------------------------ #
    # validation
    # ------------------------------------------------------------------ #

    @property
    def errors(self) -> list[FieldError]:
        """Errors found by the most recent validation run."""
        return self._validation.errors

    def error(self, attribute: str, message: str) -> "Record":
        """Register an error on ``attribute``. Called by validators."""
        self._validation.add_error(attribute, message)
        return self

    def validate(self) -> list[FieldError]:
        """Run every validator, replacing ``errors``."""
        return self._validation.run(self)

    def is_valid(self) -> bool:
        """Re-validate and report whether no validator failed."""
        return self._validation.is_valid(self)

    # ------------------------------------------------------------------ #
    # events
    # ------------------------------------------------------------------ #

    def on(
        self,
        event: str,
        listener: Callable[..., Any],
        priority: int = 0,
        once: bool = False,
    ) -> str:
        """Subscribe ``listener(record, *args)`` to ``event`` on this record."""
        return self._events.subscribe(event, listener, priority=priority, once=once)

    def off(self, listener_id: str) -> bool:
        return self._events.unsubscribe(listener_id)

    @classmethod
    def listen(cls, event: str, listener: Callable[..., Any], priority: int = 0) -> str:
        """Subscribe ``listener(record, *args)`` to ``event`` on every instance."""
        return cls._class_events.subscribe(event, listener, priority=priority)

    @classmethod
    def unlisten(cls, listener_id: str) -> bool:
        return cls._class_events.unsubscribe(listener_id)

    def emit(self, event: str, *args: Any) -> EmitResult:
        """Deliver ``event`` to this record's listeners, then class-wide ones.

        Class-wide listeners of parent record classes also receive it.
        """
        result = self._events.emit(event, self, *args)
        for klass in type(self).__mro__:
            registry = klass.__dict__.get("_class_events")
            if registry is None:
                continue
            class_result = registry.emit(event, self, *args)
            result.delivered += class_result.delivered
            result.errors.extend(class_result.errors)
        return result

    # ------------------------------------------------------------------ #
    # persistence
    # ------------------------------------------------------------------ #

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def _mark_destroyed(self) -> None:
        self._destroyed = True

    async def save(self, callback: Optional[Callback] = None) -> Optional[RecordError]:
        """Create the record (POST), or update it (PUT) if it has a primary key.

        ``callback(error)`` is invoked exactly once; the same error, or None
        on success, is returned.
        """
        return await self._persistence.save(callback)

    async def update(self, callback: Optional[Callback] = None) -> Optional[RecordError]:
        """Update the record (PUT)."""
        return await self._persistence.update(callback)

    async def destroy(self, callback: Optional[Callback] = None) -> Optional[RecordError]:
        """Delete the record (DELETE) and mark it destroyed."""
        return await self._persistence.destroy(callback)

    # ------------------------------------------------------------------ #
    # fetching
    # ------------------------------------------------------------------ #

    @classmethod
    def _from_server(cls, data: Mapping[str, Any]) -> "Record":
        # fields the schema does not declare are dropped
        attributes = cls._require_schema().attributes
        return cls({key: value for key, value in data.items() if key in attributes})

    @classmethod
    async def find(
        cls,
        pk: Any,
        callback: Optional[Callable[[Optional[RecordError], Optional["Record"]], Any]] = None,
    ) -> Optional["Record"]:
        """Fetch one record by primary key (GET ``base_path/pk``).

        ``callback(error, record)`` is invoked exactly once; the record,
        or None on failure, is returned.
        """
        schema = cls._require_schema()
        url = schema.url(str(pk))
        error: Optional[RecordError] = None
        record: Optional[Record] = None
        try:
            response = await request(cls._resolve_transport(), "GET", url)
            if not isinstance(response.body, dict):
                raise TransportError(
                    f"GET {url} did not return a JSON object",
                    status_code=response.status_code,
                    method="GET",
                    url=url,
                )
            record = cls._from_server(response.body)
            if record.is_new():
                record._store.put(schema.primary_key, pk)
        except TransportError as e:
            error = e

        if callback is not None:
            callback(error, record)
        return record

    @classmethod
    async def all(
        cls,
        callback: Optional[Callable[[Optional[RecordError], Optional[list["Record"]]], Any]] = None,
    ) -> Optional[list["Record"]]:
        """Fetch the collection (GET ``base_path``).

        Accepts a JSON array of objects, or an object whose ``items`` key
        holds one. ``callback(error, records)`` is invoked exactly once.
        """
        schema = cls._require_schema()
        url = schema.url()
        error: Optional[RecordError] = None
        records: Optional[list[Record]] = None
        try:
            response = await request(cls._resolve_transport(), "GET", url)
            items = response.body
            if isinstance(items, dict):
                items = items.get("items")
            if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
                raise TransportError(
                    f"GET {url} did not return a list of JSON objects",
                    status_code=response.status_code,
                    method="GET",
                    url=url,
                )
            records = [cls._from_server(item) for item in items]
        except TransportError as e:
            error = e

        if callback is not None:
            callback(error, records)
        return records

    @classmethod
    def _require_schema(cls) -> Schema:
        if cls.__schema__ is None:
            raise TypeError(f"{cls.__name__} does not declare a __schema__")
        return cls.__schema__


def define_record(
    name: str,
    base_path: str,
    attributes: Iterable[str],
    primary_key: str = "id",
    validators: Iterable[Validator] = (),
    transport: Optional[Transport] = None,
) -> type[Record]:
    """Build a Record subclass without a class statement.

    Example:
        Post = define_record("Post", "/posts", ("title", "body"))
    """
    schema = Schema(
        name=name,
        base_path=base_path,
        primary_key=primary_key,
        attributes=tuple(attributes),
        validators=tuple(validators),
    )
    record_cls: type[Record] = type(name, (Record,), {"__schema__": schema})
    if transport is not None:
        record_cls.use(transport)
    return record_cls
