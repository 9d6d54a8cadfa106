"""Unit tests for the Record attribute surface.

Tests cover:
- Generated accessors and dirty tracking
- Bulk assignment and unknown attributes
- Primary key, new-state and URLs
- Per-record and class-wide events
- define_record()
"""

import pytest

from restrecord import Record, Schema, UnknownAttributeError, define_record
from restrecord.domain.entities.record import AttributeAccessor


class TestAccessors:
    """Tests for accessor generation and the attribute store."""

    def test_accessors_generated_for_declared_attributes(self, user_class) -> None:
        assert isinstance(user_class.__dict__["name"], AttributeAccessor)
        assert isinstance(user_class.__dict__["email"], AttributeAccessor)
        # primary key is always an accessor
        assert isinstance(user_class.__dict__["id"], AttributeAccessor)

    def test_initial_attributes_are_clean(self, user_class) -> None:
        user = user_class({"id": 5, "name": "a"})

        assert user.name == "a"
        assert user.get("id") == 5
        assert user.changed() is False

    def test_keyword_construction(self, user_class) -> None:
        user = user_class(name="a", email="a@example.com")

        assert user.to_representation() == {"name": "a", "email": "a@example.com"}

    def test_write_marks_attribute_dirty(self, user_class) -> None:
        user = user_class({"name": "a"})

        user.name = "b"

        assert user.name == "b"
        assert user.get("name") == "b"
        assert user.changed() == frozenset({"name"})

    def test_changed_is_a_snapshot_of_names(self, user_class) -> None:
        user = user_class()
        user.name = "a"
        snapshot = user.changed()

        user.email = "e@example.com"

        assert snapshot == frozenset({"name"})
        assert user.changed() == frozenset({"name", "email"})

    def test_unset_attribute_reads_none(self, user_class) -> None:
        user = user_class()

        assert user.email is None
        assert user.get("missing") is None

    def test_has_treats_none_as_absent(self, user_class) -> None:
        user = user_class({"name": None, "email": "", "id": 0})

        assert user.has("name") is False
        assert user.has("missing") is False
        assert user.has("email") is True
        assert user.has("id") is True

    def test_set_assigns_through_accessors(self, user_class) -> None:
        user = user_class()

        result = user.set({"name": "a", "email": "a@example.com"})

        assert result is user
        assert user.name == "a"
        assert user.changed() == frozenset({"name", "email"})

    def test_set_rejects_unknown_attribute(self, user_class) -> None:
        user = user_class()

        with pytest.raises(UnknownAttributeError) as exc_info:
            user.set({"nickname": "x"})

        assert exc_info.value.attribute == "nickname"
        assert user.changed() is False

    def test_constructor_rejects_unknown_attribute(self, user_class) -> None:
        """Undeclared keys are refused at construction, as set() refuses them."""
        with pytest.raises(UnknownAttributeError) as exc_info:
            user_class({"name": "a", "nickname": "x"})

        assert exc_info.value.attribute == "nickname"

        with pytest.raises(UnknownAttributeError):
            user_class(name="a", nickname="x")

    def test_unknown_attribute_assignment_raises(self, user_class) -> None:
        user = user_class()

        with pytest.raises(AttributeError):
            user.nickname = "x"

    def test_representation_is_live(self, user_class) -> None:
        user = user_class({"name": "a"})
        attrs = user.to_representation()

        user.name = "b"

        assert attrs["name"] == "b"

    def test_repr_names_type(self, user_class) -> None:
        assert repr(user_class({"name": "a"})) == "<User {'name': 'a'}>"


class TestPrimaryKey:
    """Tests for primary(), is_new() and url()."""

    def test_new_iff_primary_key_absent(self, user_class) -> None:
        for attrs, expected in (({}, True), ({"id": None}, True), ({"id": 5}, False), ({"id": 0}, False)):
            user = user_class(attrs)
            assert user.is_new() is expected
            assert user.is_new() == (user.primary() is None)

    def test_primary_setter_goes_through_accessor(self, user_class) -> None:
        user = user_class()

        result = user.primary(7)

        assert result is user
        assert user.primary() == 7
        assert user.id == 7
        assert user.is_new() is False
        assert user.changed() == frozenset({"id"})

    def test_custom_primary_key_name(self) -> None:
        Post = define_record("Post", "/posts", ("title",), primary_key="slug")
        post = Post({"slug": "hello", "title": "Hello"})

        assert post.primary() == "hello"
        assert post.url() == "/posts/hello"
        assert Post({"title": "x"}).is_new() is True

    def test_url(self, user_class) -> None:
        user = user_class({"id": 5})

        assert user.url() == "/users/5"
        assert user.url("edit") == "/users/5/edit"


class TestValidationSurface:
    """Tests for error() / validate() / is_valid() on the record."""

    def test_error_appends_and_returns_self(self, user_class) -> None:
        user = user_class()

        assert user.error("name", "bad") is user
        assert [(e.attribute, e.message) for e in user.errors] == [("name", "bad")]

    def test_is_valid_recomputes_errors(self, user_class) -> None:
        user = user_class()

        assert user.is_valid() is False
        first = user.errors
        assert user.is_valid() is False
        assert user.errors is not first
        assert user.errors == first

        user.name = "a"
        assert user.is_valid() is True
        assert user.errors == []

    def test_validate_does_not_touch_dirty(self, user_class) -> None:
        user = user_class()
        user.email = "x@example.com"

        user.validate()

        assert user.changed() == frozenset({"email"})


class TestEvents:
    """Tests for record and class-wide listeners."""

    def test_change_events(self, user_class) -> None:
        user = user_class({"name": "a"})
        changes: list[tuple] = []
        names: list[tuple] = []
        user.on("change", lambda record, attr, value, previous: changes.append((attr, value, previous)))
        user.on("change name", lambda record, value, previous: names.append((value, previous)))

        user.name = "b"
        user.email = "e@example.com"

        assert changes == [("name", "b", "a"), ("email", "e@example.com", None)]
        assert names == [("b", "a")]

    def test_listeners_run_in_subscription_order(self, user_class) -> None:
        user = user_class()
        order: list[int] = []
        for i in range(3):
            user.on("custom", lambda record, i=i: order.append(i))

        result = user.emit("custom")

        assert order == [0, 1, 2]
        assert result.delivered == 3

    def test_off_removes_listener(self, user_class) -> None:
        user = user_class()
        calls: list[str] = []
        listener_id = user.on("custom", lambda record: calls.append("x"))

        assert user.off(listener_id) is True
        user.emit("custom")

        assert calls == []

    def test_emit_passes_arguments(self, user_class) -> None:
        user = user_class()
        received: list[tuple] = []
        user.on("custom", lambda record, *args: received.append((record, args)))

        user.emit("custom", 1, "two")

        assert received == [(user, (1, "two"))]

    def test_class_listeners_fire_for_every_instance(self, user_class) -> None:
        seen: list[str] = []
        user_class.listen("custom", lambda record: seen.append(record.name))

        user_class({"name": "a"}).emit("custom")
        user_class({"name": "b"}).emit("custom")

        assert seen == ["a", "b"]

    def test_instance_listeners_run_before_class_listeners(self, user_class) -> None:
        order: list[str] = []
        user_class.listen("custom", lambda record: order.append("class"))
        user = user_class()
        user.on("custom", lambda record: order.append("instance"))

        user.emit("custom")

        assert order == ["instance", "class"]

    def test_parent_class_listeners_fire(self, user_class) -> None:
        seen: list[str] = []

        class Admin(user_class):
            pass

        user_class.listen("custom", lambda record: seen.append(type(record).__name__))
        Admin({"name": "root"}).emit("custom")

        assert seen == ["Admin"]

    def test_unlisten(self, user_class) -> None:
        seen: list[str] = []
        listener_id = user_class.listen("custom", lambda record: seen.append("x"))

        assert user_class.unlisten(listener_id) is True
        user_class().emit("custom")

        assert seen == []

    def test_listener_error_is_collected(self, user_class) -> None:
        user = user_class()
        calls: list[str] = []

        def broken(record):
            raise ValueError("nope")

        user.on("custom", broken)
        user.on("custom", lambda record: calls.append("after"))

        result = user.emit("custom")

        assert calls == ["after"]
        assert result.success is False
        assert len(result.errors) == 1


class TestDefinition:
    """Tests for record class definition."""

    def test_record_without_schema_cannot_be_built(self) -> None:
        class Abstract(Record):
            pass

        with pytest.raises(TypeError):
            Abstract()

    def test_attribute_clashing_with_member_is_rejected(self) -> None:
        with pytest.raises(TypeError, match="clashes"):

            class Bad(Record):
                __schema__ = Schema(name="Bad", base_path="/bad", attributes=("save",))

    def test_schema_must_be_a_schema(self) -> None:
        with pytest.raises(TypeError):

            class Bad(Record):
                __schema__ = {"name": "Bad"}

    def test_define_record(self, transport) -> None:
        Post = define_record("Post", "/posts", ("title", "body"), transport=transport)
        post = Post(title="Hello")

        assert Post.__name__ == "Post"
        assert Post.__schema__.attributes == ("id", "title", "body")
        assert post.title == "Hello"
        assert post.transport is transport

    def test_instance_transport_overrides_class(self, user_class, transport) -> None:
        other = object()
        user = user_class(transport=other)

        assert user.transport is other
        assert user_class().transport is transport
