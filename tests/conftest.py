"""Pytest configuration for all tests."""

import json
from typing import Any, Optional
from unittest.mock import AsyncMock

import pytest

from restrecord import Record, Schema, Transport, TransportResponse, required
from restrecord.core.config import get_settings
from restrecord.infrastructure.transport import set_default_transport


def json_response(status_code: int, body: Any = None) -> TransportResponse:
    """Build a TransportResponse carrying ``body`` as JSON."""
    if body is None:
        return TransportResponse(status_code=status_code)
    return TransportResponse(
        status_code=status_code,
        headers={"Content-Type": "application/json; charset=utf-8"},
        text=json.dumps(body),
    )


def text_response(status_code: int, text: str = "", content_type: Optional[str] = "text/plain") -> TransportResponse:
    headers = {"Content-Type": content_type} if content_type else {}
    return TransportResponse(status_code=status_code, headers=headers, text=text)


@pytest.fixture(autouse=True)
def _reset_globals():
    """Keep cached settings and the shared transport from leaking between tests."""
    get_settings.cache_clear()
    set_default_transport(None)
    yield
    get_settings.cache_clear()
    set_default_transport(None)


@pytest.fixture
def transport() -> AsyncMock:
    """A Transport whose send() is an AsyncMock returning 200 with no body."""
    fake = AsyncMock(spec=Transport)
    fake.send.return_value = json_response(200)
    return fake


def name_present(record: Record) -> None:
    name = record.get("name")
    if not name:
        record.error("name", "name is required")


@pytest.fixture
def user_class(transport: AsyncMock) -> type[Record]:
    """A fresh User record class bound to the fake transport."""

    class User(Record):
        __schema__ = Schema(
            name="User",
            base_path="/users",
            attributes=("name", "email"),
            validators=(name_present,),
        )

    User.use(transport)
    return User


@pytest.fixture
def strict_user_class(transport: AsyncMock) -> type[Record]:
    """A User class with two validators that fail on an empty record."""

    class StrictUser(Record):
        __schema__ = Schema(
            name="StrictUser",
            base_path="/users",
            attributes=("name", "email"),
            validators=(required("name"), required("email")),
        )

    StrictUser.use(transport)
    return StrictUser
