"""Persistence orchestration: create, update and destroy over a Transport.

Every operation reconciles local state only after the transport confirms
success. Any failure (validation, lifecycle or transport) leaves the
record exactly as it was, so a retried call replays the same request.
Failures are delivered through the completion callback, never raised.
"""

from typing import TYPE_CHECKING, Any, Callable, Optional

from restrecord.core.events import RecordEvent
from restrecord.core.logging import get_logger
from restrecord.domain.exceptions import (
    NotPersistedError,
    RecordDestroyedError,
    RecordError,
    TransportError,
    ValidationFailedError,
)
from restrecord.infrastructure.serialization import (
    JSON_CONTENT_TYPE,
    is_json_content_type,
    parse,
    serialize,
)
from restrecord.infrastructure.transport import Transport, TransportResponse

if TYPE_CHECKING:
    from restrecord.domain.entities.record import Record

logger = get_logger(__name__)

Callback = Callable[[Optional[RecordError]], Any]

# How much of an error response body is kept on TransportError
ERROR_BODY_SNIPPET = 200


async def request(
    transport: Transport,
    method: str,
    url: str,
    body: Optional[str] = None,
) -> TransportResponse:
    """Send one request and insist on a 2xx response.

    A JSON body (by content type) is parsed onto ``response.body``.

    Raises:
        TransportError: On a transport failure, a non-2xx status, or a
            JSON response that cannot be parsed.
    """
    headers = {"Accept": JSON_CONTENT_TYPE}
    if body is not None:
        headers["Content-Type"] = JSON_CONTENT_TYPE

    try:
        response = await transport.send(method, url, body, headers)
    except TransportError:
        raise
    except Exception as e:
        # custom transports may raise anything; callers only ever see TransportError
        raise TransportError(f"{method} {url} failed: {e!r}", method=method, url=url) from e

    if not response.ok:
        raise TransportError(
            f"{method} {url} responded with status {response.status_code}",
            status_code=response.status_code,
            method=method,
            url=url,
            body=response.text[:ERROR_BODY_SNIPPET] if response.text else None,
        )

    if is_json_content_type(response.header("content-type")) and response.text:
        try:
            response.body = parse(response.text)
        except ValueError as e:
            raise TransportError(
                f"{method} {url} returned invalid JSON: {e}",
                status_code=response.status_code,
                method=method,
                url=url,
                body=response.text[:ERROR_BODY_SNIPPET],
            ) from e

    return response


class PersistenceOrchestrator:
    """Decides which request a record needs and reconciles the outcome.

    State machine over new / persisted (clean or dirty) / destroyed:

    - ``save`` on a new record POSTs to the collection URL; on a persisted
      record it delegates to ``update``.
    - ``update`` PUTs to the record URL.
    - ``destroy`` DELETEs the record URL; refused for new records.

    The orchestrator performs no locking: overlapping calls on one record
    are a caller error.
    """

    def __init__(self, record: "Record") -> None:
        self.record = record

    @property
    def transport(self) -> Transport:
        return self.record.transport

    def _log_fields(self, **extra: Any) -> dict[str, Any]:
        return {
            "record_type": self.record.schema.name,
            "primary_key": self.record.primary(),
            **extra,
        }

    @staticmethod
    def _finish(callback: Optional[Callback], error: Optional[RecordError]) -> Optional[RecordError]:
        if callback is not None:
            callback(error)
        return error

    def _emit(self, event: str) -> None:
        result = self.record.emit(event)
        if not result.success:
            logger.warning(
                "Record listeners failed",
                **self._log_fields(event=event, errors=result.errors),
            )

    def _refuse_invalid(self, callback: Optional[Callback]) -> Optional[RecordError]:
        logger.warning(
            "Record validation failed",
            **self._log_fields(errors=[e.to_dict() for e in self.record.errors]),
        )
        return self._finish(callback, ValidationFailedError(self.record.errors))

    async def save(self, callback: Optional[Callback] = None) -> Optional[RecordError]:
        """Create the record, or update it when it already has a primary key."""
        record = self.record
        if record.destroyed:
            return self._finish(callback, RecordDestroyedError())
        if not record.is_new():
            return await self.update(callback)

        url = record.schema.url()
        if not record.is_valid():
            return self._refuse_invalid(callback)

        logger.debug("Creating record", **self._log_fields(method="POST", url=url))
        try:
            response = await request(self.transport, "POST", url, serialize(record))
        except TransportError as e:
            logger.warning("Record create failed", **self._log_fields(url=url, error=str(e)))
            return self._finish(callback, e)

        if isinstance(response.body, dict) and response.body.get("id") is not None:
            # server-assigned key: stored without marking it dirty
            record._store.put(record.schema.primary_key, response.body["id"])
        record._tracker.clear()
        self._emit(RecordEvent.SAVE)

        logger.info("Record created", **self._log_fields(url=url))
        return self._finish(callback, None)

    async def update(self, callback: Optional[Callback] = None) -> Optional[RecordError]:
        """PUT the full attribute mapping to the record URL."""
        record = self.record
        if record.destroyed:
            return self._finish(callback, RecordDestroyedError())
        if record.is_new():
            return self._finish(callback, NotPersistedError())

        url = record.url()
        if not record.is_valid():
            return self._refuse_invalid(callback)

        logger.debug("Updating record", **self._log_fields(method="PUT", url=url))
        try:
            await request(self.transport, "PUT", url, serialize(record))
        except TransportError as e:
            logger.warning("Record update failed", **self._log_fields(url=url, error=str(e)))
            return self._finish(callback, e)

        record._tracker.clear()
        self._emit(RecordEvent.UPDATE)

        logger.info("Record updated", **self._log_fields(url=url))
        return self._finish(callback, None)

    async def destroy(self, callback: Optional[Callback] = None) -> Optional[RecordError]:
        """DELETE the record; on success emit ``destroy`` and then mark it destroyed."""
        record = self.record
        if record.destroyed:
            return self._finish(callback, RecordDestroyedError())
        if record.is_new():
            return self._finish(callback, NotPersistedError())

        url = record.url()
        logger.debug("Destroying record", **self._log_fields(method="DELETE", url=url))
        try:
            await request(self.transport, "DELETE", url)
        except TransportError as e:
            logger.warning("Record destroy failed", **self._log_fields(url=url, error=str(e)))
            return self._finish(callback, e)

        # listeners observe the record before it is marked destroyed
        self._emit(RecordEvent.DESTROY)
        record._mark_destroyed()

        logger.info("Record destroyed", **self._log_fields(url=url))
        return self._finish(callback, None)
