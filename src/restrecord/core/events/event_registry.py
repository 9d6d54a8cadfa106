"""Event registry - listener subscription and synchronous delivery.

Every Record owns one EventRegistry, and every Record class owns another
for class-wide listeners. Delivery is synchronous: by the time ``emit``
returns, every listener has run.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from restrecord.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Listener:
    """Internal representation of a subscribed listener.

    Attributes:
        id: Unique identifier for this subscription.
        event: The event this listener is subscribed to.
        callback: The function to call.
        priority: Execution priority (higher = earlier).
        once: Remove the listener after its first delivery.
        subscription_order: Order in which this listener was subscribed.
    """

    id: str
    event: str
    callback: Callable[..., Any]
    priority: int = 0
    once: bool = False
    subscription_order: int = 0


@dataclass
class EmitResult:
    """Result of an emit.

    Attributes:
        event: The event that was emitted.
        delivered: Number of listeners that were called.
        errors: Error messages from listeners that raised.
    """

    event: str
    delivered: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


class EventRegistry:
    """Listener registry with ordered, synchronous delivery.

    Listeners run in priority order (higher first), and in subscription
    order within the same priority. A listener that raises is logged and
    recorded in the EmitResult; the remaining listeners still run.

    Example:
        registry = EventRegistry()
        listener_id = registry.subscribe("save", lambda record: print(record))
        registry.emit("save", record)
        registry.unsubscribe(listener_id)
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self._listener_map: dict[str, Listener] = {}
        self._subscription_counter: int = 0

    def subscribe(
        self,
        event: str,
        callback: Callable[..., Any],
        priority: int = 0,
        once: bool = False,
    ) -> str:
        """Subscribe a listener to an event.

        Args:
            event: Event name (e.g., "save").
            callback: Function called with the emit arguments.
            priority: Execution priority. Higher priority listeners run first.
            once: If True, the listener is removed after its first delivery.

        Returns:
            Unique listener id for later removal.
        """
        if not callable(callback):
            raise TypeError(f"Listener for '{event}' must be callable")

        listener_id = f"lsn_{uuid.uuid4().hex[:12]}"
        self._subscription_counter += 1

        listener = Listener(
            id=listener_id,
            event=event,
            callback=callback,
            priority=priority,
            once=once,
            subscription_order=self._subscription_counter,
        )
        self._listeners.setdefault(event, []).append(listener)
        self._listener_map[listener_id] = listener

        logger.debug(
            "Listener subscribed",
            listener_id=listener_id,
            record_event=event,
            priority=priority,
        )
        return listener_id

    def unsubscribe(self, listener_id: str) -> bool:
        """Remove a listener.

        Returns:
            True if the listener was removed, False if it was not found.
        """
        listener = self._listener_map.pop(listener_id, None)
        if listener is None:
            return False

        remaining = [
            lsn for lsn in self._listeners.get(listener.event, []) if lsn.id != listener_id
        ]
        if remaining:
            self._listeners[listener.event] = remaining
        else:
            self._listeners.pop(listener.event, None)

        logger.debug(
            "Listener unsubscribed", listener_id=listener_id, record_event=listener.event
        )
        return True

    def emit(self, event: str, *args: Any) -> EmitResult:
        """Deliver an event to every listener subscribed to it.

        Args:
            event: Event name.
            *args: Positional arguments passed to each listener.

        Returns:
            EmitResult with the delivery count and any listener errors.
        """
        result = EmitResult(event=event)

        listeners = sorted(
            self._listeners.get(event, []),
            key=lambda lsn: (-lsn.priority, lsn.subscription_order),
        )
        for listener in listeners:
            if listener.once:
                self.unsubscribe(listener.id)
            try:
                listener.callback(*args)
            except Exception as e:
                logger.error(
                    "Listener failed",
                    listener_id=listener.id,
                    record_event=event,
                    error=str(e),
                )
                result.errors.append(f"Listener {listener.id} failed: {e}")
            result.delivered += 1

        return result

    def listeners(self, event: Optional[str] = None) -> list[Listener]:
        """Get subscribed listeners, for one event or all of them."""
        if event is not None:
            return self._listeners.get(event, []).copy()
        return [lsn for lsns in self._listeners.values() for lsn in lsns]

    def clear(self) -> int:
        """Remove every listener.

        Returns:
            Number of listeners removed.
        """
        count = len(self._listener_map)
        self._listeners.clear()
        self._listener_map.clear()
        return count
