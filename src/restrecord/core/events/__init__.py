"""Record event system.

Example usage:
    from restrecord.core.events import EventRegistry, RecordEvent

    registry = EventRegistry()
    registry.subscribe(RecordEvent.SAVE, lambda record: print(record.primary()))
"""

from restrecord.core.events.event_registry import EmitResult, EventRegistry, Listener
from restrecord.core.events.record_events import RecordEvent, change_event, get_all_events

__all__ = [
    "EventRegistry",
    "EmitResult",
    "Listener",
    "RecordEvent",
    "change_event",
    "get_all_events",
]
