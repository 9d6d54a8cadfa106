"""Record lifecycle event names.

Adding new events is allowed; renaming the existing ones breaks every
listener subscribed to them.
"""


class RecordEvent:
    """Event names emitted by a Record.

    - SAVE fires after a successful create
    - UPDATE fires after a successful update (save on a persisted record
      delegates to update, so only UPDATE fires there)
    - DESTROY fires after a confirmed deletion, before ``destroyed`` is set
    - CHANGE fires on every attribute write through an accessor
    """

    SAVE = "save"
    UPDATE = "update"
    DESTROY = "destroy"
    CHANGE = "change"


def change_event(attribute: str) -> str:
    """Name of the per-attribute change event, e.g. ``"change name"``."""
    return f"{RecordEvent.CHANGE} {attribute}"


def get_all_events() -> list[str]:
    """Get all lifecycle event names (per-attribute change events excluded)."""
    return [
        value
        for name, value in vars(RecordEvent).items()
        if not name.startswith("_") and isinstance(value, str)
    ]
