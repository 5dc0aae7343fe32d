"""Synchronous lifecycle event dispatch."""

import logging
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger("recordism")

MODEL_SAVING = "model-saving"
MODEL_CREATING = "model-creating"
MODEL_CREATED = "model-created"
MODEL_UPDATING = "model-updating"
MODEL_UPDATED = "model-updated"
MODEL_SAVED = "model-saved"
MODEL_DELETING = "model-deleting"
MODEL_DELETED = "model-deleted"

EVENT_NAMES: tuple[str, ...] = (
    MODEL_SAVING,
    MODEL_CREATING,
    MODEL_CREATED,
    MODEL_UPDATING,
    MODEL_UPDATED,
    MODEL_SAVED,
    MODEL_DELETING,
    MODEL_DELETED,
)

Listener = Callable[[Any], Any]


class EventEmitter:
    """Calls every listener registered for an event name, in registration order, before returning.

    Listener exceptions propagate to whoever fired the event.
    """

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def add_listener(self, event_name: str, listener: Listener) -> None:
        self._listeners[event_name].append(listener)

    def remove_listener(self, event_name: str, listener: Listener) -> None:
        try:
            self._listeners[event_name].remove(listener)
        except ValueError:
            pass

    def remove_all_listeners(self, event_name: str | None = None) -> None:
        if event_name is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event_name, None)

    def listeners(self, event_name: str) -> tuple[Listener, ...]:
        return tuple(self._listeners.get(event_name, ()))

    def fire(self, event_name: str, record: Any) -> None:
        logger.debug("Firing %s for %r", event_name, record)
        for listener in self.listeners(event_name):
            listener(record)


emitter = EventEmitter()
"""Process-wide emitter used by Model lifecycle operations."""
