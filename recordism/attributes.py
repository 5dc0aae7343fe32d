"""Attribute storage with one-directional dirty tracking."""

from typing import Any, Optional


class AttributeStore:
    """Holds a record's field values and the ordered list of fields changed since the last persist.

    Tracking is one-directional: once a key is dirty it stays dirty until
    ``clear_changed_attributes()``, even if the value is set back to what it was.
    Computed accessors are looked up on ``owner`` as ``get_<key>_attribute`` methods
    taking the raw attribute map.
    """

    def __init__(self, attributes: Optional[dict[str, Any]] = None, owner: Any = None):
        self._attributes: dict[str, Any] = {}
        self._changed: list[str] = []
        self._owner = owner
        if attributes:
            self.fill_attributes(attributes)

    def _get_accessor(self, key: str):
        if self._owner is None or not isinstance(key, str):
            return None
        accessor = getattr(self._owner, f"get_{key}_attribute", None)
        return accessor if callable(accessor) else None

    def set_attribute(self, key: str, value: Any) -> None:
        """Store value under key, marking key dirty if the value changed."""
        if (key not in self._attributes or self._attributes[key] != value) and key not in self._changed:
            self._changed.append(key)
        self._attributes[key] = value

    def fill_attributes(self, attributes: dict[str, Any]) -> None:
        """Apply set_attribute() for every entry."""
        for key, value in attributes.items():
            self.set_attribute(key, value)

    def get_attribute(self, key: str) -> Any:
        """Return the computed accessor's result if one exists, else the raw stored value."""
        accessor = self._get_accessor(key)
        if accessor is not None:
            return accessor(self._attributes)
        return self._attributes.get(key)

    def get_attributes(self) -> dict[str, Any]:
        return self._attributes

    def has_attribute(self, key: str) -> bool:
        return key in self._attributes or self._get_accessor(key) is not None

    def get_dirty_attributes(self) -> dict[str, Any]:
        """Return dirty keys with their current values, in the order they became dirty."""
        return {key: self._attributes.get(key) for key in self._changed}

    @property
    def changed_attributes(self) -> tuple[str, ...]:
        return tuple(self._changed)

    def is_dirty(self) -> bool:
        return len(self._changed) > 0

    def clear_changed_attributes(self) -> None:
        self._changed = []
