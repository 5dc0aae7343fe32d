"""Process-wide registry of model types and their relation accessors.

Populated during startup (usually through the ``@model`` decorator), then
optionally frozen; afterwards it is only read, by builders resolving table
names and by records resolving relations.
"""

from typing import Any, Iterable

from pydantic import BaseModel

from .errors import ConfigurationError


class ModelEntry(BaseModel):
    """What the registry knows about one model type."""

    model_config = {"arbitrary_types_allowed": True}

    name: str
    table: str
    constructor: Any
    relations: tuple[str, ...] = ()


class ModelRegistry:

    def __init__(self):
        self._entries: dict[str, ModelEntry] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, cls: type, relations: Iterable[str] = ()) -> ModelEntry:
        """Register a model class under its class name, with its relation accessor names in order."""
        if self._frozen:
            raise ConfigurationError(
                f"Cannot register `{cls.__name__}`: the model registry is frozen"
            )
        table = cls._get_table_name()
        if not table:
            raise ConfigurationError(f"Model `{cls.__name__}` has no table name")
        entry = ModelEntry(
            name=cls.__name__,
            table=table,
            constructor=cls,
            relations=tuple(relations),
        )
        self._entries[entry.name] = entry
        return entry

    def freeze(self) -> None:
        """End the registration phase; later register() calls raise ConfigurationError."""
        self._frozen = True

    def clear(self) -> None:
        """Forget every registration and reopen the registration phase."""
        self._entries.clear()
        self._frozen = False

    def has_model(self, name: str) -> bool:
        return name in self._entries

    def get_model(self, name: str) -> ModelEntry:
        try:
            return self._entries[name]
        except KeyError as error:
            raise ConfigurationError(f"No model registered with name=`{name}`") from error

    def get_relations(self, name: str) -> tuple[str, ...]:
        return self.get_model(name).relations


registry = ModelRegistry()
