"""Decorators that register models and their relation accessors."""

from typing import Callable, TypeVar

from .registry import registry

T = TypeVar("T", bound=type)

_RELATION_MARKER = "__recordism_relation__"


def relation(method: Callable) -> Callable:
    """Mark a model method as a relation accessor; it must return a Builder from has_one() & co."""
    setattr(method, _RELATION_MARKER, True)
    return method


def _collect_relations(cls: type) -> list[str]:
    """Relation accessor names of cls and its bases, base classes first, in definition order."""
    names: list[str] = []
    for klass in reversed(cls.__mro__):
        for name, attribute in vars(klass).items():
            if getattr(attribute, _RELATION_MARKER, False) and name not in names:
                names.append(name)
    return names


def model(cls: T) -> T:
    """Register a Model subclass (and its ``@relation`` methods) in the model registry."""
    registry.register(cls, _collect_relations(cls))
    return cls
