"""Base Dialect type: subclasses implement connect() for each engine."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel


class Dialect(BaseModel, ABC):
    """Base for database dialects; subclasses open a driver connection for a given URL."""

    model_config = {"arbitrary_types_allowed": True}

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ()
    """URL schemes this dialect handles (e.g. ('sqlite',))."""

    @abstractmethod
    async def connect(self, url: str) -> Any:
        """Return a new raw driver connection for the given URL.

        The return value is engine-specific (e.g. aiosqlite.Connection).
        """
        ...  # pylint: disable=unnecessary-ellipsis
