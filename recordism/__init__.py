"""recordism: an async active-record layer with a fluent, parameterized SQL builder."""

from .model import Model
from .query import Builder
from .compiler import Compiler, Statement
from .attributes import AttributeStore
from .connection import connect, disconnect, get_adapter, ConnectionAdapter, SqliteAdapter, Result
from .transaction import transaction
from .decorators import model, relation
from .registry import registry
from .events import emitter
from .pagination import Page, paginate
from .errors import (
    RecordismError,
    ValidationError,
    ConfigurationError,
    AdapterError,
    TransactionError,
)
