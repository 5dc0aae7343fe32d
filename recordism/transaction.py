import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any, AsyncIterator, Awaitable, Callable

from .connection import ConnectionAdapter, Result, get_adapter
from .errors import TransactionError

logger = logging.getLogger("recordism")


class TransactionManager:

    def __init__(self, adapter_factory: Callable[[], Awaitable[ConnectionAdapter]], name: str = "default"):
        """
        Initialize the transaction manager.

        Args:
            adapter_factory: A coroutine function that returns a ConnectionAdapter
            name: Connection name, used to keep nesting levels apart per connection
        """
        self._adapter_factory = adapter_factory
        self._level: ContextVar[int] = ContextVar(f"recordism_transaction_level_{name}", default=0)

    def _get_transaction_level(self) -> int:
        """Get current transaction nesting level"""
        return self._level.get()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["Transaction"]:
        """
        Async context manager for database transactions with SAVEPOINT support.

        The outermost level issues BEGIN/COMMIT/ROLLBACK through the adapter; nested
        levels use savepoints so an inner failure only undoes the inner work.

        Yields:
            Transaction: Transaction object for executing statements
        """
        adapter = await self._adapter_factory()
        new_level = self._get_transaction_level() + 1
        savepoint_name = f"savepoint_{new_level}" if new_level > 1 else None

        if savepoint_name:
            logger.debug("SAVEPOINT %s", savepoint_name)
            await adapter.execute(f"SAVEPOINT {savepoint_name}")
        else:
            logger.debug("BEGIN")
            await adapter.begin_transaction()

        token = self._level.set(new_level)
        transaction_obj = Transaction(adapter, self, new_level)
        try:
            yield transaction_obj

            if savepoint_name:
                logger.debug("RELEASE SAVEPOINT %s", savepoint_name)
                await adapter.execute(f"RELEASE SAVEPOINT {savepoint_name}")
            else:
                logger.debug("COMMIT")
                await adapter.commit()

        except BaseException:
            if savepoint_name:
                logger.debug("ROLLBACK TO SAVEPOINT %s", savepoint_name)
                await adapter.execute(f"ROLLBACK TO SAVEPOINT {savepoint_name}")
                await adapter.execute(f"RELEASE SAVEPOINT {savepoint_name}")
            else:
                logger.debug("ROLLBACK")
                await adapter.rollback()
            raise
        finally:
            transaction_obj._active = False
            self._level.reset(token)


class Transaction:

    def __init__(self, adapter: ConnectionAdapter, manager: TransactionManager, level: int):
        self._adapter = adapter
        self._manager = manager
        self._level = level
        self._active = True

    @property
    def level(self) -> int:
        return self._level

    async def execute(self, sql: str, parameters: tuple[Any, ...] | list[Any] = ()) -> Result:
        """
        Execute a statement within this transaction.

        Raises:
            TransactionError: If the transaction has ended, or if a nested
                transaction is currently open on top of this one
        """
        if not self._active:
            raise TransactionError("Transaction is no longer active")

        current_level = self._manager._get_transaction_level()
        if current_level > self._level:
            raise TransactionError(
                f"Cannot use transaction level {self._level} from level {current_level}. "
                "Higher-level transactions cannot be accessed from nested transactions."
            )
        return await self._adapter.execute(sql, parameters)


_transaction_managers: dict[str, TransactionManager] = {}


def transaction(connection_name: str = "default"):
    """Return an async context manager wrapping a transaction on the named connection."""
    if connection_name not in _transaction_managers:
        def adapter_factory_builder(name):
            return lambda: get_adapter(name)
        adapter_factory = adapter_factory_builder(connection_name)
        _transaction_managers[connection_name] = TransactionManager(adapter_factory, name=connection_name)
    return _transaction_managers[connection_name].transaction()
