"""SQLite storage implementations."""

from fulfillment.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_pool,
    is_busy_error,
)
from fulfillment.infrastructure.storage.sqlite.unit_of_work import (
    SQLiteTransactionalStore,
    SQLiteUnitOfWork,
)

# Singleton instance
_store: SQLiteTransactionalStore | None = None


def get_transactional_store() -> SQLiteTransactionalStore:
    """Get singleton transactional store over the global pool."""
    global _store
    if _store is None:
        _store = SQLiteTransactionalStore()
    return _store


def reset_transactional_store() -> None:
    global _store
    _store = None


__all__ = [
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "is_busy_error",
    "SQLiteUnitOfWork",
    "SQLiteTransactionalStore",
    "get_transactional_store",
    "reset_transactional_store",
]
