"""SQLite-backed document store for file metadata."""

from .local import get_nosql_adapter, init_db
from .nosql_adapter import NoSQLAdapter
from .schemas import FileStatus

__all__ = ['NoSQLAdapter', 'FileStatus', 'get_nosql_adapter', 'init_db']
