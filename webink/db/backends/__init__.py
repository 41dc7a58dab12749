"""
WebInk DB Backends Package: pluggable database adapters.

Provides a common adapter interface and implementations for:
- SQLite (default, via aiosqlite)
- MySQL (via aiomysql)
"""

from .base import DatabaseAdapter, AdapterCapabilities
from .sqlite import SQLiteAdapter
from .mysql import MySQLAdapter

__all__ = [
    "DatabaseAdapter",
    "AdapterCapabilities",
    "SQLiteAdapter",
    "MySQLAdapter",
]
