"""
WebInk Database: async repository layer.

Provides:
- Database: connection lifecycle, statements, model finders, transactions
- SQLite (aiosqlite) and MySQL (aiomysql) backend adapters
- SQL value codec (encode / decode)
- Module-level default database accessors
"""

from .engine import (
    Database,
    create_database,
    get_database,
    set_database,
    drop_database,
)

from .backends import (
    DatabaseAdapter,
    AdapterCapabilities,
    SQLiteAdapter,
    MySQLAdapter,
)

from .codec import encode, decode, render_sql, format_date

# Re-export fault types for convenience
from ..faults.domains import (
    DatabaseConfigFault,
    DatabaseConnectionFault,
    NotConnectedFault,
    QueryFault,
)

__all__ = [
    "Database",
    "create_database",
    "get_database",
    "set_database",
    "drop_database",
    # Backends
    "DatabaseAdapter",
    "AdapterCapabilities",
    "SQLiteAdapter",
    "MySQLAdapter",
    # Codec
    "encode",
    "decode",
    "render_sql",
    "format_date",
    # Faults
    "DatabaseConfigFault",
    "DatabaseConnectionFault",
    "NotConnectedFault",
    "QueryFault",
]
