"""
WebInk DB Backend: Base Adapter Interface.

All database backends must implement this interface. The ``Database``
engine delegates to the appropriate adapter based on the connection URL.

This interface abstracts differences between SQLite and MySQL:
- Parameter placeholder style (?, %s)
- Identifier quoting
- Autoincrementing primary key DDL
- Native last-insert-id access
- Transaction statements
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger("webink.db.backends")

__all__ = [
    "DatabaseAdapter",
    "AdapterCapabilities",
]


@dataclass
class AdapterCapabilities:
    """Describes what a specific backend supports."""

    param_style: str = "qmark"  # qmark (?) | format (%s)
    identifier_quote: str = '"'
    autoincrement_keyword: str = "AUTOINCREMENT"
    name: str = "base"


class DatabaseAdapter(ABC):
    """
    Abstract database adapter interface.

    The ``Database`` engine uses this interface to execute statements,
    manage transactions and generate dialect-specific DDL. SQL handed to
    an adapter always uses ``?`` placeholders; ``adapt_sql`` rewrites them.
    """

    capabilities: AdapterCapabilities = AdapterCapabilities()

    @abstractmethod
    async def connect(self, url: str, **options) -> None:
        """Open a connection to the database."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the database connection."""
        ...

    @abstractmethod
    async def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> Optional[int]:
        """Execute a statement. Returns the driver's last inserted row id."""
        ...

    @abstractmethod
    async def fetch_all(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """Execute and return all rows as dicts keyed by column name."""
        ...

    # ── Transaction management ───────────────────────────────────────

    @abstractmethod
    async def begin(self) -> None:
        """Start a transaction."""
        ...

    @abstractmethod
    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    # ── Introspection ────────────────────────────────────────────────

    @abstractmethod
    async def get_tables(self) -> List[str]:
        """List all table names."""
        ...

    # ── SQL adaptation ───────────────────────────────────────────────

    def adapt_sql(self, sql: str) -> str:
        """
        Adapt SQL placeholders from qmark (?) to the backend's param style.

        Override this in backends that use a different param style.
        """
        return sql

    def quote(self, identifier: str) -> str:
        """Quote a table or column name."""
        q = self.capabilities.identifier_quote
        return f"{q}{identifier}{q}"

    def primary_key_autoincrement(self, pk: str = "id") -> List[str]:
        """DDL tokens declaring an autoincrementing integer primary key."""
        return [
            self.quote(pk),
            "INTEGER",
            "PRIMARY KEY",
            self.capabilities.autoincrement_keyword,
        ]

    def empty_insert_sql(self, table: str) -> str:
        """INSERT for a row where every column takes its default."""
        return f"INSERT INTO {self.quote(table)} DEFAULT VALUES"

    def last_insert_id(self, cursor: Any) -> Optional[int]:
        """Extract last inserted ID from cursor."""
        if hasattr(cursor, "lastrowid"):
            return cursor.lastrowid or None
        return None

    @property
    def is_connected(self) -> bool:
        """Check if the adapter is connected."""
        return False

    @property
    def dialect(self) -> str:
        """Return the SQL dialect name."""
        return self.capabilities.name
