"""
WebInk DB Backend: SQLite adapter via aiosqlite.

This is the default backend: the embedded, file-based engine. It opens
the connection in autocommit mode and issues explicit ``BEGIN`` /
``COMMIT`` / ``ROLLBACK`` statements for transactions.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence

import aiosqlite

from .base import DatabaseAdapter, AdapterCapabilities

logger = logging.getLogger("webink.db.backends.sqlite")

__all__ = ["SQLiteAdapter"]


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite adapter using aiosqlite.

    Features:
    - Autocommit connection with explicit transactions
    - ``"``-quoted identifiers, ``?`` placeholders
    - ``INTEGER PRIMARY KEY AUTOINCREMENT`` primary keys
    - Tolerates a busy database while closing
    """

    capabilities = AdapterCapabilities(
        param_style="qmark",
        identifier_quote='"',
        autoincrement_keyword="AUTOINCREMENT",
        name="sqlite",
    )

    def __init__(self):
        self._connection: Any = None
        self._connected = False

    async def connect(self, url: str, **options) -> None:
        if self._connected:
            return
        db_path = self._parse_url(url)
        self._connection = await aiosqlite.connect(db_path, isolation_level=None)
        self._connected = True
        logger.info(f"SQLite connected: {db_path}")

    async def disconnect(self) -> None:
        if not self._connected:
            return
        try:
            await self._connection.close()
        except sqlite3.OperationalError as exc:
            if "locked" not in str(exc) and "busy" not in str(exc):
                raise
            logger.warning(f"SQLite busy while closing, connection dropped: {exc}")
        finally:
            self._connection = None
            self._connected = False
        logger.info("SQLite disconnected")

    async def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> Optional[int]:
        if not self._connected:
            raise RuntimeError("Not connected")
        cursor = await self._connection.execute(sql, list(params or []))
        try:
            return self.last_insert_id(cursor)
        finally:
            await cursor.close()

    async def fetch_all(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        if not self._connected:
            raise RuntimeError("Not connected")
        cursor = await self._connection.execute(sql, list(params or []))
        try:
            rows = await cursor.fetchall()
            if not cursor.description:
                return []
            cols = [d[0] for d in cursor.description]
            return [dict(zip(cols, row)) for row in rows]
        finally:
            await cursor.close()

    # ── Transactions ─────────────────────────────────────────────────

    async def begin(self) -> None:
        await self.execute("BEGIN")

    async def commit(self) -> None:
        await self.execute("COMMIT")

    async def rollback(self) -> None:
        await self.execute("ROLLBACK")

    # ── Introspection ────────────────────────────────────────────────

    async def get_tables(self) -> List[str]:
        rows = await self.fetch_all(
            "SELECT name FROM sqlite_master WHERE type='table' "
            "AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        return [r["name"] for r in rows]

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def dialect(self) -> str:
        return "sqlite"

    @staticmethod
    def _parse_url(url: str) -> str:
        """Extract file path from sqlite URL."""
        for prefix in ("sqlite:///", "sqlite://"):
            if url.startswith(prefix):
                path = url[len(prefix):]
                return path or ":memory:"
        return url.replace("sqlite:", "").lstrip("/") or ":memory:"
