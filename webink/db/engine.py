"""
WebInk Database Engine: async repository over SQLite and MySQL.

Provides:
- Database: connection lifecycle, raw statements, model finders
- Module-level default database (create_database / get_database)
- Driver errors surfaced as QueryFault

A ``Database`` moves through ``uninitialized → connected → closed``;
closed is terminal. It holds exactly one connection.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Sequence, Type, Union, TYPE_CHECKING

from ..config import DatabaseConfig
from ..faults.core import Fault
from ..faults.domains import (
    DatabaseConfigFault,
    DatabaseConnectionFault,
    NotConnectedFault,
    QueryFault,
    UnsupportedOperationFault,
)
from .backends.base import DatabaseAdapter, AdapterCapabilities
from .codec import decode, render_sql

if TYPE_CHECKING:
    from ..models.base import Model

logger = logging.getLogger("webink.db")

__all__ = [
    "Database",
    "create_database",
    "get_database",
    "set_database",
    "drop_database",
]

UNINITIALIZED = "uninitialized"
CONNECTED = "connected"
CLOSED = "closed"


def _create_adapter(driver: str) -> DatabaseAdapter:
    """Factory: instantiate the correct backend adapter."""
    if driver == "sqlite":
        from .backends.sqlite import SQLiteAdapter
        return SQLiteAdapter()
    elif driver == "mysql":
        from .backends.mysql import MySQLAdapter
        return MySQLAdapter()
    raise DatabaseConfigFault(
        url=f"<{driver}>",
        reason=f"No adapter registered for driver: {driver}",
    )


def _coerce_config(config: Union[DatabaseConfig, str, Mapping[str, Any], None]) -> DatabaseConfig:
    if config is None:
        return DatabaseConfig()
    if isinstance(config, DatabaseConfig):
        return config
    if isinstance(config, str):
        return DatabaseConfig(url=config)
    if isinstance(config, Mapping):
        return DatabaseConfig.from_mapping(config)
    raise DatabaseConfigFault(
        url=f"<{type(config).__name__}>",
        reason="expected a URL, a mapping or a DatabaseConfig",
    )


class Database:
    """
    Async database repository for WebInk models.

    Statements use ``?`` placeholders; the adapter translates them to the
    backend's native param style. Values are always bound as parameters.

    Usage:
        db = Database("sqlite:///:memory:")
        await db.connect()
        trees = await db.find(AppleTree, "WHERE height > ?", [3])
        await db.close()

        # Legacy mapping:
        db = Database({"db_type": "mysql", "db_user": "u", "db_pass": "p",
                       "db_database": "blog", "db_server": "localhost"})
    """

    def __init__(self, config: Union[DatabaseConfig, str, Mapping[str, Any], None] = None, **options: Any):
        """
        Initialize database engine.

        Args:
            config: ``DatabaseConfig``, connection URL or legacy mapping
            **options: Driver-specific options passed to the backend adapter

        Raises:
            DatabaseConfigFault: The configuration names no supported dialect
        """
        self._config = _coerce_config(config)
        self._driver = self._detect_driver(self._config.url)
        self._adapter: DatabaseAdapter = _create_adapter(self._driver)
        self._options = options
        self._state = UNINITIALIZED
        self._transaction_depth = 0

    @staticmethod
    def _detect_driver(url: str) -> str:
        """Detect database driver from URL scheme."""
        if url.startswith("sqlite"):
            return "sqlite"
        elif url.startswith("mysql"):
            return "mysql"
        raise DatabaseConfigFault(
            url=url,
            reason="Database type must be sqlite or mysql",
        )

    # ── Connection management ────────────────────────────────────────

    async def connect(self) -> "Database":
        """
        Open the connection.

        Raises:
            NotConnectedFault: The database was already closed
            DatabaseConnectionFault: The driver could not connect
        """
        if self._state == CONNECTED:
            return self
        if self._state == CLOSED:
            raise NotConnectedFault("Database has been closed and cannot reconnect")

        try:
            await self._adapter.connect(self._config.url, **self._options)
        except Fault:
            raise
        except Exception as exc:
            raise DatabaseConnectionFault(url=self._config.url, reason=str(exc)) from exc

        self._state = CONNECTED
        logger.info(f"Database connected ({self._driver})")
        return self

    async def close(self) -> None:
        """Close the connection. A closed database cannot be reopened."""
        if self._state == CLOSED:
            return
        try:
            if self._state == CONNECTED:
                await self._adapter.disconnect()
        finally:
            self._state = CLOSED
            self._transaction_depth = 0
            if _default_database is self:
                drop_database()
        logger.info("Database closed")

    def _require_connected(self) -> None:
        if self._state != CONNECTED:
            raise NotConnectedFault(f"Database is {self._state}, connect first")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["Database"]:
        """
        Async context manager for transactions.

        Nested blocks join the outermost transaction; only the outermost
        block commits or rolls back.

        Usage:
            async with db.transaction():
                await db.execute("INSERT INTO ...")
                await db.execute("UPDATE ...")
        """
        self._require_connected()

        if self._transaction_depth:
            self._transaction_depth += 1
            try:
                yield self
            finally:
                self._transaction_depth -= 1
            return

        await self._adapter.begin()
        self._transaction_depth = 1
        try:
            yield self
            await self._adapter.commit()
        except Exception:
            await self._adapter.rollback()
            raise
        finally:
            self._transaction_depth = 0

    # ── Query execution ──────────────────────────────────────────────

    def _log(self, sql: str, params: Optional[Sequence[Any]]) -> None:
        level = logging.INFO if self._config.echo else logging.DEBUG
        if logger.isEnabledFor(level):
            logger.log(level, render_sql(sql, params))

    async def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> Optional[int]:
        """
        Execute a statement.

        Returns:
            The driver's last inserted row id, if any

        Raises:
            QueryFault: When statement execution fails
        """
        self._require_connected()
        self._log(sql, params)
        try:
            return await self._adapter.execute(sql, params or [])
        except Fault:
            raise
        except Exception as exc:
            raise QueryFault(
                operation="execute",
                reason=str(exc),
                metadata={"sql": sql[:200]},
            ) from exc

    async def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """
        Execute a query and return all rows as dicts.

        Text values pass through ``decode`` unless numeric coercion is
        disabled in the config.

        Raises:
            QueryFault: When query execution fails
        """
        self._require_connected()
        self._log(sql, params)
        try:
            rows = await self._adapter.fetch_all(sql, params or [])
        except Fault:
            raise
        except Exception as exc:
            raise QueryFault(
                operation="query",
                reason=str(exc),
                metadata={"sql": sql[:200]},
            ) from exc

        if not self._config.coerce_numeric_strings:
            return rows
        return [{k: decode(v) for k, v in row.items()} for row in rows]

    async def tables(self) -> List[str]:
        """List all table names in the database."""
        self._require_connected()
        return await self._adapter.get_tables()

    # ── Model operations ─────────────────────────────────────────────

    @staticmethod
    def _model(model: Union[Type[Model], str]) -> Type[Model]:
        if isinstance(model, str):
            from ..models.schema import resolve_model
            return resolve_model(model)
        return model

    def _table(self, model: Type[Model], operation: str) -> str:
        if not model._fields:
            raise UnsupportedOperationFault(model.__name__, operation)
        return self._adapter.quote(model.table_name())

    async def find(
        self,
        model: Union[Type[Model], str],
        where: str = "",
        params: Optional[Sequence[Any]] = None,
    ) -> List[Model]:
        """
        Load instances of ``model``, a class or a class or table name.

        ``where`` is appended verbatim (``"WHERE color = ?"``,
        ``"ORDER BY height"``).
        """
        model = self._model(model)
        sql = f"SELECT * FROM {self._table(model, 'find')}"
        if where:
            sql = f"{sql} {where}"
        rows = await self.query(sql, params)
        return [model.from_row(row) for row in rows]

    async def remove(
        self,
        model: Union[Type[Model], str],
        where: str = "",
        params: Optional[Sequence[Any]] = None,
    ) -> None:
        """Delete rows of ``model``'s table; no filter deletes all rows."""
        sql = f"DELETE FROM {self._table(self._model(model), 'remove')}"
        if where:
            sql = f"{sql} {where}"
        await self.execute(sql, params)

    async def last_inserted_key(self, model: Union[Type[Model], str]) -> Any:
        """Highest primary key in ``model``'s table."""
        model = self._model(model)
        pk = self._adapter.quote(model.primary_key())
        rows = await self.query(
            f"SELECT MAX({pk}) AS max_key FROM {self._table(model, 'inspect')}"
        )
        return rows[0]["max_key"] if rows else None

    async def find_references(
        self,
        owner: Union[Type[Model], str],
        owner_pk: Any,
        target: Union[Type[Model], str],
        extra: str = "",
        params: Optional[Sequence[Any]] = None,
    ) -> List[Model]:
        """Rows of ``target`` linked through a foreign-key column."""
        from ..models import relations
        from ..models.enums import Relationship

        owner, target = self._model(owner), self._model(target)
        if relations.kind_of(owner, target) in (None, Relationship.MANY_MANY):
            return []
        return await relations.find_related(self, owner, owner_pk, target, extra, params)

    async def find_reference(
        self,
        owner: Union[Type[Model], str],
        owner_pk: Any,
        target: Union[Type[Model], str],
        extra: str = "",
        params: Optional[Sequence[Any]] = None,
    ) -> Optional[Model]:
        """The single row of ``target`` linked through a foreign-key column."""
        from ..models import relations
        from ..models.enums import Relationship

        owner, target = self._model(owner), self._model(target)
        if relations.kind_of(owner, target) in (None, Relationship.MANY_MANY):
            return None
        return await relations.find_related_single(self, owner, owner_pk, target, extra, params)

    async def find_union(
        self,
        owner: Union[Type[Model], str],
        owner_pk: Any,
        target: Union[Type[Model], str],
        extra: str = "",
        params: Optional[Sequence[Any]] = None,
    ) -> List[Model]:
        """Rows of ``target`` linked through the join table."""
        from ..models import relations
        from ..models.enums import Relationship

        owner, target = self._model(owner), self._model(target)
        if relations.kind_of(owner, target) is not Relationship.MANY_MANY:
            return []
        return await relations.find_related(self, owner, owner_pk, target, extra, params)

    def primary_key_autoincrement(self, pk: str = "id") -> List[str]:
        """Dialect DDL tokens for an autoincrementing primary key."""
        return self._adapter.primary_key_autoincrement(pk)

    # ── Properties ───────────────────────────────────────────────────

    @property
    def is_connected(self) -> bool:
        return self._state == CONNECTED and self._adapter.is_connected

    @property
    def state(self) -> str:
        return self._state

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def url(self) -> str:
        return self._config.url

    @property
    def driver(self) -> str:
        return self._driver

    @property
    def dialect(self) -> str:
        """Return the SQL dialect name (sqlite, mysql)."""
        return self._adapter.dialect

    @property
    def capabilities(self) -> AdapterCapabilities:
        return self._adapter.capabilities

    @property
    def adapter(self) -> DatabaseAdapter:
        """Direct access to the underlying adapter (advanced use)."""
        return self._adapter

    @property
    def in_transaction(self) -> bool:
        return self._transaction_depth > 0

    def __repr__(self) -> str:
        return f"<Database {self._driver} {self._state}>"


# ── Module-level default database ───────────────────────────────────────────

_default_database: Optional[Database] = None


async def create_database(
    config: Union[DatabaseConfig, str, Mapping[str, Any], None] = None,
    **options: Any,
) -> Database:
    """
    Connect and install the default database.

    The first live connection wins: while one is active, further calls
    log a warning and return it unchanged.
    """
    global _default_database
    if _default_database is not None and _default_database.is_connected:
        logger.warning("Database already created, keeping the active connection")
        return _default_database

    db = Database(config, **options)
    await db.connect()
    _default_database = db
    return db


def get_database() -> Database:
    """
    Return the default database.

    Raises:
        NotConnectedFault: No database has been created
    """
    if _default_database is None:
        raise NotConnectedFault()
    return _default_database


def set_database(db: Optional[Database]) -> None:
    """Install an externally-created database as the default."""
    global _default_database
    _default_database = db


def drop_database() -> Optional[Database]:
    """Forget the default database without closing it."""
    global _default_database
    db, _default_database = _default_database, None
    return db
