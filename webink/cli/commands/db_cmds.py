"""
Database commands - schema output, table sync and introspection.

Models are discovered by importing a module and collecting the ``Model``
subclasses it defines.
"""

from __future__ import annotations

import asyncio
import importlib
import inspect
import os
import sys
from typing import List, Type

import click

from ...db.backends import DatabaseAdapter, MySQLAdapter, SQLiteAdapter
from ...db.engine import Database
from ...models.base import Model
from ...models.registry import ModelRegistry
from ..utils.colors import success, info, dim, warning, _CHECK

_DIALECTS = {
    "sqlite": SQLiteAdapter,
    "mysql": MySQLAdapter,
}


def load_models(module_path: str) -> List[Type[Model]]:
    """
    Import ``module_path`` and register the models it defines.

    The working directory is put on ``sys.path`` first so project modules
    resolve without installation.
    """
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    module = importlib.import_module(module_path)
    models = [
        obj for obj in vars(module).values()
        if inspect.isclass(obj)
        and issubclass(obj, Model)
        and obj is not Model
        and obj.__module__ == module.__name__
    ]
    for model_cls in models:
        ModelRegistry.register(model_cls)
    return models


def cmd_schema(module_path: str, dialect: str = "sqlite", verbose: bool = False) -> List[str]:
    """Print CREATE statements for every model in ``module_path``."""
    adapter: DatabaseAdapter = _DIALECTS[dialect]()
    models = load_models(module_path)

    statements: List[str] = []
    for model_cls in models:
        if not model_cls._fields:
            if verbose:
                dim(f"-- {model_cls.__name__}: no fields, skipped")
            continue
        for sql in model_cls.create_statements(adapter):
            click.echo(f"{sql};")
            statements.append(sql)

    if not statements:
        warning("No models with field declarations found.")
    return statements


def cmd_sync(
    module_path: str,
    database_url: str,
    drop: bool = False,
    verbose: bool = False,
) -> List[str]:
    """Create (optionally after dropping) the tables of ``module_path``."""
    load_models(module_path)

    async def _run() -> List[str]:
        db = Database(database_url)
        await db.connect()
        try:
            executed: List[str] = []
            if drop:
                executed += await ModelRegistry.drop_tables(db)
            executed += await ModelRegistry.create_tables(db)
            return executed
        finally:
            await db.close()

    statements = asyncio.run(_run())
    if verbose:
        for sql in statements:
            dim(sql)
    success(f"{_CHECK} Executed {len(statements)} statement(s)")
    return statements


def cmd_tables(database_url: str, verbose: bool = False) -> List[str]:
    """List the tables present in the database."""

    async def _run() -> List[str]:
        db = Database(database_url)
        await db.connect()
        try:
            return await db.tables()
        finally:
            await db.close()

    tables = asyncio.run(_run())
    if not tables:
        warning("No tables found.")
    for name in tables:
        info(name)
    return tables
