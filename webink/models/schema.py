"""
WebInk schema catalog: per-model metadata lookups and DDL generation.

All functions take the model class; none of them touch the database.
Schema problems surface here, at the first schema-dependent call, as
``SchemaFault``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Type

from ..faults.domains import SchemaFault, UnsupportedOperationFault
from .naming import table_name_for, sorts_first
from .enums import Relationship

if TYPE_CHECKING:
    from ..db.backends.base import DatabaseAdapter
    from .base import Model

logger = logging.getLogger("webink.models.schema")

__all__ = [
    "table_name",
    "primary_key",
    "primary_key_type",
    "foreign_key",
    "foreign_key_type",
    "resolve_model",
    "create_table_statements",
]


def table_name(model: Type[Model]) -> str:
    return table_name_for(model.__name__)


def primary_key(model: Type[Model]) -> str:
    """
    Name of the single field declared with the primary-key sentinel.

    Raises:
        SchemaFault: no primary key, several, a reserved name, or an
            accessor clashing with a field
    """
    if model._schema_issues:
        raise SchemaFault(table_name(model), model._schema_issues[0])

    keys = [name for name, column in model._fields.items() if column.primary_key]
    if len(keys) != 1:
        raise SchemaFault(
            table_name(model),
            f"expected exactly one primary key, found {len(keys)}",
        )
    if keys[0].lower() == "pk":
        raise SchemaFault(
            table_name(model),
            "'pk' cannot be used as field name, it is reserved for the primary key accessor",
        )
    return keys[0]


def primary_key_type(model: Type[Model], dialect: DatabaseAdapter) -> str:
    """Column type of the primary key in the given dialect."""
    return dialect.primary_key_autoincrement(primary_key(model))[1]


def foreign_key(model: Type[Model]) -> str:
    """Column name other tables use to reference this model."""
    return f"{table_name(model)}_{primary_key(model)}"


def foreign_key_type(model: Type[Model], dialect: DatabaseAdapter) -> str:
    return primary_key_type(model, dialect)


def resolve_model(name: str) -> Type[Model]:
    """Map a class-name or table-name string to a registered model."""
    from .registry import ModelRegistry
    return ModelRegistry.resolve(name)


def create_table_statements(model: Type[Model], dialect: DatabaseAdapter) -> List[str]:
    """
    CREATE TABLE statements for a model.

    The first statement creates the model's own table, including one
    foreign-key column for every relationship this table carries. Join
    tables follow, one per many_many relationship whose other table sorts
    after this one.
    """
    from .relations import foreign_items, holds_foreign_key, join_table_name

    if not model._fields:
        raise UnsupportedOperationFault(model.__name__, "create tables for")

    primary_key(model)
    q = dialect.quote
    table = table_name(model)

    columns = [column.sql_column_def(dialect) for column in model._fields.values()]
    join_tables: List[str] = []

    for target, kind in foreign_items(model):
        if holds_foreign_key(model, target, kind):
            columns.append(f"{q(foreign_key(target))} {foreign_key_type(target, dialect)}")

        if kind is Relationship.MANY_MANY and sorts_first(table, table_name(target)):
            join_tables.append(
                f"CREATE TABLE {q(join_table_name(model, target))} ("
                f"{' '.join(dialect.primary_key_autoincrement('id'))}, "
                f"{q(foreign_key(model))} {foreign_key_type(model, dialect)}, "
                f"{q(foreign_key(target))} {foreign_key_type(target, dialect)})"
            )

    statements = [f"CREATE TABLE {q(table)} ({', '.join(columns)})", *join_tables]
    logger.debug(f"Schema for {model.__name__}: {len(statements)} statement(s)")
    return statements
