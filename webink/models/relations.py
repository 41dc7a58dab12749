"""
WebInk relationship resolver.

Maps a declared relationship between two models onto its physical layout
(a foreign-key column on one table, or a join table) and issues the SQL
that reads and rewires links. Every function is symmetric: both sides of
a relationship derive the same layout from table names alone.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Tuple, Type

from .enums import Relationship
from .naming import sorts_first, table_name_for
from .schema import (
    table_name,
    primary_key,
    foreign_key,
    resolve_model,
)
from ..faults.domains import SchemaFault

if TYPE_CHECKING:
    from ..db.engine import Database
    from .base import Model

logger = logging.getLogger("webink.models.relations")

__all__ = [
    "kind_of",
    "accessor_name",
    "foreign_items",
    "holds_foreign_key",
    "join_table_name",
    "find_related",
    "find_related_single",
    "unlink_all",
    "link_all",
    "link_one",
]


def _parse_kind(model: Type[Model], raw: Any) -> Relationship:
    try:
        return Relationship.parse(raw)
    except ValueError:
        raise SchemaFault(
            table_name(model),
            f"unknown relationship kind {raw!r}",
        ) from None


def _declared_name(owner: Type[Model], target: Type[Model]) -> Optional[str]:
    wanted = (target.__name__.lower(), table_name(target))
    for name in owner._foreign:
        if name.lower() in wanted:
            return name
    return None


def kind_of(owner: Type[Model], target: Type[Model]) -> Optional[Relationship]:
    """Relationship ``owner`` declares towards ``target``, if any."""
    name = _declared_name(owner, target)
    if name is None:
        return None
    return _parse_kind(owner, owner._foreign[name])


def accessor_name(owner: Type[Model], target: Type[Model]) -> Optional[str]:
    """Attribute on ``owner`` instances holding entities of ``target``."""
    name = _declared_name(owner, target)
    return None if name is None else table_name_for(name)


def foreign_items(model: Type[Model]) -> List[Tuple[Type[Model], Relationship]]:
    """Resolved ``(target model, kind)`` pairs for every ``foreign`` entry."""
    return [
        (resolve_model(name), _parse_kind(model, raw))
        for name, raw in model._foreign.items()
    ]


def holds_foreign_key(owner: Type[Model], target: Type[Model], kind: Relationship) -> bool:
    """Whether ``owner``'s table carries the column pointing at ``target``."""
    if kind is Relationship.ONE_MANY:
        return True
    if kind is Relationship.ONE_ONE:
        return sorts_first(table_name(owner), table_name(target))
    return False


def join_table_name(a: Type[Model], b: Type[Model]) -> str:
    first, second = sorted((table_name(a), table_name(b)))
    return f"{first}_{second}"


async def find_related(
    db: Database,
    owner: Type[Model],
    owner_pk: Any,
    target: Type[Model],
    extra: str = "",
    params: Optional[Sequence[Any]] = None,
) -> List[Model]:
    """
    Entities of ``target`` linked to the ``owner`` row with key ``owner_pk``.

    ``extra`` is appended verbatim after the generated ``WHERE`` clause
    (``"AND ..."``, ``"ORDER BY ..."``); its placeholders bind ``params``.
    Returns an empty list when no relationship is declared.
    """
    kind = kind_of(owner, target)
    if kind is None:
        return []

    q = db.adapter.quote
    owner_table, target_table = table_name(owner), table_name(target)

    if kind is Relationship.MANY_MANY:
        jt = q(join_table_name(owner, target))
        sql = (
            f"SELECT {q(target_table)}.* FROM {jt}, {q(target_table)} "
            f"WHERE {jt}.{q(foreign_key(owner))} = ? "
            f"AND {jt}.{q(foreign_key(target))} = {q(target_table)}.{q(primary_key(target))}"
        )
    elif holds_foreign_key(owner, target, kind):
        sql = (
            f"SELECT * FROM {q(target_table)} WHERE {q(primary_key(target))} = "
            f"(SELECT {q(foreign_key(target))} FROM {q(owner_table)} "
            f"WHERE {q(primary_key(owner))} = ?)"
        )
    else:
        sql = f"SELECT * FROM {q(target_table)} WHERE {q(foreign_key(owner))} = ?"

    if extra:
        sql = f"{sql} {extra}"

    rows = await db.query(sql, [owner_pk, *(params or [])])
    return [target.from_row(row) for row in rows]


async def find_related_single(
    db: Database,
    owner: Type[Model],
    owner_pk: Any,
    target: Type[Model],
    extra: str = "",
    params: Optional[Sequence[Any]] = None,
) -> Optional[Model]:
    """The single linked entity, or None when there are zero or several."""
    result = await find_related(db, owner, owner_pk, target, extra, params)
    if len(result) == 1:
        return result[0]
    if len(result) > 1:
        logger.warning(
            f"{owner.__name__}({owner_pk}) has {len(result)} linked "
            f"{target.__name__} rows, expected one"
        )
    return None


async def unlink_all(db: Database, entity: Model, target: Type[Model]) -> None:
    """Remove every link between ``entity`` and rows of ``target``."""
    owner = type(entity)
    kind = kind_of(owner, target)
    if kind is None or entity.pk is None:
        return

    q = db.adapter.quote
    if kind is Relationship.MANY_MANY:
        await db.execute(
            f"DELETE FROM {q(join_table_name(owner, target))} "
            f"WHERE {q(foreign_key(owner))} = ?",
            [entity.pk],
        )
    elif holds_foreign_key(owner, target, kind):
        await db.execute(
            f"UPDATE {q(table_name(owner))} SET {q(foreign_key(target))} = NULL "
            f"WHERE {q(primary_key(owner))} = ?",
            [entity.pk],
        )
    else:
        await db.execute(
            f"UPDATE {q(table_name(target))} SET {q(foreign_key(owner))} = NULL "
            f"WHERE {q(foreign_key(owner))} = ?",
            [entity.pk],
        )
    logger.debug(f"Unlinked {owner.__name__}({entity.pk}) from {target.__name__}")


async def link_all(db: Database, entity: Model, target: Type[Model], values: Any) -> None:
    """
    Link ``entity`` to each value, given as ``target`` instances or keys.

    A single value is treated as a one-element list. On singular
    relationships each link replaces the previous one, so the last wins.
    """
    owner = type(entity)
    kind = kind_of(owner, target)
    if kind is None:
        return

    if not isinstance(values, (list, tuple)):
        values = [values]

    for value in values:
        if isinstance(value, target):
            target_pk = value.pk
        elif hasattr(value, "_fields"):
            raise TypeError(
                f"Cannot link {type(value).__name__} as {target.__name__} "
                f"to {owner.__name__}"
            )
        else:
            target_pk = value

        if target_pk is None:
            raise ValueError(
                f"Cannot link unsaved {target.__name__} to {owner.__name__}"
            )
        await link_one(db, entity, target, kind, target_pk)


async def link_one(
    db: Database,
    entity: Model,
    target: Type[Model],
    kind: Relationship,
    target_pk: Any,
) -> None:
    """Create one link between ``entity`` and the ``target`` row ``target_pk``."""
    owner = type(entity)
    q = db.adapter.quote

    if kind is Relationship.MANY_MANY:
        await db.execute(
            f"INSERT INTO {q(join_table_name(owner, target))} "
            f"({q(foreign_key(owner))}, {q(foreign_key(target))}) VALUES (?, ?)",
            [entity.pk, target_pk],
        )
    elif holds_foreign_key(owner, target, kind):
        owner_table, fk = q(table_name(owner)), q(foreign_key(target))
        if kind is Relationship.ONE_ONE:
            # the target may be held by at most one owner row
            await db.execute(
                f"UPDATE {owner_table} SET {fk} = NULL WHERE {fk} = ?",
                [target_pk],
            )
        await db.execute(
            f"UPDATE {owner_table} SET {fk} = ? WHERE {q(primary_key(owner))} = ?",
            [target_pk, entity.pk],
        )
    else:
        target_table, fk = q(table_name(target)), q(foreign_key(owner))
        if kind is Relationship.ONE_ONE:
            await db.execute(
                f"UPDATE {target_table} SET {fk} = NULL WHERE {fk} = ?",
                [entity.pk],
            )
        await db.execute(
            f"UPDATE {target_table} SET {fk} = ? WHERE {q(primary_key(target))} = ?",
            [entity.pk, target_pk],
        )
    logger.debug(f"Linked {owner.__name__}({entity.pk}) -> {target.__name__}({target_pk})")
