"""
WebInk Model Base: metaclass-driven active-record entities.

Usage:
    from webink.models import Model, Column, PrimaryKey

    class AppleTree(Model):
        color = Column("VARCHAR(20)")
        id = PrimaryKey()
        height = Column("INTEGER")

        class Meta:
            foreign = {"Wig": "many_one", "ColorSpray": "many_many"}

    tree = AppleTree(color="red", height=5)
    await tree.save(db)

The ``fields`` / ``foreign`` mapping form is accepted as well::

    class Wig(Model):
        fields = {"ref": PRIMARY_KEY, "length": ["INTEGER"]}
        foreign = {"AppleTree": "one_many"}

Each ``foreign`` entry installs an accessor named after the related
table (``tree.wig``, ``tree.color_spray``). ``save()`` rewrites the links
of every accessor that is not ``None``.
"""

from __future__ import annotations

import datetime
import decimal
import logging
from typing import (
    Any,
    ClassVar,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    Union,
    TYPE_CHECKING,
)

from .fields import Column, RelationAccessor
from .naming import table_name_for
from .registry import ModelRegistry
from . import relations, schema
from ..faults.domains import MissingFieldFault, UnsupportedOperationFault

if TYPE_CHECKING:
    from ..db.engine import Database
    from ..db.backends.base import DatabaseAdapter

logger = logging.getLogger("webink.models")

__all__ = ["Model", "ModelMeta"]


class ModelMeta(type):
    """
    Metaclass for WebInk models.

    Handles:
    - Field collection from ``Column`` attributes or a ``fields`` mapping
    - Relationship collection from ``foreign`` or ``Meta.foreign``
    - Accessor installation
    - Model registration
    """

    def __new__(
        mcs,
        name: str,
        bases: Tuple[type, ...],
        namespace: Dict[str, Any],
        **kwargs,
    ) -> ModelMeta:
        # Don't process the base Model class itself
        parents = [b for b in bases if isinstance(b, ModelMeta)]
        if not parents:
            return super().__new__(mcs, name, bases, namespace)

        meta_class = namespace.pop("Meta", None)
        declared_fields = namespace.pop("fields", None)
        declared_foreign = namespace.pop("foreign", None)
        if declared_foreign is None and meta_class is not None:
            declared_foreign = getattr(meta_class, "foreign", None)
        abstract = bool(getattr(meta_class, "abstract", False)) if meta_class else False

        fields: Dict[str, Column] = {}
        foreign: Dict[str, str] = {}
        for parent in bases:
            if hasattr(parent, "_fields"):
                fields.update(parent._fields)
            if hasattr(parent, "_foreign"):
                foreign.update(parent._foreign)

        if isinstance(declared_fields, Mapping):
            for key, declaration in declared_fields.items():
                column = Column.from_declaration(declaration)
                fields[key] = column
                namespace[key] = column
        else:
            for key, value in list(namespace.items()):
                if isinstance(value, Column):
                    fields[key] = value

        # ``pk`` stays the primary key accessor; the clash is reported lazily
        pk_column = namespace.pop("pk", None) if isinstance(namespace.get("pk"), Column) else None

        if declared_foreign:
            foreign.update({str(k): str(v) for k, v in dict(declared_foreign).items()})

        cls = super().__new__(mcs, name, bases, namespace)

        if pk_column is not None:
            pk_column.__set_name__(cls, "pk")

        cls._fields = fields
        cls._foreign = foreign
        cls._schema_issues = []
        cls._db = None

        for related_name, kind in foreign.items():
            accessor = table_name_for(related_name)
            if accessor in fields or accessor == "pk":
                cls._schema_issues.append(
                    f"relationship accessor '{accessor}' collides with a field"
                )
                continue
            descriptor = RelationAccessor(related_name, kind)
            descriptor.__set_name__(cls, accessor)
            setattr(cls, accessor, descriptor)

        if not abstract:
            ModelRegistry.register(cls)

        return cls


class Model(metaclass=ModelMeta):
    """
    Base model class.

    Class-level attributes (set by metaclass):
        _fields: Ordered dict of field name → Column
        _foreign: Related model name → relationship kind
        _db: Database bound through ``ModelRegistry.set_database``
    """

    _fields: ClassVar[Dict[str, Column]] = {}
    _foreign: ClassVar[Dict[str, str]] = {}
    _schema_issues: ClassVar[List[str]] = []
    _db: ClassVar[Optional[Database]] = None

    def __init__(self, data: Union[Mapping[str, Any], List[Any], Tuple[Any, ...], None] = None, /, **kwargs: Any):
        """
        Create an instance (in-memory, not persisted).

        ``data`` is a mapping of field name → value or a sequence of values
        in declaration order. A sequence one shorter than the field list
        skips the primary key. Every non-key field must be given.

        Raises:
            MissingFieldFault: a non-key field has no value
        """
        cls = type(self)
        if not cls._fields:
            if isinstance(data, Mapping):
                self.__dict__.update(data)
            self.__dict__.update(kwargs)
            return

        pk_name = schema.primary_key(cls)
        if data is None:
            values: Dict[str, Any] = {}
        elif isinstance(data, Mapping):
            values = dict(data)
        elif isinstance(data, (list, tuple)):
            values = self._from_sequence(data, pk_name)
        else:
            raise TypeError(
                f"{cls.__name__}() expects a mapping or a sequence, got {type(data).__name__}"
            )
        values.update(kwargs)

        for field_name in cls._fields:
            if field_name not in values and field_name != pk_name:
                raise MissingFieldFault(cls.__name__, field_name)
            self.__dict__[field_name] = values.get(field_name)

    def _from_sequence(self, data: Union[List[Any], Tuple[Any, ...]], pk_name: str) -> Dict[str, Any]:
        names = list(type(self)._fields)
        if len(data) == len(names) - 1:
            names = [n for n in names if n != pk_name]
        elif len(data) != len(names):
            raise TypeError(
                f"{type(self).__name__}() takes {len(names) - 1} or {len(names)} "
                f"values, got {len(data)}"
            )
        return dict(zip(names, data))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} pk={self.pk}>"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, self.__class__):
            return False
        if self.pk is None:
            return self is other
        return self.pk == other.pk

    def __hash__(self) -> int:
        # Changes when save() binds a key; rehash containers after saving
        if self.pk is None:
            return id(self)
        return hash((self.__class__.__name__, self.pk))

    # ── Schema ───────────────────────────────────────────────────────

    @property
    def pk(self) -> Any:
        """Value of the primary key field, ``None`` until saved."""
        cls = type(self)
        if not cls._fields:
            return None
        return self.__dict__.get(schema.primary_key(cls))

    def _bind_pk(self, value: Any) -> None:
        self.__dict__[schema.primary_key(type(self))] = value

    @classmethod
    def table_name(cls) -> str:
        return schema.table_name(cls)

    @classmethod
    def primary_key(cls) -> str:
        return schema.primary_key(cls)

    @classmethod
    def foreign_key(cls) -> str:
        return schema.foreign_key(cls)

    @classmethod
    def primary_key_type(cls, dialect: Union[Database, DatabaseAdapter, None] = None) -> str:
        return schema.primary_key_type(cls, cls._dialect(dialect))

    @classmethod
    def foreign_key_type(cls, dialect: Union[Database, DatabaseAdapter, None] = None) -> str:
        return schema.foreign_key_type(cls, cls._dialect(dialect))

    @classmethod
    def create_statements(cls, dialect: Union[Database, DatabaseAdapter, None] = None) -> List[str]:
        """CREATE TABLE statements for this model and its join tables."""
        return schema.create_table_statements(cls, cls._dialect(dialect))

    @classmethod
    def _dialect(cls, dialect: Union[Database, DatabaseAdapter, None]) -> DatabaseAdapter:
        if dialect is None:
            return cls._get_db().adapter
        return getattr(dialect, "adapter", dialect)

    # ── Class-level DB ───────────────────────────────────────────────

    @classmethod
    def _get_db(cls, db: Optional[Database] = None) -> Database:
        """Get database connection."""
        if db is not None:
            return db
        db = cls._db or ModelRegistry.get_database()
        if db is None:
            from ..db.engine import get_database
            db = get_database()
        return db

    # ── Finders ──────────────────────────────────────────────────────

    @classmethod
    async def find(
        cls,
        where: str = "",
        params: Optional[List[Any]] = None,
        db: Optional[Database] = None,
    ) -> List[Model]:
        """
        Load instances matching a raw filter.

        Usage:
            trees = await AppleTree.find("WHERE height > ?", [3])
        """
        return await cls._get_db(db).find(cls, where, params)

    @classmethod
    async def get(cls, pk: Any, db: Optional[Database] = None) -> Optional[Model]:
        """Load one instance by primary key."""
        db = cls._get_db(db)
        rows = await db.find(
            cls, f"WHERE {db.adapter.quote(cls.primary_key())} = ?", [pk]
        )
        return rows[0] if rows else None

    # ── Persistence ──────────────────────────────────────────────────

    async def save(self, db: Optional[Database] = None) -> Model:
        """
        Save instance (insert or update), then rewrite pending links.

        If the primary key is set and its row exists, updates. Otherwise
        inserts and binds the generated key. When any step fails the
        transaction rolls back and the previous key is restored.

        Raises:
            UnsupportedOperationFault: the model declares no fields
        """
        cls = type(self)
        if not cls._fields:
            raise UnsupportedOperationFault(cls.__name__, "save")

        db = self._get_db(db)
        previous_pk = self.pk
        try:
            await self._write(db, previous_pk)
        except Exception:
            self._bind_pk(previous_pk)
            raise

        logger.debug(f"Saved {cls.__name__}({self.pk})")
        return self

    async def _write(self, db: Database, previous_pk: Any) -> None:
        cls = type(self)
        q = db.adapter.quote
        pk_name = schema.primary_key(cls)
        table = q(schema.table_name(cls))
        columns = [name for name in cls._fields if name != pk_name]
        values = [self.__dict__.get(name) for name in columns]

        async with db.transaction():
            exists = False
            if previous_pk is not None:
                exists = bool(await db.find(cls, f"WHERE {q(pk_name)} = ?", [previous_pk]))

            if exists:
                if columns:
                    set_parts = ", ".join(f"{q(name)} = ?" for name in columns)
                    await db.execute(
                        f"UPDATE {table} SET {set_parts} WHERE {q(pk_name)} = ?",
                        [*values, previous_pk],
                    )
            else:
                if columns:
                    placeholders = ", ".join("?" for _ in columns)
                    sql = (
                        f"INSERT INTO {table} ({', '.join(q(c) for c in columns)}) "
                        f"VALUES ({placeholders})"
                    )
                else:
                    sql = db.adapter.empty_insert_sql(schema.table_name(cls))
                new_pk = await db.execute(sql, values)
                if new_pk is None:
                    new_pk = await db.last_inserted_key(cls)
                self._bind_pk(new_pk)

            for target, _kind in relations.foreign_items(cls):
                pending = self.__dict__.get(relations.accessor_name(cls, target))
                if pending is None:
                    continue
                await relations.unlink_all(db, self, target)
                await relations.link_all(db, self, target, pending)

    async def delete(self, db: Optional[Database] = None) -> None:
        """
        Remove every link of this instance, then its row.

        Raises:
            UnsupportedOperationFault: the model declares no fields
        """
        cls = type(self)
        if not cls._fields:
            raise UnsupportedOperationFault(cls.__name__, "delete")
        if self.pk is None:
            raise ValueError("Cannot delete unsaved instance")

        db = self._get_db(db)
        async with db.transaction():
            for target, _kind in relations.foreign_items(cls):
                await relations.unlink_all(db, self, target)
            await db.remove(
                cls, f"WHERE {db.adapter.quote(schema.primary_key(cls))} = ?", [self.pk]
            )
        logger.debug(f"Deleted {cls.__name__}({self.pk})")

    async def find_references(
        self,
        target: Union[Type[Model], str],
        extra: str = "",
        params: Optional[List[Any]] = None,
        db: Optional[Database] = None,
    ) -> bool:
        """
        Load related rows of ``target`` into the matching accessor.

        ``one_one`` / ``one_many`` accessors receive a single instance (or
        ``None``), the others a list.

        Returns:
            False when no relationship with ``target`` is declared.
        """
        cls = type(self)
        if isinstance(target, str):
            target = schema.resolve_model(target)
        kind = relations.kind_of(cls, target)
        if kind is None:
            return False

        result = await relations.find_related(
            self._get_db(db), cls, self.pk, target, extra, params
        )
        accessor = relations.accessor_name(cls, target)
        if kind.singular:
            self.__dict__[accessor] = result[0] if result else None
        else:
            self.__dict__[accessor] = result
        return True

    # ── Serialization ────────────────────────────────────────────────

    def to_dict(self, *, exclude: Optional[List[str]] = None) -> Dict[str, Any]:
        """Serialize model instance to dict."""
        exclude = set(exclude or [])
        result: Dict[str, Any] = {}
        for field_name in self._fields:
            if field_name in exclude:
                continue
            value = self.__dict__.get(field_name)
            if isinstance(value, (datetime.datetime, datetime.date)):
                value = value.isoformat()
            elif isinstance(value, decimal.Decimal):
                value = str(value)
            result[field_name] = value
        return result

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Model:
        """Create model instance from database row dict."""
        instance = cls.__new__(cls)
        for field_name in cls._fields:
            instance.__dict__[field_name] = row.get(field_name)
        return instance
