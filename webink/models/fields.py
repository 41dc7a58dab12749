"""
WebInk Model Fields: column and relationship descriptors.

Columns are declared either as class attributes::

    class Wig(Model):
        ref = PrimaryKey()
        length = Column("INTEGER")

or through a ``fields`` mapping of name → declaration, where a declaration is the
``PRIMARY_KEY`` sentinel or a list of SQL type/constraint tokens::

    class Wig(Model):
        fields = {"ref": PRIMARY_KEY, "length": ["INTEGER"]}

The metaclass installs one ``RelationAccessor`` per ``foreign`` entry,
named after the related model's table.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Union

if TYPE_CHECKING:
    from ..db.backends.base import DatabaseAdapter

__all__ = [
    "PRIMARY_KEY",
    "Column",
    "PrimaryKey",
    "RelationAccessor",
]

PRIMARY_KEY = "PRIMARY KEY"


class Column:
    """
    A table column.

    Values live in the instance ``__dict__`` under the field name, so rows
    can be bound directly without going through ``__set__``.
    """

    primary_key = False

    def __init__(self, *tokens: str):
        self.tokens: List[str] = list(tokens)
        self.name: Optional[str] = None

    @classmethod
    def from_declaration(cls, declaration: Union[str, Sequence[str], "Column"]) -> "Column":
        """Build a column from a ``fields`` mapping entry."""
        if isinstance(declaration, Column):
            return declaration
        if isinstance(declaration, str):
            declaration = [declaration]
        if list(declaration) == [PRIMARY_KEY]:
            return PrimaryKey()
        return cls(*declaration)

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            return self
        return instance.__dict__.get(self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        instance.__dict__[self.name] = value

    def sql_column_def(self, dialect: DatabaseAdapter) -> str:
        """Column definition fragment for CREATE TABLE."""
        return " ".join([dialect.quote(self.name), *self.tokens])

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name} {self.tokens}>"


class PrimaryKey(Column):
    """
    The autoincrementing primary key.

    Read-only from the outside: the key is bound by ``Model.save()`` or
    loaded from a row.
    """

    primary_key = True

    def __init__(self):
        super().__init__(PRIMARY_KEY)

    def __set__(self, instance: Any, value: Any) -> None:
        raise AttributeError(
            f"Primary key '{self.name}' of {type(instance).__name__} is read-only"
        )

    def sql_column_def(self, dialect: DatabaseAdapter) -> str:
        return " ".join(dialect.primary_key_autoincrement(self.name))


class RelationAccessor:
    """
    Slot holding pending or loaded related entities.

    ``None`` means untouched (``save()`` leaves the links alone); an empty
    list clears every link on the next save.
    """

    def __init__(self, target: str, kind: str):
        self.target = target
        self.kind = kind
        self.name: Optional[str] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            return self
        return instance.__dict__.get(self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        instance.__dict__[self.name] = value

    def __repr__(self) -> str:
        return f"<RelationAccessor {self.name} -> {self.target} ({self.kind})>"
