"""
WebInk Model Enums: relationship kinds.

``X.foreign[Y] = kind`` is read from X's side:

    ONE_MANY   one Y has many X; X's table carries Y's foreign key
    MANY_ONE   one X has many Y; Y's table carries X's foreign key
    ONE_ONE    the table sorting first carries the other's foreign key
    MANY_MANY  a join table carries both foreign keys
"""

from __future__ import annotations

from enum import Enum
from typing import Union

__all__ = ["Relationship"]


class Relationship(str, Enum):
    """Cardinality between two models."""

    ONE_ONE = "one_one"
    ONE_MANY = "one_many"
    MANY_ONE = "many_one"
    MANY_MANY = "many_many"

    @property
    def singular(self) -> bool:
        """Whether the owner sees at most one related entity."""
        return self in (Relationship.ONE_ONE, Relationship.ONE_MANY)

    @classmethod
    def parse(cls, value: Union[str, "Relationship"]) -> "Relationship":
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())
