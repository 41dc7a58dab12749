"""
WebInk Model System: declarative entities with relationship accessors.

Usage:
    from webink.models import Model, Column, PrimaryKey

    class Wig(Model):
        ref = PrimaryKey()
        length = Column("INTEGER")

        class Meta:
            foreign = {"AppleTree": "one_many"}

Public API:
    - Model / ModelMeta: entity base class and its metaclass
    - Column, PrimaryKey, PRIMARY_KEY: field declarations
    - Relationship: relationship kinds
    - ModelRegistry: global model registry
    - schema / relations: catalog lookups and link maintenance
"""

from .base import Model, ModelMeta
from .fields import PRIMARY_KEY, Column, PrimaryKey, RelationAccessor
from .enums import Relationship
from .registry import ModelRegistry
from .naming import table_name_for, class_name_for
from . import schema, relations

__all__ = [
    "Model",
    "ModelMeta",
    "PRIMARY_KEY",
    "Column",
    "PrimaryKey",
    "RelationAccessor",
    "Relationship",
    "ModelRegistry",
    "table_name_for",
    "class_name_for",
    "schema",
    "relations",
]
