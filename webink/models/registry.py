"""
WebInk Model Registry: global registry for all Model subclasses.

Tracks all concrete models, resolves relationship names to model classes,
creates and drops their tables, and holds the database bound to models.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Type, TYPE_CHECKING

from ..faults.domains import UnknownModelFault
from .naming import class_name_for, table_name_for

if TYPE_CHECKING:
    from ..db.engine import Database
    from .base import Model

logger = logging.getLogger("webink.models.registry")

__all__ = ["ModelRegistry"]


class ModelRegistry:
    """
    Global registry for all Model subclasses.

    Relationship declarations name their targets by string, so models may
    reference classes defined later; names resolve on first use.
    """

    _models: Dict[str, Type[Model]] = {}
    _db: Optional[Database] = None

    @classmethod
    def register(cls, model_cls: Type[Model]) -> None:
        """Register a model class."""
        name = model_cls.__name__
        if name in cls._models and cls._models[name] is not model_cls:
            logger.debug(f"Model '{name}' re-registered, replacing previous class")
        cls._models[name] = model_cls

    @classmethod
    def get(cls, name: str) -> Optional[Type[Model]]:
        """Get model class by exact class name."""
        return cls._models.get(name)

    @classmethod
    def resolve(cls, name: str) -> Type[Model]:
        """
        Resolve a class name or table name to a registered model.

        Matching is case-insensitive: ``"AppleTree"``, ``"appletree"`` and
        ``"apple_tree"`` all resolve to ``AppleTree``.

        Raises:
            UnknownModelFault: nothing registered under that name
        """
        model_cls = cls._models.get(name) or cls._models.get(class_name_for(name))
        if model_cls is not None:
            return model_cls

        wanted = name.lower()
        for model_name, model_cls in cls._models.items():
            if wanted in (model_name.lower(), table_name_for(model_name)):
                return model_cls
        raise UnknownModelFault(name)

    @classmethod
    def all_models(cls) -> Dict[str, Type[Model]]:
        """Get all registered models."""
        return dict(cls._models)

    @classmethod
    def set_database(cls, db: Optional[Database]) -> None:
        """Bind a database to every registered model."""
        cls._db = db
        for model_cls in cls._models.values():
            model_cls._db = db

    @classmethod
    def get_database(cls) -> Optional[Database]:
        return cls._db

    @classmethod
    def table_names(cls) -> List[str]:
        """Tables owned by registered models, join tables included."""
        from .schema import table_name
        from .relations import foreign_items, join_table_name
        from .enums import Relationship

        names: List[str] = []
        for model_cls in cls._models.values():
            if not model_cls._fields:
                continue
            names.append(table_name(model_cls))
            for target, kind in foreign_items(model_cls):
                if kind is Relationship.MANY_MANY:
                    jt = join_table_name(model_cls, target)
                    if jt not in names:
                        names.append(jt)
        return names

    @classmethod
    async def create_tables(cls, db: Optional[Database] = None) -> List[str]:
        """Create tables for all registered models with field declarations."""
        target_db = cls._target(db)

        statements: List[str] = []
        for model_cls in cls._models.values():
            if not model_cls._fields:
                continue
            for sql in model_cls.create_statements(target_db):
                await target_db.execute(sql)
                statements.append(sql)

        logger.info(f"Created {len(statements)} table(s)")
        return statements

    @classmethod
    async def drop_tables(cls, db: Optional[Database] = None) -> List[str]:
        """Drop all registered model tables (dangerous!)."""
        target_db = cls._target(db)
        q = target_db.adapter.quote

        statements: List[str] = []
        for table in reversed(cls.table_names()):
            sql = f"DROP TABLE IF EXISTS {q(table)}"
            await target_db.execute(sql)
            statements.append(sql)

        return statements

    @classmethod
    def _target(cls, db: Optional[Database]) -> Database:
        if db is not None:
            return db
        if cls._db is not None:
            return cls._db
        from ..db.engine import get_database
        return get_database()

    @classmethod
    def reset(cls) -> None:
        """Clear registry (for testing)."""
        cls._models.clear()
        cls._db = None
