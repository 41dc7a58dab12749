"""
WebInk - async active-record ORM for SQLite and MySQL.

Integration of:
- Models: declarative entities with relationship accessors
- Database: async repository over aiosqlite / aiomysql
- Faults: structured error handling with fault domains
- Config: layered database configuration
"""

__version__ = "0.2.0"

from .config import DatabaseConfig, ConfigLoader

from .faults import (
    Fault,
    FaultDomain,
    Severity,
    SchemaFault,
    UnknownModelFault,
    MissingFieldFault,
    UnsupportedOperationFault,
    NotConnectedFault,
    DatabaseConfigFault,
    DatabaseConnectionFault,
    QueryFault,
)

from .models import (
    Model,
    Column,
    PrimaryKey,
    PRIMARY_KEY,
    Relationship,
    ModelRegistry,
)

from .db import (
    Database,
    create_database,
    get_database,
    set_database,
    drop_database,
)

__all__ = [
    "__version__",
    "DatabaseConfig",
    "ConfigLoader",
    "Fault",
    "FaultDomain",
    "Severity",
    "SchemaFault",
    "UnknownModelFault",
    "MissingFieldFault",
    "UnsupportedOperationFault",
    "NotConnectedFault",
    "DatabaseConfigFault",
    "DatabaseConnectionFault",
    "QueryFault",
    "Model",
    "Column",
    "PrimaryKey",
    "PRIMARY_KEY",
    "Relationship",
    "ModelRegistry",
    "Database",
    "create_database",
    "get_database",
    "set_database",
    "drop_database",
]
