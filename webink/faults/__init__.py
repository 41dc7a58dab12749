"""
WebInk Faults - typed fault signals.

Every failure raised by the model and database layers is a ``Fault``:
a structured exception carrying a stable code, a domain and a severity.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain enumeration
- Severity: Severity levels
- Domain faults: SchemaFault, UnknownModelFault, MissingFieldFault,
  UnsupportedOperationFault, NotConnectedFault, DatabaseConfigFault,
  DatabaseConnectionFault, QueryFault
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    DatabaseConfigFault,
    ModelFault,
    SchemaFault,
    UnknownModelFault,
    MissingFieldFault,
    UnsupportedOperationFault,
    DatabaseFault,
    NotConnectedFault,
    DatabaseConnectionFault,
    QueryFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",

    # Config
    "ConfigFault",
    "ConfigInvalidFault",
    "DatabaseConfigFault",

    # Model
    "ModelFault",
    "SchemaFault",
    "UnknownModelFault",
    "MissingFieldFault",
    "UnsupportedOperationFault",

    # Database
    "DatabaseFault",
    "NotConnectedFault",
    "DatabaseConnectionFault",
    "QueryFault",
]
