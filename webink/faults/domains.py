"""
WebInk Faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- MODEL faults (schema declarations, entity construction)
- DATABASE faults (connection lifecycle, query execution)
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Invalid config value for '{key}': {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


class DatabaseConfigFault(ConfigFault):
    """Database configuration names no supported dialect."""

    def __init__(self, url: str, reason: str, **kwargs):
        super().__init__(
            code="DB_CONFIG_INVALID",
            message=f"Database undefined ({url}): {reason}",
            metadata={"url": url, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# MODEL Faults
# ============================================================================

class ModelFault(Fault):
    """Base class for model faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        retryable: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.MODEL,
            severity=severity,
            retryable=retryable,
            metadata=metadata,
        )


class SchemaFault(ModelFault):
    """Model schema declaration is inconsistent."""

    def __init__(self, table: str, reason: str, **kwargs):
        super().__init__(
            code=kwargs.pop("code", "SCHEMA_FAULT"),
            message=kwargs.pop("message", f"Schema error for table '{table}': {reason}"),
            metadata={"table": table, "reason": reason, **kwargs.get("metadata", {})},
        )


class UnknownModelFault(SchemaFault):
    """Model name does not match any registered model."""

    def __init__(self, model_name: str, **kwargs):
        super().__init__(
            table=model_name,
            reason="not registered",
            code="MODEL_NOT_FOUND",
            message=f"Model '{model_name}' not found in ModelRegistry",
            metadata={"model": model_name, **kwargs.get("metadata", {})},
        )


class MissingFieldFault(ModelFault):
    """Constructor data omits a required field."""

    def __init__(self, model_name: str, field_name: str, **kwargs):
        super().__init__(
            code="MISSING_FIELD",
            message=f"Model '{model_name}' cannot be loaded, argument missing: {field_name}",
            metadata={"model": model_name, "field": field_name, **kwargs.get("metadata", {})},
        )


class UnsupportedOperationFault(ModelFault):
    """Operation needs field declarations the model does not have."""

    def __init__(self, model_name: str, operation: str, **kwargs):
        super().__init__(
            code="UNSUPPORTED_OPERATION",
            message=f"Cannot {operation} '{model_name}' without field definitions",
            metadata={"model": model_name, "operation": operation, **kwargs.get("metadata", {})},
        )


# ============================================================================
# DATABASE Faults
# ============================================================================

class DatabaseFault(Fault):
    """Base class for connection and query faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        retryable: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.DATABASE,
            severity=severity,
            retryable=retryable,
            metadata=metadata,
        )


class NotConnectedFault(DatabaseFault):
    """Database used before connecting, after closing, or never created."""

    def __init__(self, reason: str = "No Database found. Create one first", **kwargs):
        super().__init__(
            code="DB_NOT_CONNECTED",
            message=reason,
            metadata={"reason": reason, **kwargs.get("metadata", {})},
        )


class DatabaseConnectionFault(DatabaseFault):
    """Database connection failed."""

    def __init__(self, url: str, reason: str, **kwargs):
        super().__init__(
            code="DB_CONNECTION_FAILED",
            message=f"Database connection failed ({url}): {reason}",
            severity=Severity.FATAL,
            metadata={"url": url, "reason": reason, **kwargs.get("metadata", {})},
        )


class QueryFault(DatabaseFault):
    """Query execution failed."""

    def __init__(self, operation: str, reason: str, **kwargs):
        super().__init__(
            code="QUERY_FAILED",
            message=f"Query ({operation}) failed: {reason}",
            metadata={"operation": operation, "reason": reason, **kwargs.get("metadata", {})},
        )
