"""dbus-explorer error handling.

Provides the exception hierarchy shared by the bus session, the schema
decoder and the tree walker:

- ConnectionError: the bus cannot be reached, fatal to an exploration
- IntrospectionError and subclasses: per-object failures, recorded as
  diagnostics and never propagated past the walker
- ValidationError / ConfigValidationError: bad caller input
"""

from dbus_explorer.errors.base import (
    AccessDeniedError,
    ConfigValidationError,
    ConnectionError,
    ErrorCode,
    ErrorContext,
    ExplorerError,
    IntrospectionError,
    IntrospectionFailedError,
    IntrospectionTimeoutError,
    MalformedSchemaError,
    NotFoundError,
    NotIntrospectableError,
    UnreachableError,
    ValidationError,
)

__all__ = [
    "ExplorerError",
    "ErrorCode",
    "ErrorContext",
    # Fatal
    "ConnectionError",
    # Per-object
    "IntrospectionError",
    "AccessDeniedError",
    "UnreachableError",
    "IntrospectionTimeoutError",
    "NotFoundError",
    "NotIntrospectableError",
    "IntrospectionFailedError",
    "MalformedSchemaError",
    # Input
    "ValidationError",
    "ConfigValidationError",
]
