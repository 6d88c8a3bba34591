"""dbus-explorer - Walk D-Bus services and their object trees.

Connects to a message bus, lists the registered services and introspects
every object each one exposes, producing a tree of objects, interfaces,
methods, properties and signals. Objects that cannot be read are kept in
the tree with a diagnostic instead of aborting the walk.

Quick Start:
    from dbus_explorer import BusSession, Explorer

    async with BusSession(bus="session") as session:
        explorer = Explorer(session)
        result = await explorer.explore_all()

    print(ConsoleReporter().report(result))
"""

from __future__ import annotations

# Bus access
from dbus_explorer.bus import BusSession, Introspector

# Configuration
from dbus_explorer.config import ExplorerConfig, load_config

# Errors
from dbus_explorer.errors import (
    AccessDeniedError,
    ConnectionError,
    ErrorCode,
    ExplorerError,
    IntrospectionError,
    IntrospectionTimeoutError,
    MalformedSchemaError,
    UnreachableError,
    ValidationError,
)

# Exploration
from dbus_explorer.exploration import (
    Deadline,
    ExplorationResult,
    Explorer,
    Failure,
    ServiceTree,
    TreeWalker,
)

# Core types
from dbus_explorer.models import (
    Argument,
    ArgDirection,
    DecodedNode,
    Diagnostic,
    DiagnosticKind,
    Interface,
    Method,
    ObjectNode,
    Property,
    PropertyAccess,
    Signal,
)

# Reporters
from dbus_explorer.reporting import ConsoleReporter, JSONReporter

# Schema
from dbus_explorer.schema import decode, encode, filter_interfaces

__version__ = "0.1.0"

__all__ = [
    # Bus
    "BusSession",
    "Introspector",
    # Config
    "ExplorerConfig",
    "load_config",
    # Errors
    "ExplorerError",
    "ErrorCode",
    "ConnectionError",
    "IntrospectionError",
    "AccessDeniedError",
    "UnreachableError",
    "IntrospectionTimeoutError",
    "MalformedSchemaError",
    "ValidationError",
    # Exploration
    "Explorer",
    "TreeWalker",
    "Deadline",
    "ExplorationResult",
    "ServiceTree",
    "Failure",
    # Models
    "Argument",
    "ArgDirection",
    "Method",
    "Property",
    "PropertyAccess",
    "Signal",
    "Interface",
    "DecodedNode",
    "ObjectNode",
    "Diagnostic",
    "DiagnosticKind",
    # Reporters
    "ConsoleReporter",
    "JSONReporter",
    # Schema
    "decode",
    "encode",
    "filter_interfaces",
]
