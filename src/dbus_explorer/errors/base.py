"""Exception hierarchy for dbus-explorer.

Two families of failure exist:

- ``ConnectionError``: the message bus itself is gone. Nothing more can be
  explored, so it propagates out of every public call.
- ``IntrospectionError`` and subclasses: one object could not be read. The
  tree walker turns these into diagnostics on a placeholder and carries on.

Every error carries an ``ErrorCode``, an ``ErrorContext`` naming the service
and object path involved, and a list of suggestions for the operator::

    try:
        result = await explorer.explore_all()
    except ConnectionError as e:
        print(e.format_verbose())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from dbus_explorer.models import Diagnostic, DiagnosticKind

_CATEGORIES = ((100, "connection"), (200, "introspection"), (300, "schema"), (400, "validation"))


class ErrorCode(Enum):
    """Stable error codes, grouped by hundreds.

    E0xx bus connection, E1xx per-object introspection, E2xx introspection
    schema, E3xx caller input and configuration, E9xx anything else.
    """

    CONNECTION_FAILED = "E001"
    CONNECTION_LOST = "E002"

    ACCESS_DENIED = "E101"
    UNREACHABLE = "E102"
    INTROSPECTION_TIMEOUT = "E103"
    OBJECT_NOT_FOUND = "E104"
    NOT_INTROSPECTABLE = "E105"
    INTROSPECTION_FAILED = "E106"

    MALFORMED_SCHEMA = "E201"

    VALIDATION_FAILED = "E301"
    INVALID_CONFIG = "E302"

    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        number = int(self.value.lstrip("E"))
        for upper, name in _CATEGORIES:
            if number < upper:
                return name
        return "unknown"


@dataclass
class ErrorContext:
    """Where on the bus an error happened.

    Attributes:
        service: Bus name being explored.
        object_path: Object path being introspected.
        error_name: D-Bus error name taken from an error reply.
        extra: Anything else worth reporting (bus message, address...).
        timestamp: When the error was raised.
    """

    service: str | None = None
    object_path: str | None = None
    error_name: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"timestamp": self.timestamp.isoformat(), "extra": self.extra}
        for key in ("service", "object_path", "error_name"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    def format_location(self) -> str:
        """``service:path``, or whichever half is known."""
        known = [part for part in (self.service, self.object_path) if part]
        return ":".join(known) if known else "unknown location"


class ExplorerError(Exception):
    """Root of every error raised by dbus-explorer.

    Attributes:
        message: What went wrong, in one line.
        error_code: The class's ErrorCode unless overridden.
        context: Service, object path and D-Bus error name.
        cause: Lower-level exception this one wraps, if any.
        recoverable: False when the exploration cannot continue.
        suggestions: Steps the operator can take.
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        recoverable: bool = True,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        if error_code is not None:
            self.error_code = error_code
        self.context = context if context is not None else ErrorContext()
        self.context.extra.update(extra_context)
        self.cause = cause
        self.recoverable = recoverable
        self._suggestions = suggestions
        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        if self._suggestions is None:
            return list(self.default_suggestions)
        return self._suggestions

    def _location(self) -> str | None:
        location = self.context.format_location()
        return None if location == "unknown location" else location

    def __str__(self) -> str:
        text = f"[{self.error_code.value}] {self.message}"
        location = self._location()
        return f"{text} | at {location}" if location else text

    def format_verbose(self) -> str:
        """Multi-line rendering for the CLI: message, location, bus error, suggestions."""
        lines = [f"Error [{self.error_code.value}]: {self.message}", ""]
        location = self._location()
        if location:
            lines.append(f"Location: {location}")
        if self.context.error_name:
            lines.append(f"D-Bus error: {self.context.error_name}")
        if self.suggestions:
            lines += ["", "Suggestions:"]
            lines += [f"  - {s}" for s in self.suggestions]
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.error_code.value,
            "error_type": type(self).__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": None if self.cause is None else str(self.cause),
        }


class ConnectionError(ExplorerError):
    """The message bus could not be reached.

    This is the only error that aborts an exploration. Common causes:
    - No bus daemon listening on the configured address
    - Socket permissions deny the connection
    - Authentication with the bus daemon failed
    - The connection dropped in the middle of a walk
    """

    error_code = ErrorCode.CONNECTION_FAILED
    default_message = "Failed to connect to the message bus"
    default_suggestions = [
        "Verify the bus daemon is running (try: busctl list)",
        "Check DBUS_EXPLORER_BUS and DBUS_EXPLORER_BUS_ADDRESS",
        "For the session bus, make sure DBUS_SESSION_BUS_ADDRESS is exported",
    ]

    def __init__(self, message: str | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


class IntrospectionError(ExplorerError):
    """Base class for failures scoped to a single object.

    The tree walker catches these and turns them into diagnostics via
    ``to_diagnostic()``; the offending object becomes a placeholder.
    """

    error_code = ErrorCode.INTROSPECTION_FAILED
    default_message = "Introspection failed"
    kind: DiagnosticKind = DiagnosticKind.FAILED

    def __init__(
        self,
        message: str | None = None,
        service: str | None = None,
        object_path: str | None = None,
        error_name: str | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", None) or ErrorContext()
        context.service = context.service or service
        context.object_path = context.object_path or object_path
        context.error_name = context.error_name or error_name
        super().__init__(message, context=context, **kwargs)

    def to_diagnostic(self) -> Diagnostic:
        """Convert this error into the diagnostic attached to a placeholder."""
        return Diagnostic(
            kind=self.kind,
            message=self.message,
            error_name=self.context.error_name,
        )


class AccessDeniedError(IntrospectionError):
    """The bus policy refused the introspection request."""

    error_code = ErrorCode.ACCESS_DENIED
    default_message = "Access denied - not authorized to introspect this object"
    default_suggestions = [
        "Run the explorer as a user permitted by the bus policy",
        "Check the service's D-Bus policy files under /usr/share/dbus-1",
    ]
    kind = DiagnosticKind.ACCESS_DENIED


class UnreachableError(IntrospectionError):
    """The service went away or never had an owner."""

    error_code = ErrorCode.UNREACHABLE
    default_message = "Service is unreachable"
    kind = DiagnosticKind.UNREACHABLE


class IntrospectionTimeoutError(IntrospectionError):
    """The object did not answer in time, or the exploration deadline passed."""

    error_code = ErrorCode.INTROSPECTION_TIMEOUT
    default_message = "Introspection timed out"
    default_suggestions = [
        "Increase DBUS_EXPLORER_CALL_TIMEOUT",
        "Lower DBUS_EXPLORER_MAX_IN_FLIGHT for slow services",
    ]
    kind = DiagnosticKind.TIMEOUT


class NotFoundError(IntrospectionError):
    """The object path does not exist on the service."""

    error_code = ErrorCode.OBJECT_NOT_FOUND
    default_message = "Object does not exist"
    kind = DiagnosticKind.NOT_FOUND


class NotIntrospectableError(IntrospectionError):
    """The object exists but does not implement Introspect."""

    error_code = ErrorCode.NOT_INTROSPECTABLE
    default_message = "Object does not support introspection"
    kind = DiagnosticKind.NOT_INTROSPECTABLE


class IntrospectionFailedError(IntrospectionError):
    """Any other error reply; the D-Bus error name is preserved."""


class MalformedSchemaError(IntrospectionError):
    """The introspection document is not well-formed or breaks the schema."""

    error_code = ErrorCode.MALFORMED_SCHEMA
    default_message = "Malformed introspection document"
    kind = DiagnosticKind.MALFORMED

    def __init__(self, detail: str, **kwargs: Any) -> None:
        self.detail = detail
        super().__init__(f"XML parsing failed: {detail}", **kwargs)


class ValidationError(ExplorerError):
    """A service name or object path supplied by the caller is invalid."""

    error_code = ErrorCode.VALIDATION_FAILED
    default_message = "Invalid input provided"

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message, **kwargs)


class ConfigValidationError(ValidationError):
    """A configuration value failed validation."""

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid configuration"
    default_suggestions = [
        "Check the YAML config file and DBUS_EXPLORER_* environment variables",
    ]
