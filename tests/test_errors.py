"""Tests for the dbus-explorer error hierarchy."""

import pytest

from dbus_explorer.errors import (
    AccessDeniedError,
    ConfigValidationError,
    ConnectionError,
    ErrorCode,
    ErrorContext,
    ExplorerError,
    IntrospectionError,
    IntrospectionTimeoutError,
    MalformedSchemaError,
    NotFoundError,
    NotIntrospectableError,
    UnreachableError,
    ValidationError,
)
from dbus_explorer.models import DiagnosticKind


class TestErrorCode:
    @pytest.mark.parametrize(
        "code, category",
        [
            (ErrorCode.CONNECTION_FAILED, "connection"),
            (ErrorCode.ACCESS_DENIED, "introspection"),
            (ErrorCode.MALFORMED_SCHEMA, "schema"),
            (ErrorCode.INVALID_CONFIG, "validation"),
            (ErrorCode.UNKNOWN, "unknown"),
        ],
    )
    def test_category(self, code, category):
        assert code.category == category


class TestExplorerError:
    def test_default_message(self):
        error = ExplorerError()
        assert error.message == "An unexpected error occurred"
        assert error.error_code is ErrorCode.UNKNOWN

    def test_str_includes_code_and_location(self):
        error = AccessDeniedError(service="org.example.Foo", object_path="/secret")
        assert str(error) == (
            f"[E101] {AccessDeniedError.default_message} | at org.example.Foo:/secret"
        )

    def test_extra_context(self):
        error = ExplorerError("boom", attempt=3)
        assert error.context.extra == {"attempt": 3}

    def test_explicit_suggestions_replace_defaults(self):
        error = ConnectionError(suggestions=["Start the daemon"])
        assert error.suggestions == ["Start the daemon"]

    def test_format_verbose(self):
        error = AccessDeniedError(
            service="org.example.Foo",
            object_path="/",
            error_name="org.freedesktop.DBus.Error.AccessDenied",
        )
        text = error.format_verbose()

        assert text.startswith("Error [E101]")
        assert "Location: org.example.Foo:/" in text
        assert "D-Bus error: org.freedesktop.DBus.Error.AccessDenied" in text
        assert "Suggestions:" in text

    def test_to_dict(self):
        cause = OSError("socket closed")
        data = ConnectionError("lost", cause=cause).to_dict()

        assert data["error_code"] == "E001"
        assert data["error_type"] == "ConnectionError"
        assert data["recoverable"] is False
        assert data["cause"] == "socket closed"
        assert data["suggestions"]

    def test_context_location(self):
        assert ErrorContext().format_location() == "unknown location"
        assert ErrorContext(service="a.b").format_location() == "a.b"
        assert ErrorContext(object_path="/x").format_location() == "/x"


class TestIntrospectionErrors:
    @pytest.mark.parametrize(
        "error_cls, kind",
        [
            (AccessDeniedError, DiagnosticKind.ACCESS_DENIED),
            (UnreachableError, DiagnosticKind.UNREACHABLE),
            (IntrospectionTimeoutError, DiagnosticKind.TIMEOUT),
            (NotFoundError, DiagnosticKind.NOT_FOUND),
            (NotIntrospectableError, DiagnosticKind.NOT_INTROSPECTABLE),
            (IntrospectionError, DiagnosticKind.FAILED),
        ],
    )
    def test_diagnostic_kind(self, error_cls, kind):
        diagnostic = error_cls().to_diagnostic()

        assert diagnostic.kind is kind
        assert diagnostic.message == error_cls.default_message

    def test_recoverable_by_default(self):
        assert AccessDeniedError().recoverable is True
        assert ConnectionError().recoverable is False

    def test_malformed_keeps_detail(self):
        error = MalformedSchemaError("mismatched tag: line 1, column 10")

        assert error.detail == "mismatched tag: line 1, column 10"
        assert error.message == "XML parsing failed: mismatched tag: line 1, column 10"
        assert error.to_diagnostic().kind is DiagnosticKind.MALFORMED


class TestValidationErrors:
    def test_field_and_value(self):
        error = ValidationError("bad path", field="path", value="org")
        assert error.field == "path"
        assert error.value == "org"

    def test_config_validation_is_validation(self):
        error = ConfigValidationError("bad bus", field="bus", value="x")
        assert isinstance(error, ValidationError)
        assert error.error_code is ErrorCode.INVALID_CONFIG
