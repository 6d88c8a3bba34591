"""
Tests for BusSession with the dbus-next MessageBus mocked out.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from dbus_next import MessageType
from dbus_next.errors import AuthError

from dbus_explorer.bus.session import BusSession, Introspector, error_from_reply
from dbus_explorer.errors import (
    AccessDeniedError,
    ConnectionError,
    IntrospectionFailedError,
    IntrospectionTimeoutError,
    MalformedSchemaError,
    NotFoundError,
    NotIntrospectableError,
    UnreachableError,
    ValidationError,
)
from dbus_explorer.models import DiagnosticKind


def _reply(*body, error_name=None):
    reply = MagicMock()
    reply.message_type = MessageType.ERROR if error_name else MessageType.METHOD_RETURN
    reply.error_name = error_name
    reply.body = list(body)
    return reply


@pytest.fixture
def fake_bus():
    bus = MagicMock()
    bus.connected = True
    bus.unique_name = ":1.1"
    bus.call = AsyncMock(return_value=_reply("<node/>"))
    return bus


@pytest.fixture
def message_bus(fake_bus):
    with patch("dbus_explorer.bus.session.MessageBus") as cls:
        cls.return_value.connect = AsyncMock(return_value=fake_bus)
        yield cls


class TestConnect:
    @pytest.mark.asyncio
    async def test_context_manager_connects_and_closes(self, message_bus, fake_bus):
        async with BusSession(bus="session") as session:
            assert session.connected

        fake_bus.disconnect.assert_called_once()
        assert not session.connected

    @pytest.mark.asyncio
    async def test_address_passed_through(self, message_bus):
        async with BusSession(address="unix:path=/tmp/bus"):
            pass

        assert message_bus.call_args.kwargs["bus_address"] == "unix:path=/tmp/bus"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [FileNotFoundError("no socket"), AuthError("rejected"), EOFError()]
    )
    async def test_connect_failure(self, message_bus, error):
        message_bus.return_value.connect = AsyncMock(side_effect=error)

        with pytest.raises(ConnectionError) as exc_info:
            await BusSession().connect()

        assert exc_info.value.recoverable is False
        assert exc_info.value.cause is error

    @pytest.mark.asyncio
    async def test_call_without_connection(self):
        with pytest.raises(ConnectionError):
            await BusSession().introspect("org.example.Foo", "/")

    def test_satisfies_introspector_protocol(self):
        assert isinstance(BusSession(), Introspector)


class TestListServices:
    @pytest.mark.asyncio
    async def test_unique_names_filtered_and_sorted(self, message_bus, fake_bus):
        fake_bus.call.return_value = _reply(
            ["org.freedesktop.DBus", ":1.3", "org.b", "org.a", ":1.0"]
        )

        async with BusSession() as session:
            names = await session.list_services()

        assert names == ["org.a", "org.b", "org.freedesktop.DBus"]
        message = fake_bus.call.call_args.args[0]
        assert message.member == "ListNames"

    @pytest.mark.asyncio
    async def test_unique_names_kept_on_request(self, message_bus, fake_bus):
        fake_bus.call.return_value = _reply(["org.a", ":1.0"])

        async with BusSession(include_unique_names=True) as session:
            names = await session.list_services()

        assert names == [":1.0", "org.a"]

    @pytest.mark.asyncio
    async def test_error_reply_is_fatal(self, message_bus, fake_bus):
        fake_bus.call.return_value = _reply(
            "denied", error_name="org.freedesktop.DBus.Error.AccessDenied"
        )

        async with BusSession() as session:
            with pytest.raises(ConnectionError):
                await session.list_services()

    @pytest.mark.asyncio
    async def test_daemon_silence_is_fatal(self, message_bus, fake_bus):
        async def never(_message):
            await asyncio.sleep(5)

        fake_bus.call = AsyncMock(side_effect=never)

        async with BusSession(call_timeout=0.05) as session:
            with pytest.raises(ConnectionError):
                await session.list_services()


class TestIntrospect:
    @pytest.mark.asyncio
    async def test_returns_xml(self, message_bus, fake_bus):
        async with BusSession() as session:
            xml_text = await session.introspect("org.example.Foo", "/org/example")

        assert xml_text == "<node/>"
        message = fake_bus.call.call_args.args[0]
        assert message.destination == "org.example.Foo"
        assert message.path == "/org/example"
        assert message.interface == "org.freedesktop.DBus.Introspectable"
        assert message.member == "Introspect"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error_name, error_cls",
        [
            ("org.freedesktop.DBus.Error.AccessDenied", AccessDeniedError),
            ("org.freedesktop.DBus.Error.ServiceUnknown", UnreachableError),
            ("org.freedesktop.DBus.Error.NoReply", IntrospectionTimeoutError),
            ("org.freedesktop.DBus.Error.UnknownObject", NotFoundError),
            ("org.freedesktop.DBus.Error.UnknownMethod", NotIntrospectableError),
            ("com.example.Error.Custom", IntrospectionFailedError),
        ],
    )
    async def test_error_replies_mapped(self, message_bus, fake_bus, error_name, error_cls):
        fake_bus.call.return_value = _reply("details", error_name=error_name)

        async with BusSession() as session:
            with pytest.raises(error_cls) as exc_info:
                await session.introspect("org.example.Foo", "/")

        assert exc_info.value.context.error_name == error_name
        assert exc_info.value.context.object_path == "/"

    @pytest.mark.asyncio
    async def test_call_timeout(self, message_bus, fake_bus):
        async def slow(_message):
            await asyncio.sleep(5)

        fake_bus.call = AsyncMock(side_effect=slow)

        async with BusSession(call_timeout=0.05) as session:
            with pytest.raises(IntrospectionTimeoutError):
                await session.introspect("org.example.Foo", "/")

    @pytest.mark.asyncio
    async def test_lost_connection(self, message_bus, fake_bus):
        fake_bus.call = AsyncMock(side_effect=BrokenPipeError("gone"))

        async with BusSession() as session:
            with pytest.raises(ConnectionError):
                await session.introspect("org.example.Foo", "/")

    @pytest.mark.asyncio
    async def test_non_string_body(self, message_bus, fake_bus):
        fake_bus.call.return_value = _reply(42)

        async with BusSession() as session:
            with pytest.raises(MalformedSchemaError):
                await session.introspect("org.example.Foo", "/")

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, message_bus):
        async with BusSession() as session:
            with pytest.raises(ValidationError):
                await session.introspect("org.example.Foo", "relative/path")


class TestGetNameOwner:
    @pytest.mark.asyncio
    async def test_owner(self, message_bus, fake_bus):
        fake_bus.call.return_value = _reply(":1.42")

        async with BusSession() as session:
            assert await session.get_name_owner("org.example.Foo") == ":1.42"

    @pytest.mark.asyncio
    async def test_no_owner(self, message_bus, fake_bus):
        fake_bus.call.return_value = _reply(
            "no owner", error_name="org.freedesktop.DBus.Error.NameHasNoOwner"
        )

        async with BusSession() as session:
            assert await session.get_name_owner("org.example.Foo") is None


class TestErrorFromReply:
    def test_known_name_uses_class_message(self):
        error = error_from_reply("org.freedesktop.DBus.Error.AccessDenied", "Rejected send")

        assert isinstance(error, AccessDeniedError)
        assert error.message == AccessDeniedError.default_message
        assert error.context.extra["bus_message"] == "Rejected send"
        assert error.to_diagnostic().kind is DiagnosticKind.ACCESS_DENIED

    def test_unknown_name_is_preserved(self):
        error = error_from_reply("com.example.Error.Odd", "strange", service="com.example")

        assert isinstance(error, IntrospectionFailedError)
        assert "com.example.Error.Odd" in error.message
        diagnostic = error.to_diagnostic()
        assert diagnostic.kind is DiagnosticKind.FAILED
        assert diagnostic.error_name == "com.example.Error.Odd"
