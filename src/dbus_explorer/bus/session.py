"""BusSession - The only component that talks to the message bus.

Everything above this module depends on the ``Introspector`` protocol
rather than on dbus-next directly, so the tree walker can be driven by an
in-memory mock in tests.

Usage::

    async with BusSession(bus="system") as session:
        names = await session.list_services()
        xml = await session.introspect("org.freedesktop.NetworkManager", "/")
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, runtime_checkable

from dbus_next import BusType, Message, MessageType
from dbus_next.aio import MessageBus
from dbus_next.errors import AuthError, InvalidAddressError

from dbus_explorer.bus.names import validate_object_path, validate_service_name
from dbus_explorer.errors import (
    AccessDeniedError,
    ConnectionError,
    ErrorCode,
    IntrospectionError,
    IntrospectionFailedError,
    IntrospectionTimeoutError,
    MalformedSchemaError,
    NotFoundError,
    NotIntrospectableError,
    UnreachableError,
)

logger = logging.getLogger(__name__)

BUS_NAME = "org.freedesktop.DBus"
BUS_PATH = "/org/freedesktop/DBus"
INTROSPECTABLE_INTERFACE = "org.freedesktop.DBus.Introspectable"

_ERROR_PREFIX = "org.freedesktop.DBus.Error."

# D-Bus error name -> per-object error class
ERROR_NAME_MAP: dict[str, type[IntrospectionError]] = {
    _ERROR_PREFIX + "AccessDenied": AccessDeniedError,
    _ERROR_PREFIX + "AuthFailed": AccessDeniedError,
    _ERROR_PREFIX + "InteractiveAuthorizationRequired": AccessDeniedError,
    _ERROR_PREFIX + "ServiceUnknown": UnreachableError,
    _ERROR_PREFIX + "NameHasNoOwner": UnreachableError,
    _ERROR_PREFIX + "Disconnected": UnreachableError,
    _ERROR_PREFIX + "NoServer": UnreachableError,
    _ERROR_PREFIX + "NoReply": IntrospectionTimeoutError,
    _ERROR_PREFIX + "Timeout": IntrospectionTimeoutError,
    _ERROR_PREFIX + "TimedOut": IntrospectionTimeoutError,
    _ERROR_PREFIX + "UnknownObject": NotFoundError,
    _ERROR_PREFIX + "UnknownMethod": NotIntrospectableError,
    _ERROR_PREFIX + "UnknownInterface": NotIntrospectableError,
    _ERROR_PREFIX + "NotSupported": NotIntrospectableError,
}


@runtime_checkable
class Introspector(Protocol):
    """Capability the tree walker needs from a bus connection."""

    async def list_services(self) -> list[str]:
        """Return registered service names, sorted lexicographically.

        Raises:
            ConnectionError: If the bus is unreachable.
        """
        ...

    async def introspect(self, service: str, path: str) -> str:
        """Return the raw introspection XML of one object.

        Raises:
            IntrospectionError: A per-object failure (access denied, timeout...).
            ConnectionError: If the bus itself is gone.
        """
        ...


def error_from_reply(
    error_name: str | None,
    message: str | None,
    service: str | None = None,
    object_path: str | None = None,
) -> IntrospectionError:
    """Map a D-Bus error reply to the matching per-object error."""
    error_cls = ERROR_NAME_MAP.get(error_name or "", IntrospectionFailedError)
    if error_cls is IntrospectionFailedError:
        text = f"Introspection failed: {error_name}: {message}" if message else None
    else:
        # Keep the class default so the kind reads the same for every service
        text = None
    err = error_cls(text, service=service, object_path=object_path, error_name=error_name)
    if message:
        err.context.extra["bus_message"] = message
    return err


class BusSession:
    """Connection to a message bus daemon.

    Args:
        bus: "system" or "session". Ignored when ``address`` is given.
        address: Explicit bus address (e.g. "unix:path=/run/dbus/system_bus_socket").
        call_timeout: Seconds to wait for each bus call.
        include_unique_names: Whether list_services keeps ":1.42"-style names.
    """

    def __init__(
        self,
        bus: str = "system",
        address: str | None = None,
        call_timeout: float = 1.0,
        include_unique_names: bool = False,
    ) -> None:
        self.bus = bus
        self.address = address
        self.call_timeout = call_timeout
        self.include_unique_names = include_unique_names
        self._bus: MessageBus | None = None

    @property
    def connected(self) -> bool:
        return self._bus is not None and self._bus.connected

    async def connect(self) -> BusSession:
        """Open the connection and authenticate with the bus daemon."""
        if self.connected:
            return self

        bus_type = BusType.SESSION if self.bus == "session" else BusType.SYSTEM
        target = self.address or f"{self.bus} bus"
        logger.debug("Connecting to %s", target)

        try:
            self._bus = await MessageBus(bus_address=self.address, bus_type=bus_type).connect()
        except (OSError, EOFError, AuthError, InvalidAddressError) as e:
            raise ConnectionError(
                f"Could not connect to the {target}: {e}",
                cause=e,
                address=self.address,
                bus=self.bus,
            ) from e

        logger.info("Connected to %s as %s", target, self._bus.unique_name)
        return self

    def close(self) -> None:
        if self._bus is not None:
            self._bus.disconnect()
            self._bus = None

    async def __aenter__(self) -> BusSession:
        return await self.connect()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    async def _call(self, message: Message) -> Message:
        if not self.connected:
            raise ConnectionError("Not connected to the message bus")
        assert self._bus is not None

        try:
            return await asyncio.wait_for(self._bus.call(message), timeout=self.call_timeout)
        except asyncio.TimeoutError:
            raise IntrospectionTimeoutError(
                f"No reply within {self.call_timeout}s",
                service=message.destination,
                object_path=message.path,
            ) from None
        except (OSError, EOFError) as e:
            raise ConnectionError(
                f"Lost connection to the message bus: {e}",
                error_code=ErrorCode.CONNECTION_LOST,
                cause=e,
            ) from e

    async def list_services(self) -> list[str]:
        """List well-known service names registered on the bus, sorted."""
        try:
            reply = await self._call(
                Message(
                    destination=BUS_NAME,
                    path=BUS_PATH,
                    interface=BUS_NAME,
                    member="ListNames",
                )
            )
        except IntrospectionTimeoutError as e:
            raise ConnectionError("Bus daemon did not answer ListNames", cause=e) from e

        if reply.message_type == MessageType.ERROR:
            raise ConnectionError(
                f"Failed to list D-Bus names: {reply.error_name}",
                error_name=reply.error_name,
            )

        names = list(reply.body[0]) if reply.body else []
        if not self.include_unique_names:
            names = [n for n in names if not n.startswith(":")]

        logger.debug("Bus reports %d service names", len(names))
        return sorted(names)

    async def get_name_owner(self, service: str) -> str | None:
        """Return the unique connection name owning ``service``, if any."""
        validate_service_name(service)
        try:
            reply = await self._call(
                Message(
                    destination=BUS_NAME,
                    path=BUS_PATH,
                    interface=BUS_NAME,
                    member="GetNameOwner",
                    signature="s",
                    body=[service],
                )
            )
        except IntrospectionTimeoutError:
            logger.debug("GetNameOwner timed out for %s", service)
            return None

        if reply.message_type == MessageType.ERROR:
            logger.debug("GetNameOwner failed for %s: %s", service, reply.error_name)
            return None
        return reply.body[0] if reply.body else None

    async def introspect(self, service: str, path: str) -> str:
        """Fetch the introspection XML of ``path`` on ``service``."""
        validate_service_name(service)
        validate_object_path(path)

        reply = await self._call(
            Message(
                destination=service,
                path=path,
                interface=INTROSPECTABLE_INTERFACE,
                member="Introspect",
            )
        )

        if reply.message_type == MessageType.ERROR:
            text = reply.body[0] if reply.body and isinstance(reply.body[0], str) else None
            raise error_from_reply(reply.error_name, text, service=service, object_path=path)

        if not reply.body or not isinstance(reply.body[0], str):
            raise MalformedSchemaError(
                "Introspect reply did not carry a string",
                service=service,
                object_path=path,
            )
        return reply.body[0]
