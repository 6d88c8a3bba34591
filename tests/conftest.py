"""Pytest fixtures for dbus-explorer tests."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from dbus_explorer.errors import ConnectionError, IntrospectionError


def node_xml(
    *children: str,
    interfaces: dict[str, str] | None = None,
    name: str | None = None,
) -> str:
    """Build a minimal introspection document.

    Args:
        children: Child node names.
        interfaces: Interface name -> inner XML (methods, properties...).
        name: Optional ``name`` attribute for the root node.
    """
    parts = [f'<node name="{name}">' if name else "<node>"]
    for iface, body in (interfaces or {}).items():
        parts.append(f'<interface name="{iface}">{body}</interface>')
    for child in children:
        parts.append(f'<node name="{child}"/>')
    parts.append("</node>")
    return "".join(parts)


STANDARD_BLOCK = {
    "org.freedesktop.DBus.Introspectable": '<method name="Introspect"><arg type="s" direction="out"/></method>',
    "org.freedesktop.DBus.Properties": '<method name="GetAll"><arg type="s"/><arg type="a{sv}" direction="out"/></method>',
    "org.freedesktop.DBus.Peer": '<method name="Ping"/>',
}


class MockIntrospector:
    """In-memory stand-in for BusSession.

    ``objects`` maps service -> path -> response. A response is either an
    XML string, an exception instance to raise, or a ``(delay, response)``
    tuple that sleeps first.
    """

    def __init__(
        self,
        objects: dict[str, dict[str, Any]] | None = None,
        services: list[str] | None = None,
        owners: dict[str, str] | None = None,
    ) -> None:
        self.objects = objects or {}
        self.services = services if services is not None else list(self.objects)
        self.owners = owners or {}
        self.calls: list[tuple[str, str]] = []
        self.owner_calls: list[str] = []
        self.in_flight = 0
        self.max_seen_in_flight = 0

    async def list_services(self) -> list[str]:
        return list(self.services)

    async def get_name_owner(self, service: str) -> str | None:
        self.owner_calls.append(service)
        return self.owners.get(service)

    async def introspect(self, service: str, path: str) -> str:
        self.calls.append((service, path))
        self.in_flight += 1
        self.max_seen_in_flight = max(self.max_seen_in_flight, self.in_flight)
        try:
            response = self.objects.get(service, {}).get(path)
            if isinstance(response, tuple):
                delay, response = response
                await asyncio.sleep(delay)
            else:
                await asyncio.sleep(0)

            if response is None:
                raise IntrospectionError(
                    f"No mock response for {path}", service=service, object_path=path
                )
            if isinstance(response, (IntrospectionError, ConnectionError)):
                raise response
            return response
        finally:
            self.in_flight -= 1


@pytest.fixture
def sample_objects() -> dict[str, dict[str, Any]]:
    """A small service with one nested object and a standard block on each node."""
    return {
        "org.example.Foo": {
            "/": node_xml("org", interfaces=STANDARD_BLOCK),
            "/org": node_xml("example", interfaces=STANDARD_BLOCK),
            "/org/example": node_xml(
                interfaces={
                    **STANDARD_BLOCK,
                    "org.example.Foo": (
                        '<method name="Frobate">'
                        '<arg name="foo" type="i" direction="in"/>'
                        '<arg name="bar" type="s" direction="out"/>'
                        "</method>"
                        '<property name="Bar" type="y" access="readwrite"/>'
                        '<signal name="Changed"><arg name="new_value" type="b"/></signal>'
                    ),
                }
            ),
        }
    }


@pytest.fixture
def introspector(sample_objects: dict[str, dict[str, Any]]) -> MockIntrospector:
    return MockIntrospector(sample_objects)
