"""Removal of the standard plumbing interfaces every object carries."""

from __future__ import annotations

from collections.abc import Iterable

from dbus_explorer.models import Interface

STANDARD_INTERFACES = frozenset(
    {
        "org.freedesktop.DBus.Introspectable",
        "org.freedesktop.DBus.Properties",
        "org.freedesktop.DBus.Peer",
        "org.freedesktop.DBus.ObjectManager",
    }
)


def is_standard_interface(name: str) -> bool:
    return name in STANDARD_INTERFACES


def filter_interfaces(interfaces: Iterable[Interface]) -> list[Interface]:
    """Drop the standard interfaces, keeping the order of everything else.

    Interfaces with no members are kept: their presence alone is
    information about the object.
    """
    return [i for i in interfaces if not is_standard_interface(i.name)]
