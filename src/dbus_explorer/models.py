"""Data model for introspected D-Bus objects.

Everything here is created fresh during one exploration pass and handed to
reporters once the walk finishes; nothing is persisted across calls.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DESCRIPTION_ANNOTATION = "org.freedesktop.DBus.Description"
DEPRECATED_ANNOTATION = "org.freedesktop.DBus.Deprecated"


class ArgDirection(Enum):
    """Direction of a method argument."""

    IN = "in"
    OUT = "out"


class PropertyAccess(Enum):
    """Access mode of a property."""

    READ = "read"
    WRITE = "write"
    READWRITE = "readwrite"


class DiagnosticKind(Enum):
    """Why an object could not be fully introspected.

    ``NOT_FOUND`` means the object does not exist. Every other kind means
    the object (probably) exists but could not be read.
    """

    ACCESS_DENIED = "access-denied"
    TIMEOUT = "timeout"
    MALFORMED = "malformed-response"
    UNREACHABLE = "unreachable"
    NOT_FOUND = "not-found"
    NOT_INTROSPECTABLE = "not-introspectable"
    FAILED = "failed"


@dataclass(frozen=True)
class Diagnostic:
    """A recorded, non-fatal failure attached to one object."""

    kind: DiagnosticKind
    message: str
    error_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.error_name:
            data["error_name"] = self.error_name
        return data


def _description(annotations: dict[str, str]) -> str | None:
    return annotations.get(DESCRIPTION_ANNOTATION)


@dataclass
class Argument:
    """A method or signal argument.

    Attributes:
        name: Optional argument name.
        signature: D-Bus type signature, passed through untouched.
        direction: IN/OUT for method arguments, None for signal arguments.
        annotations: Annotation name -> value.
    """

    signature: str
    name: str | None = None
    direction: ArgDirection | None = None
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class Method:
    name: str
    args: list[Argument] = field(default_factory=list)
    annotations: dict[str, str] = field(default_factory=dict)

    @property
    def in_args(self) -> list[Argument]:
        return [a for a in self.args if a.direction is not ArgDirection.OUT]

    @property
    def out_args(self) -> list[Argument]:
        return [a for a in self.args if a.direction is ArgDirection.OUT]

    @property
    def description(self) -> str | None:
        return _description(self.annotations)

    @property
    def is_deprecated(self) -> bool:
        return self.annotations.get(DEPRECATED_ANNOTATION) == "true"


@dataclass
class Property:
    name: str
    signature: str
    access: PropertyAccess
    annotations: dict[str, str] = field(default_factory=dict)

    @property
    def readable(self) -> bool:
        return self.access in (PropertyAccess.READ, PropertyAccess.READWRITE)

    @property
    def writable(self) -> bool:
        return self.access in (PropertyAccess.WRITE, PropertyAccess.READWRITE)

    @property
    def description(self) -> str | None:
        return _description(self.annotations)


@dataclass
class Signal:
    name: str
    args: list[Argument] = field(default_factory=list)
    annotations: dict[str, str] = field(default_factory=dict)

    @property
    def description(self) -> str | None:
        return _description(self.annotations)


@dataclass
class Interface:
    """A named group of methods, properties and signals.

    Member order follows the introspection document.
    """

    name: str
    methods: list[Method] = field(default_factory=list)
    properties: list[Property] = field(default_factory=list)
    signals: list[Signal] = field(default_factory=list)
    annotations: dict[str, str] = field(default_factory=dict)

    @property
    def description(self) -> str | None:
        return _description(self.annotations)

    @property
    def member_count(self) -> int:
        return len(self.methods) + len(self.properties) + len(self.signals)

    @property
    def is_empty(self) -> bool:
        """True if the interface only documents its presence."""
        return self.member_count == 0

    def to_dict(self) -> dict[str, Any]:
        def args(items: list[Argument]) -> list[dict[str, Any]]:
            return [
                {
                    "name": a.name,
                    "type": a.signature,
                    **({"direction": a.direction.value} if a.direction else {}),
                }
                for a in items
            ]

        return {
            "name": self.name,
            "description": self.description,
            "methods": [
                {"name": m.name, "args": args(m.args), "description": m.description}
                for m in self.methods
            ],
            "properties": [
                {
                    "name": p.name,
                    "type": p.signature,
                    "access": p.access.value,
                    "description": p.description,
                }
                for p in self.properties
            ],
            "signals": [
                {"name": s.name, "args": args(s.args), "description": s.description}
                for s in self.signals
            ],
        }


@dataclass
class DecodedNode:
    """The content of one introspection document.

    Attributes:
        interfaces: Interfaces declared by the object, in document order.
        child_names: Names of child nodes, in document order.
        name: The root node's ``name`` attribute, if present.
    """

    interfaces: list[Interface] = field(default_factory=list)
    child_names: list[str] = field(default_factory=list)
    name: str | None = None


@dataclass
class ObjectNode:
    """One object in a service tree.

    A node whose introspection failed is a placeholder: it has no
    interfaces, no children and a diagnostic explaining why.

    Attributes:
        path: Absolute object path.
        interfaces: Interfaces after filtering.
        child_names: Child names exactly as reported by the service.
        children: Resolved child objects, sorted by path segment.
        diagnostic: Set when the object could not be introspected.
    """

    path: str
    interfaces: list[Interface] = field(default_factory=list)
    child_names: list[str] = field(default_factory=list)
    children: list[ObjectNode] = field(default_factory=list)
    diagnostic: Diagnostic | None = None

    @property
    def name(self) -> str:
        """Last path segment ("/" for the root)."""
        if self.path == "/":
            return "/"
        return self.path.rsplit("/", 1)[-1]

    @property
    def failed(self) -> bool:
        return self.diagnostic is not None

    @property
    def is_navigation_only(self) -> bool:
        """True if no interface on this object has any member."""
        return all(i.is_empty for i in self.interfaces)

    def get_interface(self, name: str) -> Interface | None:
        for interface in self.interfaces:
            if interface.name == name:
                return interface
        return None

    def walk(self) -> Iterator[ObjectNode]:
        """Yield this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "interfaces": [i.to_dict() for i in self.interfaces],
            "children": [c.to_dict() for c in self.children],
            "diagnostic": self.diagnostic.to_dict() if self.diagnostic else None,
        }
