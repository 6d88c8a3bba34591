"""Decoder for the D-Bus introspection XML format.

The document shape is the standard D-Bus introspection format::

    <node name="/org/example/Foo">
      <interface name="org.example.Foo">
        <method name="Frobate">
          <arg name="foo" type="i" direction="in"/>
          <arg name="bar" type="s" direction="out"/>
          <annotation name="org.freedesktop.DBus.Deprecated" value="true"/>
        </method>
        <signal name="Changed">
          <arg name="new_value" type="b"/>
        </signal>
        <property name="Bar" type="y" access="readwrite"/>
      </interface>
      <node name="child_of_foo"/>
    </node>

Unknown elements and attributes are ignored. Decoding either returns a
complete DecodedNode or raises MalformedSchemaError; it never hands back a
partially decoded interface.
"""

from __future__ import annotations

import logging
from xml.etree import ElementTree

from dbus_explorer.errors import MalformedSchemaError
from dbus_explorer.models import (
    ArgDirection,
    Argument,
    DecodedNode,
    Interface,
    Method,
    Property,
    PropertyAccess,
    Signal,
)

logger = logging.getLogger(__name__)

# Single complete types plus the container openers/closers
_TYPE_CODES = frozenset("ybnqiuxtdhsogvam(){}")


def is_well_formed_signature(signature: str) -> bool:
    """Check that a type signature is plausible.

    Signatures are opaque to the explorer; this only rejects empty strings,
    unknown type codes and unbalanced containers.
    """
    if not signature or len(signature) > 255:
        return False

    stack: list[str] = []
    pairs = {")": "(", "}": "{"}
    for char in signature:
        if char not in _TYPE_CODES:
            return False
        if char in "({":
            stack.append(char)
        elif char in ")}":
            if not stack or stack.pop() != pairs[char]:
                return False
    return not stack


def _required(element: ElementTree.Element, attribute: str, where: str) -> str:
    value = element.get(attribute)
    if value is None or not value.strip():
        raise MalformedSchemaError(f"<{element.tag}> in {where} is missing '{attribute}'")
    return value


def _annotations(element: ElementTree.Element, where: str) -> dict[str, str]:
    annotations: dict[str, str] = {}
    for child in element.findall("annotation"):
        name = _required(child, "name", where)
        annotations[name] = child.get("value", "")
    return annotations


def _decode_arg(element: ElementTree.Element, where: str, method: bool) -> Argument:
    signature = _required(element, "type", where)
    if not is_well_formed_signature(signature):
        raise MalformedSchemaError(f"invalid type signature {signature!r} in {where}")

    direction = None
    if method:
        raw = element.get("direction", "in")
        try:
            direction = ArgDirection(raw)
        except ValueError:
            raise MalformedSchemaError(f"invalid arg direction {raw!r} in {where}") from None

    return Argument(
        signature=signature,
        name=element.get("name") or None,
        direction=direction,
        annotations=_annotations(element, where),
    )


def _decode_method(element: ElementTree.Element, interface: str) -> Method:
    name = _required(element, "name", interface)
    where = f"{interface}.{name}"
    return Method(
        name=name,
        args=[_decode_arg(a, where, method=True) for a in element.findall("arg")],
        annotations=_annotations(element, where),
    )


def _decode_signal(element: ElementTree.Element, interface: str) -> Signal:
    name = _required(element, "name", interface)
    where = f"{interface}.{name}"
    return Signal(
        name=name,
        args=[_decode_arg(a, where, method=False) for a in element.findall("arg")],
        annotations=_annotations(element, where),
    )


def _decode_property(element: ElementTree.Element, interface: str) -> Property:
    name = _required(element, "name", interface)
    where = f"{interface}.{name}"
    signature = _required(element, "type", where)
    if not is_well_formed_signature(signature):
        raise MalformedSchemaError(f"invalid type signature {signature!r} in {where}")

    raw_access = _required(element, "access", where)
    try:
        access = PropertyAccess(raw_access)
    except ValueError:
        raise MalformedSchemaError(f"invalid access {raw_access!r} in {where}") from None

    return Property(
        name=name,
        signature=signature,
        access=access,
        annotations=_annotations(element, where),
    )


def _decode_interface(element: ElementTree.Element) -> Interface:
    name = _required(element, "name", "node")
    return Interface(
        name=name,
        methods=[_decode_method(e, name) for e in element.findall("method")],
        properties=[_decode_property(e, name) for e in element.findall("property")],
        signals=[_decode_signal(e, name) for e in element.findall("signal")],
        annotations=_annotations(element, name),
    )


def decode(xml_text: str) -> DecodedNode:
    """Decode one introspection document.

    Args:
        xml_text: The raw string returned by ``Introspect``.

    Returns:
        The object's interfaces and child node names, in document order.

    Raises:
        MalformedSchemaError: If the XML is not well-formed or does not match
            the introspection schema.
    """
    try:
        root = ElementTree.fromstring(xml_text)
    except ElementTree.ParseError as e:
        raise MalformedSchemaError(str(e)) from e

    if root.tag != "node":
        raise MalformedSchemaError(f"root element is <{root.tag}>, expected <node>")

    interfaces: list[Interface] = []
    seen: set[str] = set()
    for element in root.findall("interface"):
        interface = _decode_interface(element)
        if interface.name in seen:
            raise MalformedSchemaError(f"interface {interface.name} declared twice")
        seen.add(interface.name)
        interfaces.append(interface)

    # Anonymous child nodes carry nothing navigable
    child_names = [
        name for name in (n.get("name") for n in root.findall("node")) if name and name.strip()
    ]

    return DecodedNode(
        interfaces=interfaces,
        child_names=child_names,
        name=root.get("name") or None,
    )
