"""Render a DecodedNode back into introspection XML."""

from __future__ import annotations

from xml.etree import ElementTree

from dbus_explorer.models import Argument, DecodedNode, Interface

DOCTYPE = (
    '<!DOCTYPE node PUBLIC "-//freedesktop//DTD D-BUS Object Introspection 1.0//EN"\n'
    ' "http://www.freedesktop.org/standards/dbus/1.0/introspect.dtd">\n'
)


def _add_annotations(parent: ElementTree.Element, annotations: dict[str, str]) -> None:
    for name, value in annotations.items():
        ElementTree.SubElement(parent, "annotation", {"name": name, "value": value})


def _add_args(parent: ElementTree.Element, args: list[Argument]) -> None:
    for arg in args:
        attrs = {"type": arg.signature}
        if arg.name:
            attrs["name"] = arg.name
        if arg.direction is not None:
            attrs["direction"] = arg.direction.value
        element = ElementTree.SubElement(parent, "arg", attrs)
        _add_annotations(element, arg.annotations)


def _interface_element(interface: Interface) -> ElementTree.Element:
    element = ElementTree.Element("interface", {"name": interface.name})
    for method in interface.methods:
        child = ElementTree.SubElement(element, "method", {"name": method.name})
        _add_args(child, method.args)
        _add_annotations(child, method.annotations)
    for signal in interface.signals:
        child = ElementTree.SubElement(element, "signal", {"name": signal.name})
        _add_args(child, signal.args)
        _add_annotations(child, signal.annotations)
    for prop in interface.properties:
        child = ElementTree.SubElement(
            element,
            "property",
            {"name": prop.name, "type": prop.signature, "access": prop.access.value},
        )
        _add_annotations(child, prop.annotations)
    _add_annotations(element, interface.annotations)
    return element


def encode(node: DecodedNode, doctype: bool = True) -> str:
    """Serialize ``node`` as an introspection document.

    ``decode(encode(node))`` yields the same interfaces, members, argument
    signatures and child names as ``node``.
    """
    root = ElementTree.Element("node", {"name": node.name} if node.name else {})
    for interface in node.interfaces:
        root.append(_interface_element(interface))
    for child in node.child_names:
        ElementTree.SubElement(root, "node", {"name": child})

    ElementTree.indent(root)
    body = ElementTree.tostring(root, encoding="unicode")
    return (DOCTYPE + body) if doctype else body
