"""Introspection schema: XML decoding/encoding and interface filtering."""

from dbus_explorer.schema.decoder import decode, is_well_formed_signature
from dbus_explorer.schema.encoder import encode
from dbus_explorer.schema.filter import (
    STANDARD_INTERFACES,
    filter_interfaces,
    is_standard_interface,
)

__all__ = [
    "decode",
    "encode",
    "is_well_formed_signature",
    "filter_interfaces",
    "is_standard_interface",
    "STANDARD_INTERFACES",
]
