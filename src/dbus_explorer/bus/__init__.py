"""Bus access: the dbus-next backed session and name/path helpers."""

from dbus_explorer.bus.names import (
    is_valid_object_path,
    join_path,
    parent_path,
    path_segment,
    validate_object_path,
    validate_service_name,
)
from dbus_explorer.bus.session import BusSession, Introspector, error_from_reply

__all__ = [
    "BusSession",
    "Introspector",
    "error_from_reply",
    "join_path",
    "parent_path",
    "path_segment",
    "is_valid_object_path",
    "validate_object_path",
    "validate_service_name",
]
