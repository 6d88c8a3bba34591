"""Bus name and object path helpers."""

from __future__ import annotations

import re

from dbus_explorer.errors import ValidationError

MAX_NAME_LENGTH = 255
MAX_PATH_LENGTH = 1024

_SERVICE_NAME_RE = re.compile(r"^:?[A-Za-z0-9_.\-]+$")
_PATH_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_]+$")


def validate_service_name(service_name: str) -> None:
    """Raise ValidationError unless ``service_name`` looks like a bus name."""
    if not service_name:
        raise ValidationError("Service name cannot be empty", field="service", value=service_name)

    if len(service_name) > MAX_NAME_LENGTH:
        raise ValidationError("Service name too long", field="service", value=service_name)

    if not _SERVICE_NAME_RE.match(service_name):
        raise ValidationError(
            "Invalid characters in service name", field="service", value=service_name
        )


def validate_object_path(object_path: str) -> None:
    """Raise ValidationError unless ``object_path`` is a valid object path."""
    if not object_path:
        raise ValidationError("Object path cannot be empty", field="path", value=object_path)

    if not object_path.startswith("/"):
        raise ValidationError("Object path must start with '/'", field="path", value=object_path)

    if len(object_path) > MAX_PATH_LENGTH:
        raise ValidationError("Object path too long", field="path", value=object_path)

    if object_path == "/":
        return

    for segment in object_path[1:].split("/"):
        if not segment:
            raise ValidationError(
                "Object path has an empty segment", field="path", value=object_path
            )
        if not _PATH_SEGMENT_RE.match(segment):
            raise ValidationError(
                "Invalid characters in object path", field="path", value=object_path
            )


def is_valid_object_path(object_path: str) -> bool:
    try:
        validate_object_path(object_path)
    except ValidationError:
        return False
    return True


def join_path(parent: str, child: str) -> str:
    """Compute the absolute path of ``child`` under ``parent``.

    Example::

        join_path("/", "org")        # "/org"
        join_path("/org", "example") # "/org/example"
        join_path("/org", "/x")      # "/x" (absolute names are kept)
    """
    if child.startswith("/"):
        return child
    if parent == "/":
        return f"/{child}"
    return f"{parent}/{child}"


def path_segment(object_path: str) -> str:
    """Last segment of an object path ("/" for the root)."""
    if object_path == "/":
        return "/"
    return object_path.rstrip("/").rsplit("/", 1)[-1]


def parent_path(object_path: str) -> str | None:
    """Path one level up ("/" for top-level objects, None for the root)."""
    if object_path == "/":
        return None
    return object_path.rsplit("/", 1)[0] or "/"
