"""Reporters for exploration results."""

from dbus_explorer.reporting.console import ConsoleReporter, format_method, format_signal
from dbus_explorer.reporting.json import JSONReporter
from dbus_explorer.reporting.protocol import Reporter

__all__ = [
    "Reporter",
    "ConsoleReporter",
    "JSONReporter",
    "format_method",
    "format_signal",
]
