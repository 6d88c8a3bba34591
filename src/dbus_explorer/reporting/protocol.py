"""Reporter protocol - Interface for formatting exploration results."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from dbus_explorer.exploration import ExplorationResult


@runtime_checkable
class Reporter(Protocol):
    """Protocol for formatting exploration results.

    All reporters implement this protocol, allowing them to be used
    interchangeably. The report method returns a string that can be
    printed, saved to a file, or handed to a presentation layer.

    Built-in reporters:
    - ConsoleReporter: Terminal tree view via rich
    - JSONReporter: Machine-readable JSON
    """

    def report(self, result: ExplorationResult) -> str:
        ...


__all__ = ["Reporter"]
