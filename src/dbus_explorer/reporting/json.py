"""JSON reporter for machine-readable output."""

from __future__ import annotations

import json

from dbus_explorer.exploration.result import ExplorationResult


class JSONReporter:
    """Formats ExplorationResult as JSON."""

    def __init__(self, indent: int | None = 2) -> None:
        self.indent = indent

    def report(self, result: ExplorationResult) -> str:
        return json.dumps(result.to_dict(), indent=self.indent, default=str)
