"""ExplorationResult - Output of an exploration run."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from dbus_explorer.models import Diagnostic, ObjectNode


@dataclass(frozen=True)
class Failure:
    """One object that could not be fully introspected."""

    service: str
    path: str
    diagnostic: Diagnostic

    def to_dict(self) -> dict[str, Any]:
        return {"service": self.service, "path": self.path, **self.diagnostic.to_dict()}


@dataclass
class ServiceTree:
    """The object tree of one service.

    Attributes:
        name: The service's bus name.
        root: The root object. Always present, possibly as a placeholder.
        owner: Unique connection name owning the service, when resolved.
        diagnostic: Top-level diagnostic, set when the root itself failed.
    """

    name: str
    root: ObjectNode
    owner: str | None = None
    diagnostic: Diagnostic | None = None

    @property
    def objects(self) -> list[ObjectNode]:
        """Every object in the tree, sorted by path."""
        return sorted(self.root.walk(), key=lambda n: n.path)

    @property
    def paths(self) -> list[str]:
        return [n.path for n in self.objects]

    @property
    def object_count(self) -> int:
        return sum(1 for _ in self.root.walk())

    @property
    def failures(self) -> list[Failure]:
        return [
            Failure(self.name, node.path, node.diagnostic)
            for node in self.objects
            if node.diagnostic is not None
        ]

    def find(self, path: str) -> ObjectNode | None:
        """Look up an object by absolute path."""
        for node in self.root.walk():
            if node.path == path:
                return node
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "owner": self.owner,
            "diagnostic": self.diagnostic.to_dict() if self.diagnostic else None,
            "root": self.root.to_dict(),
        }


@dataclass
class ExplorationResult:
    """The complete output of an exploration run.

    Example::

        result = await explorer.explore_all()

        print(f"Explored {len(result.services)} services")
        for failure in result.failures:
            print(f"{failure.service}:{failure.path}: {failure.diagnostic.message}")

    Attributes:
        services: Service name -> object tree.
        started_at: When exploration started.
        finished_at: When exploration finished.
        duration_ms: Total exploration time in milliseconds.
    """

    services: dict[str, ServiceTree] = field(default_factory=dict)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None
    duration_ms: float = 0.0

    def add_service(self, tree: ServiceTree) -> None:
        self.services[tree.name] = tree

    @property
    def service_names(self) -> list[str]:
        return sorted(self.services)

    @property
    def failures(self) -> list[Failure]:
        """All per-object failures, ordered by service then path."""
        failures: list[Failure] = []
        for name in self.service_names:
            failures.extend(self.services[name].failures)
        return failures

    @property
    def failure_map(self) -> dict[tuple[str, str], Diagnostic]:
        return {(f.service, f.path): f.diagnostic for f in self.failures}

    @property
    def service_diagnostics(self) -> dict[str, Diagnostic]:
        """Services whose root object could not be read."""
        return {
            name: tree.diagnostic
            for name, tree in sorted(self.services.items())
            if tree.diagnostic is not None
        }

    @property
    def object_count(self) -> int:
        return sum(tree.object_count for tree in self.services.values())

    @property
    def success(self) -> bool:
        """True if every object was introspected."""
        return not self.failures

    def finish(self) -> None:
        """Mark exploration as finished and compute duration."""
        self.finished_at = datetime.now()
        self.duration_ms = (self.finished_at - self.started_at).total_seconds() * 1000

    def summary(self) -> dict[str, int | float | bool | dict[str, int]]:
        failures = self.failures
        return {
            "services": len(self.services),
            "objects": self.object_count,
            "failures": len(failures),
            "failed_services": len(self.service_diagnostics),
            "failures_by_kind": dict(Counter(f.diagnostic.kind.value for f in failures)),
            "success": self.success,
            "duration_ms": round(self.duration_ms, 2),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary(),
            "services": {name: self.services[name].to_dict() for name in self.service_names},
            "failures": [f.to_dict() for f in self.failures],
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }
