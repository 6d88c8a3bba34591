"""Exploration - Tree walking and result assembly.

Core abstractions:
- TreeWalker: Walks one service's object hierarchy
- Deadline: Time budget / cancellation for a walk
- Frontier: Paths discovered but not yet introspected
- Explorer: Lists services and explores all of them
- ExplorationResult: Output of an exploration run
"""

from dbus_explorer.exploration.explorer import Explorer
from dbus_explorer.exploration.frontier import (
    BaseFrontier,
    Frontier,
    QueueFrontier,
    StackFrontier,
    create_frontier,
)
from dbus_explorer.exploration.result import ExplorationResult, Failure, ServiceTree
from dbus_explorer.exploration.walker import Deadline, TreeWalker

__all__ = [
    "Explorer",
    "TreeWalker",
    "Deadline",
    "ExplorationResult",
    "ServiceTree",
    "Failure",
    "Frontier",
    "BaseFrontier",
    "QueueFrontier",
    "StackFrontier",
    "create_frontier",
]
