"""TreeWalker - Recursive discovery of a service's object hierarchy.

The walk is driven by an explicit frontier and a visited set keyed by
absolute path, never by Python recursion. The introspection schema does not
promise a tree (a service may list a child that points back at an ancestor),
so every path is resolved at most once per service.

Each round pops up to ``max_in_flight`` paths from the frontier and
introspects them concurrently. Decoding and filtering are synchronous; the
only suspension point is the introspection call itself.

Example::

    walker = TreeWalker(session, max_in_flight=4)
    tree = await walker.explore("org.freedesktop.NetworkManager")

    for node in tree.objects:
        print(node.path, [i.name for i in node.interfaces])
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import TypeVar

from dbus_explorer.bus.names import (
    is_valid_object_path,
    join_path,
    parent_path,
    path_segment,
    validate_object_path,
    validate_service_name,
)
from dbus_explorer.bus.session import Introspector
from dbus_explorer.errors import (
    IntrospectionError,
    IntrospectionTimeoutError,
    MalformedSchemaError,
)
from dbus_explorer.exploration.frontier import create_frontier
from dbus_explorer.exploration.result import ServiceTree
from dbus_explorer.models import DecodedNode, Diagnostic, DiagnosticKind, ObjectNode
from dbus_explorer.schema import decode, filter_interfaces

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEADLINE_MESSAGE = "Exploration deadline reached before this object was introspected"


class Deadline:
    """Overall time budget and/or cancellation signal for an exploration.

    Args:
        timeout: Seconds from now until the deadline, or None for no limit.
        cancel_event: Setting this event cancels the exploration.

    When the deadline passes, in-flight calls are abandoned and every
    unresolved object becomes a TIMEOUT placeholder; objects already
    resolved are kept.
    """

    def __init__(
        self,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        self.timeout = timeout
        self.cancel_event = cancel_event
        self._expires_at = time.monotonic() + timeout if timeout is not None else None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def remaining(self) -> float | None:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def expired(self) -> bool:
        if self.cancelled:
            return True
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the deadline passes first.

        Raises:
            IntrospectionTimeoutError: If the deadline expired or the
                exploration was cancelled.
        """
        if self.expired():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise IntrospectionTimeoutError(DEADLINE_MESSAGE)

        task = asyncio.ensure_future(awaitable)
        waiters: set[asyncio.Future] = {task}
        stopper = None
        if self.cancel_event is not None:
            stopper = asyncio.ensure_future(self.cancel_event.wait())
            waiters.add(stopper)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            if stopper is not None:
                stopper.cancel()
            if not task.done():
                task.cancel()

        if task in done:
            return task.result()
        raise IntrospectionTimeoutError("Exploration deadline reached during introspection")


class TreeWalker:
    """Walks one service's object hierarchy.

    Args:
        introspector: Anything implementing the Introspector protocol.
        max_in_flight: Maximum concurrent introspection calls per service.
            1 gives a plain sequential walk.
        strategy: "bfs" or "dfs"; affects scheduling only.
        include_standard_interfaces: Keep Introspectable/Properties/Peer/
            ObjectManager instead of filtering them out.
    """

    def __init__(
        self,
        introspector: Introspector,
        max_in_flight: int = 8,
        strategy: str = "bfs",
        include_standard_interfaces: bool = False,
    ) -> None:
        if max_in_flight < 1:
            raise ValueError(f"max_in_flight must be at least 1, got {max_in_flight}")
        create_frontier(strategy)  # fail fast on an unknown strategy

        self.introspector = introspector
        self.max_in_flight = max_in_flight
        self.strategy = strategy
        self.include_standard_interfaces = include_standard_interfaces

    async def explore(
        self,
        service: str,
        root_path: str = "/",
        deadline: Deadline | None = None,
    ) -> ServiceTree:
        """Discover every object reachable from ``root_path`` on ``service``.

        Per-object failures become placeholders with a diagnostic. Only
        ConnectionError propagates.

        Raises:
            ValidationError: If the service name or root path is invalid.
            ConnectionError: If the bus goes away.
        """
        validate_service_name(service)
        validate_object_path(root_path)
        deadline = deadline or Deadline()

        frontier = create_frontier(self.strategy)
        nodes: dict[str, ObjectNode] = {root_path: ObjectNode(root_path)}
        discovered_by: dict[str, set[str]] = {}
        visited: set[str] = {root_path}
        frontier.add(root_path)

        logger.info("Exploring %s from %s", service, root_path)

        while not frontier.is_empty():
            if deadline.expired():
                pending = frontier.drain()
                logger.warning(
                    "Deadline reached for %s, %d objects left unresolved", service, len(pending)
                )
                for path in pending:
                    nodes[path].diagnostic = Diagnostic(DiagnosticKind.TIMEOUT, DEADLINE_MESSAGE)
                break

            batch = frontier.pop_many(self.max_in_flight)
            outcomes = await asyncio.gather(
                *(self._visit(service, path, deadline) for path in batch),
                return_exceptions=True,
            )

            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    raise outcome

            for path, outcome in zip(batch, outcomes):
                node = nodes[path]
                if isinstance(outcome, Diagnostic):
                    logger.warning(
                        "Could not introspect %s:%s (%s): %s",
                        service,
                        path,
                        outcome.kind.value,
                        outcome.message,
                    )
                    node.diagnostic = outcome
                    continue

                self._record(node, outcome)
                scheduled: list[str] = []
                for name in outcome.child_names:
                    child_path = join_path(path, name)
                    if child_path not in (path, root_path):
                        discovered_by.setdefault(child_path, set()).add(path)
                    if child_path in visited:
                        logger.debug("Skipping already visited %s:%s", service, child_path)
                        continue
                    visited.add(child_path)

                    child = ObjectNode(child_path)
                    nodes[child_path] = child

                    if not is_valid_object_path(child_path):
                        child.diagnostic = Diagnostic(
                            DiagnosticKind.MALFORMED,
                            f"Child node name {name!r} does not form a valid object path",
                        )
                        continue
                    scheduled.append(child_path)

                frontier.add_many(scheduled)

        root = self._assemble(nodes, discovered_by, root_path)
        tree = ServiceTree(name=service, root=root, diagnostic=root.diagnostic)
        logger.info(
            "Explored %s: %d objects, %d failures",
            service,
            tree.object_count,
            len(tree.failures),
        )
        return tree

    async def _visit(
        self, service: str, path: str, deadline: Deadline
    ) -> DecodedNode | Diagnostic:
        xml_text: str | None = None
        logger.debug("Introspecting %s:%s", service, path)
        try:
            xml_text = await deadline.run(self.introspector.introspect(service, path))
            return decode(xml_text)
        except MalformedSchemaError as e:
            logger.debug("XML parsing failed for %s:%s\nContent:\n%s", service, path, xml_text)
            return e.to_diagnostic()
        except IntrospectionError as e:
            return e.to_diagnostic()

    def _record(self, node: ObjectNode, decoded: DecodedNode) -> None:
        interfaces = decoded.interfaces
        if not self.include_standard_interfaces:
            interfaces = filter_interfaces(interfaces)
        node.interfaces = interfaces
        node.child_names = list(decoded.child_names)

    @staticmethod
    def _assemble(
        nodes: dict[str, ObjectNode],
        discovered_by: dict[str, set[str]],
        root_path: str,
    ) -> ObjectNode:
        """Link every resolved object under exactly one parent.

        A path that several objects list is introspected once, but where it
        hangs in the tree must not depend on which parent was popped first.
        It goes under its structural parent when that object is part of the
        walk, otherwise under the smallest path that listed it. A candidate
        parent must already be attached so the result stays a tree.
        """
        attached = {root_path}
        owners: dict[str, str] = {}
        pending = sorted(p for p in nodes if p != root_path)

        while pending:
            waiting: list[str] = []
            for path in pending:
                owner = None
                structural = parent_path(path)
                if structural in nodes:
                    if structural in attached:
                        owner = structural
                else:
                    first = min(discovered_by.get(path, ()), default=None)
                    if first in attached:
                        owner = first
                if owner is None:
                    waiting.append(path)
                    continue
                owners[path] = owner
                attached.add(path)

            if len(waiting) == len(pending):
                # Every candidate parent hangs below the object itself; take
                # the smallest lister that is already attached.
                for path in waiting:
                    listers = [p for p in discovered_by.get(path, ()) if p in attached]
                    if listers:
                        owners[path] = min(listers)
                        attached.add(path)
                        break
                else:
                    raise RuntimeError(f"Unattached objects after walk: {waiting}")
                waiting = [p for p in waiting if p not in attached]
            pending = waiting

        links: dict[str, list[str]] = {}
        for path, owner in owners.items():
            links.setdefault(owner, []).append(path)
        for owner, child_paths in links.items():
            ordered = sorted(child_paths, key=lambda p: (path_segment(p), p))
            nodes[owner].children = [nodes[p] for p in ordered]
        return nodes[root_path]
