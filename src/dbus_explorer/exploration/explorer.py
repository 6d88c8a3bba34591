"""Explorer - Service listing and whole-bus exploration."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from dbus_explorer.bus.session import Introspector
from dbus_explorer.exploration.result import ExplorationResult, ServiceTree
from dbus_explorer.exploration.walker import Deadline, TreeWalker

if TYPE_CHECKING:
    from dbus_explorer.config import ExplorerConfig

logger = logging.getLogger(__name__)


class Explorer:
    """Runs tree walks over one bus session.

    Example::

        async with BusSession(bus="session") as session:
            explorer = Explorer(session)
            result = await explorer.explore_all(name_filter="org.gnome")

    Args:
        session: Anything implementing the Introspector protocol. When it
            also offers ``get_name_owner`` (BusSession does), owners are
            resolved for each explored service.
        max_in_flight: Concurrent introspection calls per service.
        max_concurrent_services: Services explored at the same time.
        strategy: Frontier strategy, "bfs" or "dfs".
        include_standard_interfaces: Skip interface filtering.
        resolve_owners: Look up each service's unique connection name.
        exploration_timeout: Overall time budget in seconds, or None.
    """

    def __init__(
        self,
        session: Introspector,
        max_in_flight: int = 8,
        max_concurrent_services: int = 4,
        strategy: str = "bfs",
        include_standard_interfaces: bool = False,
        resolve_owners: bool = True,
        exploration_timeout: float | None = None,
    ) -> None:
        if max_concurrent_services < 1:
            raise ValueError(
                f"max_concurrent_services must be at least 1, got {max_concurrent_services}"
            )
        self.session = session
        self.max_concurrent_services = max_concurrent_services
        self.resolve_owners = resolve_owners
        self.exploration_timeout = exploration_timeout
        self.walker = TreeWalker(
            session,
            max_in_flight=max_in_flight,
            strategy=strategy,
            include_standard_interfaces=include_standard_interfaces,
        )

    @classmethod
    def from_config(cls, session: Introspector, config: ExplorerConfig) -> Explorer:
        return cls(
            session,
            max_in_flight=config.max_in_flight,
            max_concurrent_services=config.max_concurrent_services,
            strategy=config.strategy,
            include_standard_interfaces=config.include_standard_interfaces,
            resolve_owners=config.resolve_owners,
            exploration_timeout=config.exploration_timeout,
        )

    def _deadline(self, cancel_event: asyncio.Event | None) -> Deadline:
        return Deadline(timeout=self.exploration_timeout, cancel_event=cancel_event)

    async def list_services(self) -> list[str]:
        """Registered service names, sorted lexicographically.

        Raises:
            ConnectionError: If the bus is unreachable.
        """
        return sorted(await self.session.list_services())

    async def _owner(self, service: str) -> str | None:
        get_name_owner = getattr(self.session, "get_name_owner", None)
        if not self.resolve_owners or get_name_owner is None:
            return None
        return await get_name_owner(service)

    async def explore(
        self,
        service: str,
        root_path: str = "/",
        cancel_event: asyncio.Event | None = None,
        deadline: Deadline | None = None,
    ) -> ServiceTree:
        """Walk one service and attach its owner unless the deadline has passed."""
        deadline = deadline or self._deadline(cancel_event)
        tree = await self.walker.explore(service, root_path, deadline=deadline)
        if not deadline.expired():
            tree.owner = await self._owner(service)
        return tree

    async def explore_all(
        self,
        name_filter: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ExplorationResult:
        """Explore every service on the bus.

        A service whose root cannot be read gets a top-level diagnostic and
        does not stop the others.

        Args:
            name_filter: Only explore services whose name contains this text.
            cancel_event: Setting it stops the walk; unresolved objects are
                recorded as timeouts.

        Raises:
            ConnectionError: If the bus is unreachable.
        """
        result = ExplorationResult()
        names = await self.list_services()
        if name_filter:
            names = [n for n in names if name_filter in n]

        logger.info("Exploring %d services", len(names))
        deadline = self._deadline(cancel_event)
        semaphore = asyncio.Semaphore(self.max_concurrent_services)

        async def explore_one(name: str) -> ServiceTree:
            async with semaphore:
                return await self.explore(name, deadline=deadline)

        outcomes = await asyncio.gather(
            *(explore_one(name) for name in names),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

        for tree in outcomes:
            if tree.diagnostic is not None:
                logger.warning("Service %s could not be explored: %s", tree.name, tree.diagnostic.message)
            result.add_service(tree)

        result.finish()
        return result
