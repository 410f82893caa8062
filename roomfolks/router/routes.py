"""Route table and event router.

Routes bind an event type to a handler. The router dispatches one event to
every handler bound to its type, in registration order, and stops at the
first handler that raises.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Tuple, Union

from loguru import logger

from roomfolks.events import Event

RouteHandler = Callable[[Event], Union[Awaitable[None], None]]


@dataclass(frozen=True)
class Route:
    """A binding of one event type to one handler."""
    event_type: str
    handler: RouteHandler

    def describe(self) -> str:
        """Human-readable handler name for logs."""
        name = getattr(self.handler, "__qualname__", None) or repr(self.handler)
        return f"{self.event_type} -> {name}"


class RouteTable:
    """Ordered collection of routes, indexed by event type.

    Example:
        table = RouteTable()
        table.add_route("m.room.message", on_message)
        table.routes_for("m.room.message")  # (Route(...),)
    """

    def __init__(self):
        self._routes: List[Route] = []
        self._by_type: Dict[str, List[Route]] = {}

    def add_route(self, event_type: str, handler: RouteHandler) -> Route:
        """Append a route to the flat list and to its type group.

        Registering several routes for the same type is allowed; all of
        them fire, in the order they were added.
        """
        route = Route(event_type=event_type, handler=handler)
        self._routes.append(route)
        self._by_type.setdefault(event_type, []).append(route)
        logger.debug(f"Route registered: {route.describe()}")
        return route

    def routes_for(self, event_type: str) -> Tuple[Route, ...]:
        """Routes registered for ``event_type``, in registration order."""
        return tuple(self._by_type.get(event_type, ()))

    def all_routes(self) -> Tuple[Route, ...]:
        """Every registered route, in registration order."""
        return tuple(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, event_type: str) -> bool:
        return event_type in self._by_type


class Router:
    """Dispatches events to the routes of a :class:`RouteTable`."""

    def __init__(self, table: RouteTable | None = None):
        self.table = table or RouteTable()

    def add_route(self, event_type: str, handler: RouteHandler) -> Route:
        return self.table.add_route(event_type, handler)

    async def handle(self, event: Event) -> int:
        """Invoke every handler bound to ``event.type``.

        Handlers run sequentially. If one raises, the remaining handlers
        for this event are skipped and the exception propagates unchanged.

        Returns:
            Number of handlers that ran to completion.
        """
        routes = self.table.routes_for(event.type)
        for route in routes:
            result: Any = route.handler(event)
            if inspect.isawaitable(result):
                await result
        return len(routes)


__all__ = ["Route", "RouteHandler", "RouteTable", "Router"]
