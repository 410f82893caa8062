"""Tests for the route table and event router."""

import pytest

from roomfolks.events import EVENT_MEMBER, EVENT_MESSAGE, Event, text_message
from roomfolks.router.routes import Route, Router, RouteTable


@pytest.fixture
def router():
    return Router()


@pytest.fixture
def message():
    return text_message("@alice:example.org", "!room:example.org", "hello", "$evt1")


class TestRouteTable:
    """Test route registration and lookup."""

    def test_unregistered_type_returns_empty(self):
        """Unknown types have no routes."""
        table = RouteTable()
        assert table.routes_for("m.unknown") == ()
        assert "m.unknown" not in table

    def test_routes_grouped_by_type_in_order(self):
        """Routes are grouped per type in registration order."""
        table = RouteTable()
        first = table.add_route(EVENT_MESSAGE, lambda e: None)
        member = table.add_route(EVENT_MEMBER, lambda e: None)
        second = table.add_route(EVENT_MESSAGE, lambda e: None)

        assert table.routes_for(EVENT_MESSAGE) == (first, second)
        assert table.routes_for(EVENT_MEMBER) == (member,)
        assert table.all_routes() == (first, member, second)
        assert len(table) == 3

    def test_same_handler_twice_is_not_deduplicated(self):
        """Registering a handler twice adds two routes."""
        table = RouteTable()

        def handler(event):
            return None

        table.add_route(EVENT_MESSAGE, handler)
        table.add_route(EVENT_MESSAGE, handler)
        assert len(table.routes_for(EVENT_MESSAGE)) == 2

    def test_lookup_is_a_snapshot(self):
        """Extending a returned lookup never changes the table."""
        table = RouteTable()
        route = table.add_route(EVENT_MESSAGE, lambda e: None)

        routes = table.routes_for(EVENT_MESSAGE)
        routes += (Route(EVENT_MESSAGE, lambda e: None),)
        everything = table.all_routes()
        everything += (Route(EVENT_MEMBER, lambda e: None),)

        assert isinstance(table.routes_for(EVENT_MESSAGE), tuple)
        assert table.routes_for(EVENT_MESSAGE) == (route,)
        assert table.all_routes() == (route,)
        assert EVENT_MEMBER not in table

    def test_later_registration_not_visible_in_old_lookup(self):
        """A lookup taken earlier keeps its contents after new routes are added."""
        table = RouteTable()
        first = table.add_route(EVENT_MESSAGE, lambda e: None)
        before = table.routes_for(EVENT_MESSAGE)

        table.add_route(EVENT_MESSAGE, lambda e: None)

        assert before == (first,)
        assert len(table.routes_for(EVENT_MESSAGE)) == 2


class TestRouterDispatch:
    """Test dispatch order and failure policy."""

    @pytest.mark.asyncio
    async def test_no_routes_is_noop(self, router, message):
        """An event with no routes runs nothing."""
        assert await router.handle(message) == 0

    @pytest.mark.asyncio
    async def test_handlers_run_in_registration_order(self, router, message):
        """Sync and async handlers run in registration order."""
        seen = []

        async def first(event):
            seen.append("first")

        def second(event):
            seen.append("second")

        async def third(event):
            seen.append("third")

        router.add_route(EVENT_MESSAGE, first)
        router.add_route(EVENT_MESSAGE, second)
        router.add_route(EVENT_MESSAGE, third)

        assert await router.handle(message) == 3
        assert seen == ["first", "second", "third"]

    @pytest.mark.asyncio
    async def test_only_matching_type_dispatched(self, router, message):
        """Only handlers for the event's type run."""
        seen = []
        router.add_route(EVENT_MEMBER, lambda e: seen.append("member"))
        router.add_route(EVENT_MESSAGE, lambda e: seen.append("message"))

        await router.handle(message)
        assert seen == ["message"]

    @pytest.mark.asyncio
    async def test_first_failure_stops_remaining_handlers(self, router, message):
        """The first failure stops later handlers and propagates as-is."""
        seen = []
        boom = RuntimeError("handler two failed")

        async def one(event):
            seen.append(1)

        async def two(event):
            seen.append(2)
            raise boom

        async def three(event):
            seen.append(3)

        for handler in (one, two, three):
            router.add_route(EVENT_MESSAGE, handler)

        with pytest.raises(RuntimeError) as excinfo:
            await router.handle(message)

        assert excinfo.value is boom
        assert seen == [1, 2]

    @pytest.mark.asyncio
    async def test_handler_receives_event_body(self, router, message):
        """Handlers see the event content."""
        received = []
        router.add_route(EVENT_MESSAGE, lambda e: received.append(e.body))

        await router.handle(message)
        assert received == ["hello"]

    @pytest.mark.asyncio
    async def test_event_is_not_mutated(self, router):
        """Dispatch leaves the event unchanged."""
        event = Event(type=EVENT_MESSAGE, sender="@a:x", content={"body": "hi"})
        router.add_route(EVENT_MESSAGE, lambda e: None)

        await router.handle(event)
        assert event == Event(type=EVENT_MESSAGE, sender="@a:x", content={"body": "hi"})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
