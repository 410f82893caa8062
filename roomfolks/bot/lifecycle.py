"""Bot lifecycle: plugin wiring, room reconciliation and sync supervision.

A bot moves through ``CONSTRUCTED -> RECONCILING -> EVENT_LOOP ->
TERMINATED`` exactly once. Restart policy belongs to the caller.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Iterable, List, Optional, Union

from loguru import logger

from roomfolks.errors import BotStateError, SyncError
from roomfolks.events import Event
from roomfolks.plugins.base import Plugin
from roomfolks.plugins.registry import PluginRegistry
from roomfolks.rooms.reconciler import ReconcileResult, RoomReconciler
from roomfolks.router.routes import Route, RouteHandler, Router, RouteTable
from roomfolks.transport.base import Transport


class BotState(Enum):
    """Bot lifecycle states."""
    CONSTRUCTED = "constructed"
    RECONCILING = "reconciling"
    EVENT_LOOP = "event_loop"
    TERMINATED = "terminated"


class Bot:
    """
    A bot instance bound to one transport.

    Responsibilities:
    - Initialize plugins so their routes exist before any event arrives
    - Align room membership with the configured rooms on startup
    - Run the transport's sync loop as a task and dispatch its events
    - Turn the end of the sync loop into the result of :meth:`run`
    """

    def __init__(
        self,
        transport: Transport,
        rooms: Iterable[str] = (),
        plugins: Union[PluginRegistry, Iterable[Plugin]] = (),
    ):
        """
        Build the bot and initialize its plugins, in order.

        Args:
            transport: Connected chat-protocol client.
            rooms: Room IDs the bot should be joined to.
            plugins: A frozen registry, or plugins to build one from.

        Raises:
            DuplicatePluginError: If two plugins share a name.
        """
        self.transport = transport
        self.rooms = frozenset(rooms)
        self.router = Router()
        self.reconciler = RoomReconciler(transport)

        self._state = BotState.CONSTRUCTED
        self._stop_event = asyncio.Event()
        self._sync_task: Optional[asyncio.Task] = None
        self.last_reconcile: Optional[ReconcileResult] = None

        registry = plugins if isinstance(plugins, PluginRegistry) else PluginRegistry.build(plugins)
        for plugin in registry:
            log = logger.bind(plugin=plugin.name)
            log.info(f"Initializing plugin {plugin.name}")
            plugin.init(self, log)
        self.plugin_names: List[str] = registry.names()

    @property
    def id(self) -> str:
        """User ID of the bot account."""
        return self.transport.user_id

    @property
    def state(self) -> BotState:
        return self._state

    @property
    def routes(self) -> RouteTable:
        return self.router.table

    def route(self, event_type: str, handler: RouteHandler) -> Route:
        """Register a handler for an event type."""
        return self.router.add_route(event_type, handler)

    async def send_text(self, room_id: str, text: str) -> str:
        """Send a text message to a room and return its event ID."""
        return await self.transport.send_text(room_id, text)

    async def mark_read(self, room_id: str, event_id: str) -> None:
        """Move the read marker of ``room_id`` to ``event_id``."""
        await self.transport.mark_read(room_id, event_id)

    def stop(self) -> None:
        """Ask a running bot to shut down. :meth:`run` then returns ``None``."""
        self._stop_event.set()

    async def run(self) -> None:
        """
        Reconcile rooms, then run the sync loop until it ends.

        Returns normally when the sync loop ends cleanly or :meth:`stop` is
        called. If the task running this coroutine is cancelled, the sync
        task is cancelled too and the cancellation propagates.

        Raises:
            ReconcileError: Room reconciliation failed; sync never started.
            SyncError: The sync loop failed; the failure is the ``__cause__``.
            BotStateError: The bot was already run.
        """
        if self._state is not BotState.CONSTRUCTED:
            raise BotStateError(f"bot cannot run from state {self._state.value}")

        self.transport.on_event(self._dispatch)

        self._state = BotState.RECONCILING
        try:
            self.last_reconcile = await self.reconciler.reconcile(self.rooms)
        except BaseException:
            self._state = BotState.TERMINATED
            raise

        self._state = BotState.EVENT_LOOP
        logger.info(f"Bot {self.id} entering event loop ({len(self.routes)} routes)")

        sync_task = asyncio.create_task(self.transport.sync_forever(), name="roomfolks-sync")
        stop_task = asyncio.create_task(self._stop_event.wait(), name="roomfolks-stop")
        self._sync_task = sync_task
        try:
            await asyncio.wait({sync_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            self._state = BotState.TERMINATED
            for task in (sync_task, stop_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(sync_task, stop_task, return_exceptions=True)

        # A sync failure outranks a concurrent stop request
        error = sync_task.exception() if sync_task.done() and not sync_task.cancelled() else None
        if error is not None:
            logger.error(f"Sync loop failed: {error}")
            raise SyncError(f"sync failed: {error}") from error

        if self._stop_event.is_set():
            logger.info(f"Bot {self.id} stopped")
            return

        if sync_task.cancelled():
            raise SyncError("sync task was cancelled") from asyncio.CancelledError()

        logger.info("Sync loop ended")

    async def _dispatch(self, event: Event) -> None:
        """Transport callback: route one event, then mark it read."""
        if self._state is not BotState.EVENT_LOOP:
            logger.debug(f"Dropping {event.type} event received in state {self._state.value}")
            return

        if event.sender == self.id:
            logger.trace(f"Ignoring own {event.type} event in {event.room_id}")
            return

        try:
            await self.router.handle(event)
        except Exception as e:
            logger.opt(exception=e).error(
                f"Handler failed for {event.type} event {event.id or '-'} "
                f"in {event.room_id or '-'} from {event.sender}: {e}"
            )
            return

        if event.is_room_event:
            try:
                await self.transport.mark_read(event.room_id, event.id)
            except Exception as e:
                logger.warning(f"Failed to mark {event.id} read in {event.room_id}: {e}")


__all__ = ["Bot", "BotState"]
