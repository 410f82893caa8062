"""Base transport interface for chat-protocol clients."""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional, Set

from roomfolks.events import Event

EventCallback = Callable[[Event], Awaitable[None]]


class Transport(ABC):
    """
    Abstract base class for chat-protocol clients.

    The bot host only needs a narrow slice of a client: a blocking sync
    loop that feeds a single event callback, room membership operations,
    and message sending. Implementations translate protocol failures into
    :class:`~roomfolks.errors.TransportError`.
    """

    def __init__(self):
        self._callback: Optional[EventCallback] = None
        self._running = False

    @property
    @abstractmethod
    def user_id(self) -> str:
        """Identity of the account this transport is logged in as."""

    def on_event(self, callback: EventCallback) -> None:
        """
        Register the single dispatch callback.

        Registering again replaces the previous callback.

        Args:
            callback: Coroutine function invoked once per received event.
        """
        self._callback = callback

    async def _emit(self, event: Event) -> None:
        """Hand one received event to the registered callback."""
        if self._callback is not None:
            await self._callback(event)

    @abstractmethod
    async def sync_forever(self) -> None:
        """
        Run the sync loop until it fails or the task is cancelled.

        Received events are passed to the registered callback one at a
        time, on the task running this coroutine.
        """

    @abstractmethod
    async def joined_rooms(self) -> Set[str]:
        """Return the IDs of the rooms the account is currently joined to."""

    @abstractmethod
    async def join_room(self, room_id: str) -> None:
        """Join a room by ID."""

    @abstractmethod
    async def leave_room(self, room_id: str) -> None:
        """Leave a room by ID."""

    @abstractmethod
    async def send_text(self, room_id: str, text: str) -> str:
        """
        Send a plain text message.

        Args:
            room_id: Target room.
            text: Message body.

        Returns:
            The event ID of the sent message.
        """

    @abstractmethod
    async def mark_read(self, room_id: str, event_id: str) -> None:
        """Move the read marker of ``room_id`` to ``event_id``."""

    async def close(self) -> None:
        """Release network resources. Default is a no-op."""

    @property
    def is_running(self) -> bool:
        """Check if the sync loop is running."""
        return self._running
